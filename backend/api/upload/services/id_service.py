"""Identifier generation."""

import secrets
import string
from typing import Container

from config import ID_LENGTH

ALPHABET = string.ascii_letters


def generate_id(length: int = ID_LENGTH) -> str:
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def generate_unique_id(taken: Container[str], length: int = ID_LENGTH) -> str:
    """Draw identifiers until one is not already registered."""
    while True:
        file_id = generate_id(length)
        if file_id not in taken:
            return file_id
