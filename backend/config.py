"""Application configuration."""

import os
from pathlib import Path

DATA_DIR = Path(os.environ.get("DATA_DIR", str(Path(__file__).parent.parent / "data")))
DATA_DIR.mkdir(parents=True, exist_ok=True)

FILES_DIR = DATA_DIR / "files"
FILES_DIR.mkdir(parents=True, exist_ok=True)

# Identifiers
ID_LENGTH = int(os.environ.get("RELAY_ID_LENGTH", "8"))

# Lifecycle
AUTO_DELETE_SECONDS = float(os.environ.get("RELAY_AUTO_DELETE_SECONDS", str(60 * 60 * 24)))

# 0 keeps the out-of-order chunk buffer unbounded
MAX_BUFFERED_CHUNKS = int(os.environ.get("RELAY_MAX_BUFFERED_CHUNKS", "0"))

# Link-preview crawlers would otherwise burn a download
UA_FILTER = os.environ.get("RELAY_UA_FILTER", r"(facebook|discord)")

# Server
HOST = os.environ.get("RELAY_HOST", "0.0.0.0")
PORT = int(os.environ.get("RELAY_PORT", "1880"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
