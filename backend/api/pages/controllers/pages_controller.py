"""Pages controller — HTML routes for the web UI."""

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import AUTO_DELETE_SECONDS

router = APIRouter(tags=["Pages"])

TEMPLATES_DIR = Path(__file__).parent.parent.parent.parent.parent / "templates"
templates = Jinja2Templates(directory=TEMPLATES_DIR)


def _duration(seconds: float) -> str:
    if seconds < 60:
        return f"{int(seconds)} seconds"
    if seconds < 3600:
        return f"{int(seconds // 60)} minutes"
    if seconds < 86400 * 2:
        return f"{int(seconds // 3600)} hours"
    return f"{int(seconds // 86400)} days"


templates.env.filters["duration"] = _duration


@router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    return templates.TemplateResponse(
        request,
        "index.html",
        {"auto_delete_seconds": AUTO_DELETE_SECONDS},
    )


async def not_found_handler(request: Request, exc: StarletteHTTPException):
    """Render 404s as a page for browsers, JSON for everything else."""
    if exc.status_code == 404 and "text/html" in request.headers.get("accept", ""):
        return templates.TemplateResponse(
            request,
            "404.html",
            {"detail": exc.detail},
            status_code=404,
        )
    return await http_exception_handler(request, exc)
