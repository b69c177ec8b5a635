"""
Jinja2 page rendering.
"""

from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from greatforums.core.config import settings

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render(
    request: Request,
    name: str,
    context: dict[str, Any] | None = None,
    status_code: int = 200,
) -> Response:
    """Render template with the common page context."""
    page = {"app_name": settings.app_name, "user": None, "message": ""}
    page.update(context or {})
    return templates.TemplateResponse(
        request, name, page, status_code=status_code
    )
