"""
Template rendering for the named presentation views.
"""

from pathlib import Path
from typing import Any, Dict

from fastapi import Request
from fastapi.templating import Jinja2Templates

templates_dir = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(templates_dir))


def render(request: Request, view: str, context: Dict[str, Any], status_code: int = 200):
    """Render ``<view>.html`` with the given context."""
    return templates.TemplateResponse(
        request, f"{view}.html", context, status_code=status_code
    )
