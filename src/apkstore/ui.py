from __future__ import annotations

from datetime import datetime

from fastapi.templating import Jinja2Templates

from .catalog import rounded_stars
from .config import settings
from .utils import format_category_name


templates = Jinja2Templates(directory=str(settings.templates_dir))


def format_date(value: datetime | None) -> str:
    if value is None:
        return ""
    return f"{value:%b} {value.day}, {value:%Y}"


def thousands(value: int | None) -> str:
    return f"{value or 0:,}"


def paragraphs(text: str | None) -> list[str]:
    return [line for line in (text or "").split("\n") if line.strip()]


templates.env.filters["stars"] = rounded_stars
templates.env.filters["date"] = format_date
templates.env.filters["thousands"] = thousands
templates.env.filters["paragraphs"] = paragraphs
templates.env.filters["category_name"] = format_category_name
templates.env.globals["app_name"] = settings.app_name


def render(request, name: str, context: dict | None = None, *, user=None, status_code: int = 200):
    page = {
        "current_user": user,
        "message": request.query_params.get("message"),
        "error": request.query_params.get("error"),
    }
    page.update(context or {})
    return templates.TemplateResponse(request, name, page, status_code=status_code)
