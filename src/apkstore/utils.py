from __future__ import annotations

from urllib.parse import quote, urlencode, urlsplit, urlunsplit

from fastapi import Request


def get_client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


def with_notice(url: str, *, message: str | None = None, error: str | None = None) -> str:
    """Attach a transient notification to a redirect target."""
    params = {}
    if message:
        params["message"] = message
    if error:
        params["error"] = error
    if not params:
        return url
    parts = urlsplit(url)
    query = "&".join(filter(None, [parts.query, urlencode(params)]))
    return urlunsplit(parts._replace(query=query))


def safe_next(target: str | None, default: str = "/") -> str:
    if not target or not target.startswith("/") or target.startswith("//"):
        return default
    return target


def login_url(next_path: str) -> str:
    return f"/login?next={quote(next_path, safe='/')}"


def format_category_name(category: str) -> str:
    return category[:1].upper() + category[1:]
