"""Guessing a client's address from behind two proxies."""

from werkzeug.wrappers import Request


def _forwarded_for(request: Request) -> list[str]:
    return request.headers.get("X-Forwarded-For", "").split(",")


def real_ip_if_unambiguous(request: Request) -> str:
    """The client address when exactly two proxies forwarded the request, else ''."""
    parts = _forwarded_for(request)
    if len(parts) == 2:
        return parts[0].strip()
    return ""


def real_ip_best_guess(request: Request) -> str:
    """The address the outer proxy saw, or the socket peer when not proxied."""
    parts = _forwarded_for(request)
    if len(parts) >= 2:
        return parts[-2].strip()
    return request.remote_addr or ""