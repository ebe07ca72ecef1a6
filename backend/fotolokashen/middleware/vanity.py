"""Vanity URL rewrite: /@<username>[/...] is served as /<username>[/...].

Plain ASGI so the rewritten path is what the router sees. Only the
path changes; query string and headers pass through untouched.
"""

from starlette.types import ASGIApp, Receive, Scope, Send

VANITY_PREFIX = "/@"


def rewrite_vanity_path(path: str) -> str | None:
    """Return the rewritten path, or None when `path` is not a vanity URL."""
    if not path.startswith(VANITY_PREFIX) or len(path) == len(VANITY_PREFIX):
        return None
    return "/" + path[len(VANITY_PREFIX):]


class VanityURLMiddleware:
    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            rewritten = rewrite_vanity_path(scope["path"])
            if rewritten is not None:
                scope = dict(scope)
                scope["path"] = rewritten
                raw_path = scope.get("raw_path")
                if raw_path and raw_path.startswith(b"/@"):
                    # Keep the client's percent-encoding
                    scope["raw_path"] = b"/" + raw_path[2:]
                else:
                    scope["raw_path"] = rewritten.encode("utf-8")
        await self.app(scope, receive, send)
