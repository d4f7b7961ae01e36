"""CORS and cache headers for browser form submissions."""

from robyn import Response

from app.core.settings import settings as st
from app.middlewares.base import BaseMiddleware


def cors_headers(allow_origin: str = st.CORS_ALLOW_ORIGIN) -> dict[str, str]:
    """Headers a browser needs to POST a form cross-origin."""
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": "POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
        "Cache-Control": "no-cache",
    }


class CorsMiddleware(BaseMiddleware):
    """Adds CORS and no-cache headers to every response."""

    def __init__(self, endpoints: list[str] | None = None, allow_origin: str = st.CORS_ALLOW_ORIGIN) -> None:
        super().__init__(endpoints)
        self.headers = cors_headers(allow_origin)

    def after(self, response: Response) -> Response:
        for name, value in self.headers.items():
            response.headers.set(name, value)
        return response
