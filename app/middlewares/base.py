"""Base middleware architecture for Robyn applications."""

from abc import ABC
from collections.abc import Callable, Iterable

from robyn import Request, Response, Robyn

from app.core.logger import LogIcon, logger


class BaseMiddleware(ABC):
    """Abstract base class for middlewares with before/after hooks.

    An empty ``endpoints`` set registers the hooks globally, for every route and method.
    """

    endpoints: frozenset[str] = frozenset()

    def __init__(self, endpoints: Iterable[str] | None = None) -> None:
        if endpoints is not None:
            self.endpoints = frozenset(endpoints)

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if cls.before is BaseMiddleware.before and cls.after is BaseMiddleware.after:
            raise TypeError(f"{cls.__name__} must implement at least one of before/after")

    def before(self, request: Request) -> Request | Response:
        """Called before request handling. Return Request to continue or Response to short-circuit."""
        return request

    def after(self, response: Response) -> Response:
        """Called after request handling. Return modified Response."""
        return response


class MiddlewareHandler:
    """Manages middleware registration for a Robyn application."""

    def __init__(self, app: Robyn) -> None:
        self._app = app
        self._middlewares: list[BaseMiddleware] = []

    @property
    def middlewares(self) -> list[BaseMiddleware]:
        return self._middlewares

    def register(self, middleware: BaseMiddleware) -> "MiddlewareHandler":
        """Register a middleware instance. Returns self for chaining."""
        self._middlewares.append(middleware)
        self._apply_middleware(middleware)
        logger.info(f"Registered middleware: {middleware.__class__.__name__}", icon=LogIcon.ADAPTER)
        return self

    def _apply_middleware(self, middleware: BaseMiddleware) -> None:
        """Apply middleware to its endpoints, or globally when it names none."""
        endpoints = middleware.endpoints or (None,)
        has_before = type(middleware).before is not BaseMiddleware.before
        has_after = type(middleware).after is not BaseMiddleware.after

        for endpoint in endpoints:
            if has_before:
                self._register_before(endpoint, middleware.before)
            if has_after:
                self._register_after(endpoint, middleware.after)

    def _register_before(self, endpoint: str | None, handler: Callable) -> None:
        """Register a before_request handler for an endpoint, or every route when None."""
        @self._app.before_request(endpoint)
        async def before_wrapper(request: Request) -> Request | Response:
            return handler(request)

    def _register_after(self, endpoint: str | None, handler: Callable) -> None:
        """Register an after_request handler for an endpoint, or every route when None."""
        @self._app.after_request(endpoint)
        def after_wrapper(response: Response) -> Response:
            return handler(response)
