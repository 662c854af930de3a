from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Type, TypeVar, Union

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from miraveja_ioc.domain import IApplicationContext

T = TypeVar("T")

STATE_ATTRIBUTE = "application_context"


def application_context_lifespan(context_factory: Callable[[], IApplicationContext]) -> Callable[[FastAPI], Any]:
    """Create a FastAPI lifespan that owns the application context.

    The context is built on startup, stored on ``app.state.application_context``
    and closed on shutdown, which runs the destroy callbacks of every bean.

    Args:
        context_factory: Builds the context, called once on startup.

    Returns:
        A lifespan usable as ``FastAPI(lifespan=...)``.

    Example:
        >>> app = FastAPI(lifespan=application_context_lifespan(lambda: AnnotationConfigApplicationContext(AppConfig)))
        >>> get_users = create_request_dependency(UserService)
        >>>
        >>> @app.get("/users")
        >>> async def list_users(service: UserService = Depends(get_users)):
        ...     return service.list_users()
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        context = context_factory()
        setattr(app.state, STATE_ATTRIBUTE, context)
        try:
            yield
        finally:
            context.close()

    return lifespan


def create_fastapi_dependency(context: IApplicationContext, bean: Union[str, Type[T]]) -> Callable[[], T]:
    """Create a FastAPI Depends() callable that returns a bean of the context.

    Args:
        context: The context to look the bean up in.
        bean: Bean name or type.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> context = AnnotationConfigApplicationContext(AppConfig)
        >>> get_user_repo = create_fastapi_dependency(context, UserRepository)
        >>>
        >>> @app.get("/users")
        >>> async def list_users(repo: UserRepository = Depends(get_user_repo)):
        ...     return repo.get_all()
    """

    def dependency() -> T:
        """Look the bean up in the context."""
        return context.get_bean(bean)

    return dependency


def create_request_dependency(bean: Union[str, Type[T]]) -> Callable[[Request], T]:
    """Create a FastAPI dependency that looks the bean up in the context attached to the request.

    The context is read from ``request.state`` (set by ApplicationContextMiddleware)
    and then from ``app.state`` (set by application_context_lifespan).

    Args:
        bean: Bean name or type.

    Returns:
        A callable that resolves from the request's context.
    """

    def request_dependency(request: Request) -> T:
        """Look the bean up in the request's context."""
        context = getattr(request.state, STATE_ATTRIBUTE, None) or getattr(request.app.state, STATE_ATTRIBUTE, None)
        if context is None:
            raise RuntimeError(
                "Request does not have an application context. "
                "Did you forget to add ApplicationContextMiddleware or application_context_lifespan?"
            )
        return context.get_bean(bean)

    return request_dependency


class ApplicationContextMiddleware(BaseHTTPMiddleware):
    """Middleware that exposes the application context on every request.

    The context is accessible via ``request.state.application_context``.

    Attributes:
        context: The application context shared by every request.

    Example:
        >>> context = AnnotationConfigApplicationContext(AppConfig)
        >>> app = FastAPI()
        >>> app.add_middleware(ApplicationContextMiddleware, context=context)
        >>>
        >>> @app.get("/")
        >>> async def root(request: Request):
        ...     greeter = request.state.application_context.get_bean("greeter")
        ...     return {"message": greeter.greet()}
    """

    def __init__(self, app: FastAPI, context: IApplicationContext):
        """Initialize the middleware.

        Args:
            app: The FastAPI/Starlette application.
            context: The application context to expose.
        """
        super().__init__(app)
        self.context = context

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Attach the context to the request and execute the endpoint."""
        setattr(request.state, STATE_ATTRIBUTE, self.context)
        return await call_next(request)
