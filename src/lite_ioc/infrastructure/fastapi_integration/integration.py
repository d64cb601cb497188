import functools
import inspect
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional, Type, TypeVar

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from lite_ioc.application import ApplicationContainer
from lite_ioc.domain import IContainer

T = TypeVar("T")


def create_fastapi_dependency(
    container: IContainer, entity_name: str, expected_type: Optional[Type[T]] = None
) -> Callable[[], Any]:
    """Create a FastAPI Depends() callable that resolves a named entity.

    The resolved instance follows the entity's scope: the same object for
    singletons, a new one per request for prototypes.

    Args:
        container: The container to resolve from.
        entity_name: The name of the entity to resolve.
        expected_type: Optional type the instance must be an instance of.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> container = ApplicationContainer()
        >>> container.register("userRepository", EntityDefinition(target_type=UserRepository))
        >>>
        >>> get_user_repo = create_fastapi_dependency(container, "userRepository", UserRepository)
        >>>
        >>> @app.get("/users")
        >>> async def list_users(repo: UserRepository = Depends(get_user_repo)):
        ...     return await repo.get_all()
    """

    def dependency() -> Any:
        """Resolve the entity from the container."""
        return container.resolve(entity_name, expected_type)

    return dependency


def create_typed_dependency(container: IContainer, required_type: Type[T]) -> Callable[[], T]:
    """Create a FastAPI Depends() callable that resolves the single entity of a type.

    Example:
        >>> get_user_service = create_typed_dependency(container, UserService)
        >>>
        >>> @app.post("/users")
        >>> async def create_user(service: UserService = Depends(get_user_service)):
        ...     ...
    """

    def dependency() -> T:
        return container.resolve_by_type(required_type)

    return dependency


def create_request_dependency(entity_name: str, expected_type: Optional[Type[T]] = None) -> Callable[[Request], Any]:
    """Create a FastAPI dependency that resolves from the request's container.

    Requires the ContainerMiddleware to be installed.

    Args:
        entity_name: The name of the entity to resolve.
        expected_type: Optional type the instance must be an instance of.

    Returns:
        A callable that resolves from the container attached to the request.

    Example:
        >>> app.add_middleware(ContainerMiddleware, container=container)
        >>>
        >>> get_clock = create_request_dependency("clock")
        >>>
        >>> @app.get("/time")
        >>> async def now(clock: Clock = Depends(get_clock)):
        ...     return {"now": clock.now()}
    """

    def request_dependency(request: Request) -> Any:
        """Resolve from the request's container."""
        if not hasattr(request.state, "container"):
            raise RuntimeError("Request does not carry a container. Did you forget to add ContainerMiddleware?")
        container: IContainer = request.state.container
        return container.resolve(entity_name, expected_type)

    return request_dependency


class ContainerMiddleware(BaseHTTPMiddleware):
    """Middleware that exposes the container on every request.

    The container is accessible via `request.state.container`.

    Attributes:
        container: The container handed to request handlers.

    Example:
        >>> app = FastAPI()
        >>> app.add_middleware(ContainerMiddleware, container=container)
        >>>
        >>> @app.get("/")
        >>> async def root(request: Request):
        ...     service = request.state.container.resolve("greetingService")
        ...     return {"message": service.greet()}
    """

    def __init__(self, app: FastAPI, container: IContainer):
        """Initialize the middleware with a container.

        Args:
            app: The FastAPI/Starlette application.
            container: The container to expose.
        """
        super().__init__(app)
        self.container = container

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Attach the container to the request and execute the endpoint.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or endpoint handler.

        Returns:
            The response from the endpoint.
        """
        request.state.container = self.container
        return await call_next(request)


def container_lifespan(container: ApplicationContainer) -> Callable[[FastAPI], Any]:
    """Create a FastAPI lifespan that refreshes the container on startup and closes it on shutdown.

    Example:
        >>> app = FastAPI(lifespan=container_lifespan(container))
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        container.refresh()
        try:
            yield
        finally:
            container.close()

    return lifespan


def inject_dependencies(container: IContainer, *entity_names: str, **bindings: str) -> Callable:
    """Decorator that injects entities into a FastAPI endpoint function.

    Each positional name is injected into the parameter of the same name;
    keyword bindings map a parameter name to an entity name. Injected
    parameters are hidden from FastAPI's signature inspection, so they never
    turn into query parameters. Arguments passed explicitly are kept.

    Args:
        container: The container to resolve from.
        *entity_names: Entities injected into same-named parameters.
        **bindings: Parameter names mapped to entity names.

    Returns:
        A decorator function.

    Example:
        >>> @app.get("/users")
        >>> @inject_dependencies(container, user_service="userService")
        >>> async def list_users(user_service: UserService):
        ...     return await user_service.get_all()
    """
    targets: Dict[str, str] = {name: name for name in entity_names}
    targets.update(bindings)

    def decorator(func: Callable) -> Callable:
        """Wrap the function with injection logic."""
        signature = inspect.signature(func)
        missing = [param for param in targets if param not in signature.parameters]
        if missing:
            raise ValueError(f"{func.__name__}() has no parameter(s) named {', '.join(missing)}")

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            """Resolve entities and call the original function."""
            for param_name, entity_name in targets.items():
                if param_name not in kwargs:
                    kwargs[param_name] = container.resolve(entity_name)

            result = func(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result

        wrapper.__signature__ = signature.replace(
            parameters=[param for name, param in signature.parameters.items() if name not in targets]
        )
        return wrapper

    return decorator
