"""Integration tests for serving container entities from a FastAPI application."""

import pytest

pytest.importorskip("fastapi")

from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from lite_ioc import ApplicationContainer, EntityDefinition, EntityReference, Scope
from lite_ioc.infrastructure.fastapi_integration import (
    ContainerMiddleware,
    container_lifespan,
    create_fastapi_dependency,
    create_request_dependency,
    create_typed_dependency,
    inject_dependencies,
)


class GreetingRepository:
    def __init__(self):
        self.started = False
        self.closed = False

    def after_properties_set(self):
        self.started = True

    def destroy(self):
        self.closed = True

    def greeting(self):
        return "hello"


class GreetingService:
    def __init__(self, repository):
        self.repository = repository

    def greet(self, name):
        return f"{self.repository.greeting()} {name}"


class RequestCounter:
    def __init__(self):
        self.hits = 0

    def hit(self):
        self.hits += 1
        return self.hits


def build_container():
    container = ApplicationContainer()
    container.register("greetingRepository", EntityDefinition(target_type=GreetingRepository))
    container.register(
        "greetingService",
        EntityDefinition(
            target_type=GreetingService,
            constructor_arguments=[EntityReference(entity_name="greetingRepository")],
        ),
    )
    container.register("requestCounter", EntityDefinition(target_type=RequestCounter, scope=Scope.PROTOTYPE))
    return container


class TestFastAPIApplication:
    """Test a FastAPI application wired to a container."""

    def test_named_dependency(self):
        """Test that an endpoint receives a named entity."""
        container = build_container()
        app = FastAPI()
        get_service = create_fastapi_dependency(container, "greetingService", GreetingService)

        @app.get("/greet/{name}")
        def greet(name: str, service=Depends(get_service)):
            return {"message": service.greet(name)}

        with TestClient(app) as client:
            response = client.get("/greet/ada")

        assert response.status_code == 200
        assert response.json() == {"message": "hello ada"}

    def test_typed_dependency(self):
        """Test that an endpoint receives the single entity of a type."""
        container = build_container()
        app = FastAPI()

        @app.get("/greeting")
        def greeting(repository=Depends(create_typed_dependency(container, GreetingRepository))):
            return {"greeting": repository.greeting()}

        with TestClient(app) as client:
            assert client.get("/greeting").json() == {"greeting": "hello"}

    def test_prototype_built_per_request(self):
        """Test that prototype entities are created anew on every request."""
        container = build_container()
        app = FastAPI()
        get_counter = create_fastapi_dependency(container, "requestCounter")

        @app.get("/hits")
        def hits(counter=Depends(get_counter)):
            return {"hits": counter.hit()}

        with TestClient(app) as client:
            first = client.get("/hits").json()
            second = client.get("/hits").json()

        assert first == second == {"hits": 1}

    def test_middleware_exposes_container(self):
        """Test that the middleware attaches the container to every request."""
        container = build_container()
        app = FastAPI()
        app.add_middleware(ContainerMiddleware, container=container)
        get_service = create_request_dependency("greetingService")

        @app.get("/greet")
        def greet(request: Request, service=Depends(get_service)):
            return {"same": request.state.container is container, "message": service.greet("bob")}

        with TestClient(app) as client:
            response = client.get("/greet")

        assert response.json() == {"same": True, "message": "hello bob"}

    def test_request_dependency_without_middleware(self):
        """Test that a request dependency fails when no container is attached."""
        app = FastAPI()

        @app.get("/greet")
        def greet(service=Depends(create_request_dependency("greetingService"))):
            return {}

        with TestClient(app, raise_server_exceptions=True) as client:
            with pytest.raises(RuntimeError, match="ContainerMiddleware"):
                client.get("/greet")

    def test_lifespan_refreshes_and_closes(self):
        """Test that the lifespan eagerly creates singletons and destroys them on shutdown."""
        container = build_container()
        app = FastAPI(lifespan=container_lifespan(container))

        with TestClient(app):
            repository = container.resolve("greetingRepository")
            assert repository.started

        assert repository.closed

    def test_injected_endpoint(self):
        """Test that injected parameters are filled by the container and hidden from the query."""
        container = build_container()
        app = FastAPI()

        @app.get("/hello")
        @inject_dependencies(container, service="greetingService")
        async def hello(name: str, service):
            return {"message": service.greet(name)}

        with TestClient(app) as client:
            response = client.get("/hello", params={"name": "eve"})

        assert response.status_code == 200
        assert response.json() == {"message": "hello eve"}
