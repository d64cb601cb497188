"""
FastAPI integration module.

Provides helpers for exposing lite-ioc entities to FastAPI endpoints.
"""

from .integration import (
    ContainerMiddleware,
    container_lifespan,
    create_fastapi_dependency,
    create_request_dependency,
    create_typed_dependency,
    inject_dependencies,
)

__all__ = [
    "create_fastapi_dependency",
    "create_typed_dependency",
    "create_request_dependency",
    "container_lifespan",
    "inject_dependencies",
    "ContainerMiddleware",
]
