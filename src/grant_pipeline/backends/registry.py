from __future__ import annotations

import logging
from typing import Callable

from grant_pipeline.config import BackendSettings

from .base import TableClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[[BackendSettings], TableClient]

_REGISTRY: dict[str, ClientFactory] = {}


class BackendRegistrationError(ValueError):
    """Raised for unknown or clashing backend types."""


def _backend_key(backend_type: str) -> str:
    return backend_type.strip().lower()


def register_backend(backend_type: str) -> Callable[[ClientFactory], ClientFactory]:
    """Register a table client factory under a case-insensitive backend type.

    Each type may be claimed by one factory only.
    """
    key = _backend_key(backend_type)
    if not key:
        raise BackendRegistrationError("Backend type must be a non-empty string")

    def decorator(factory: ClientFactory) -> ClientFactory:
        existing = _REGISTRY.get(key)
        if existing is not None and existing is not factory:
            raise BackendRegistrationError(f"Backend type '{key}' is already registered")
        _REGISTRY[key] = factory
        return factory

    return decorator


def create_client(settings: BackendSettings) -> TableClient:
    key = _backend_key(settings.type)
    factory = _REGISTRY.get(key)
    if factory is None:
        available = ", ".join(sorted(_REGISTRY)) or "none"
        raise BackendRegistrationError(
            f"Unknown backend type '{settings.type}'. Registered backend types: {available}"
        )

    client = factory(settings)
    logger.debug(
        "Created %s table client (configured=%s, url from %s)",
        key,
        client.is_configured(),
        settings.url_env_var,
    )
    return client


def registered_backend_types() -> list[str]:
    return sorted(_REGISTRY)
