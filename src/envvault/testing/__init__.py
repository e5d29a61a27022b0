"""Shared test utilities, fixtures, and factories."""

from envvault.testing.factories import make_env_content, make_secret
from envvault.testing.fixtures import (
    create_fast_orchestrator,
    create_fast_service,
    fast_config,
)

__all__ = [
    "create_fast_orchestrator",
    "create_fast_service",
    "fast_config",
    "make_env_content",
    "make_secret",
]
