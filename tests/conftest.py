"""Shared test configuration and fixtures."""

import pytest

from envvault.security import CryptoConfig, CryptoService, EncryptionOrchestrator
from envvault.testing import create_fast_orchestrator, fast_config, make_secret


@pytest.fixture
def config() -> CryptoConfig:
    """Crypto config with cheap Argon2 parameters."""
    return fast_config()


@pytest.fixture
def service(config: CryptoConfig) -> CryptoService:
    """CryptoService using the fast config."""
    return CryptoService(config)


@pytest.fixture
def orchestrator() -> EncryptionOrchestrator:
    """EncryptionOrchestrator using the fast config."""
    return create_fast_orchestrator()


@pytest.fixture
def secret() -> str:
    """A valid secret key."""
    return make_secret()


@pytest.fixture
def other_secret() -> str:
    """A second valid secret key, different from ``secret``."""
    return make_secret("-rotated")
