"""Fast configurations and service builders for tests."""

from envvault.security.config import Argon2Parameters, CryptoConfig
from envvault.security.envfile import EnvFileStore
from envvault.security.orchestrator import EncryptionOrchestrator
from envvault.security.service import CryptoService
from envvault.security.storage import EnvFileStorage


def fast_config(**overrides) -> CryptoConfig:
    """Create a CryptoConfig with cheap Argon2 parameters.

    Args:
        **overrides: Fields to override (e.g. strict_duplicates=True).

    Returns:
        CryptoConfig suitable for unit tests.
    """
    defaults = {
        "argon2": Argon2Parameters(memory_cost=1024, time_cost=1, parallelism=1),
    }
    defaults.update(overrides)
    return CryptoConfig(**defaults)


def create_fast_service(**overrides) -> CryptoService:
    """Create a CryptoService backed by :func:`fast_config`."""
    return CryptoService(fast_config(**overrides))


def create_fast_orchestrator(**overrides) -> EncryptionOrchestrator:
    """Create an EncryptionOrchestrator wired to a fast config.

    Args:
        **overrides: Config fields to override.

    Returns:
        EncryptionOrchestrator whose service, store and storage share one config.
    """
    config = fast_config(**overrides)
    store = EnvFileStore(config)
    return EncryptionOrchestrator(
        service=CryptoService(config),
        store=store,
        storage=EnvFileStorage(store),
    )
