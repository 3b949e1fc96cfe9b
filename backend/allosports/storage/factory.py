"""
Storage Factory

Picks the storage implementation named by the configuration.
"""
from allosports.config import Settings
from .base import Storage
from .memory import MemoryStorage
from .tortoise_store import TortoiseStorage

BACKENDS = ("memory", "database")


def build_storage(config: Settings) -> Storage:
    """
    Build the storage backend named by `config.storage_backend`.

    - "memory":   MemoryStorage (ephemeral, in-process)
    - "database": TortoiseStorage on config.database_url

    Raises:
        ValueError: for any other backend name
    """
    backend = config.storage_backend.lower()
    if backend == "memory":
        return MemoryStorage()
    if backend == "database":
        return TortoiseStorage(config.database_url, generate_schemas=config.generate_schemas)
    raise ValueError(f"Unknown STORAGE_BACKEND {config.storage_backend!r}; expected one of {BACKENDS}")
