# Upload storage backends

from .local_storage import LocalStorage
from .memory_storage import InMemoryStorage
from .minio_storage import MinIOStorage

__all__ = [
    "LocalStorage",
    "InMemoryStorage",
    "MinIOStorage",
]
