from .config import settings
from .storage import get_storage, init_storage

__all__ = ["settings", "get_storage", "init_storage"]
