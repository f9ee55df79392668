from .profile_cache import ProfileCache
from .rwlock import ReadWriteLock

__all__ = ["ProfileCache", "ReadWriteLock"]
