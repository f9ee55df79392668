"""User profile service.

CRUD and substring search over user profile records, backed by a relational
store and accelerated by an in-process read-through cache.
"""

__version__ = "0.1.0"
