"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

from cache.redis_client import init_redis, get_redis_client
from cache.catalog_cache import CatalogCache

__all__ = [
    'init_redis',
    'get_redis_client',
    'CatalogCache',
]
