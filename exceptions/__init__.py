"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

from exceptions.fetch_exceptions import (
    FetchError,
    FetchExhausted
)
from exceptions.resolver_exceptions import (
    ResolverError,
    ResolutionAbandoned
)
from exceptions.scraper_exceptions import (
    ScraperError,
    ConfigurationError,
    InvalidEpisodeUrlError
)
from exceptions.storage_exceptions import (
    StorageError,
    PersistenceFailure
)

__all__ = [
    'FetchError',
    'FetchExhausted',
    'ResolverError',
    'ResolutionAbandoned',
    'ScraperError',
    'ConfigurationError',
    'InvalidEpisodeUrlError',
    'StorageError',
    'PersistenceFailure',
]
