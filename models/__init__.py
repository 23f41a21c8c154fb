"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

from models.episode import (
    EpisodeCard,
    EpisodeCode,
    EpisodeRecord,
    EmbedCandidate,
    ResolvedServer,
    SeriesEpisodeLink,
    ServerOption,
    UpdateCheck
)
from models.proxy import ProxyEndpoint
from models.series import SeriesRecord

__all__ = [
    'EpisodeCard',
    'EpisodeCode',
    'EpisodeRecord',
    'EmbedCandidate',
    'ResolvedServer',
    'SeriesEpisodeLink',
    'ServerOption',
    'UpdateCheck',
    'ProxyEndpoint',
    'SeriesRecord',
]
