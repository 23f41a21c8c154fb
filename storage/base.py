"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

TABLE_SERIES = 'series'
TABLE_EPISODES = 'episodes'
TABLE_LATEST = 'latest_episodes'

EPISODE_CONFLICT_KEY = 'series_slug,season,episode'
SERIES_CONFLICT_KEY = 'slug'


# Interface de persistência de séries, episódios e feed de últimos episódios
class EpisodeStorage(ABC):
    @abstractmethod
    def upsert_series(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insere ou atualiza uma série (chave: slug)"""
        pass

    @abstractmethod
    def get_series(self, slug: str) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def upsert_episode(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insere ou atualiza um episódio (chave: series_slug, season, episode)"""
        pass

    @abstractmethod
    def get_episode(self, series_slug: str, season: int, episode: int) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def list_episodes(self, series_slug: str) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def upsert_latest(self, row: Dict[str, Any]) -> Dict[str, Any]:
        pass

    @abstractmethod
    def recent_latest(self, limit: int) -> List[Dict[str, Any]]:
        """Entradas mais recentes do feed (added_at decrescente)"""
        pass

    @abstractmethod
    def recent_episodes(self, limit: int) -> List[Dict[str, Any]]:
        """Episódios atualizados mais recentemente (updated_at decrescente)"""
        pass
