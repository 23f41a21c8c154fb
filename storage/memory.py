"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import copy
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from storage.base import EpisodeStorage


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# Armazenamento em memória (testes e execução sem Supabase)
class MemoryStorage(EpisodeStorage):
    def __init__(self):
        self.series: Dict[str, Dict[str, Any]] = {}
        self.episodes: Dict[Tuple[str, int, int], Dict[str, Any]] = {}
        self.latest: Dict[Tuple[str, int, int], Dict[str, Any]] = {}
        self._sequence = 0

    def _touch(self) -> int:
        # Sequência garante ordem estável mesmo com timestamps iguais
        self._sequence += 1
        return self._sequence

    @staticmethod
    def _episode_key(row: Dict[str, Any]) -> Tuple[str, int, int]:
        return (row['series_slug'], int(row['season']), int(row['episode']))

    def upsert_series(self, row: Dict[str, Any]) -> Dict[str, Any]:
        merged = {**self.series.get(row['slug'], {}), **row}
        self.series[row['slug']] = merged
        return copy.deepcopy(merged)

    def get_series(self, slug: str) -> Optional[Dict[str, Any]]:
        row = self.series.get(slug)
        return copy.deepcopy(row) if row else None

    def upsert_episode(self, row: Dict[str, Any]) -> Dict[str, Any]:
        key = self._episode_key(row)
        merged = {**self.episodes.get(key, {}), **row}
        merged['updated_at'] = _now_iso()
        merged['_sequence'] = self._touch()
        self.episodes[key] = merged
        return self._public(merged)

    def get_episode(self, series_slug: str, season: int, episode: int) -> Optional[Dict[str, Any]]:
        row = self.episodes.get((series_slug, int(season), int(episode)))
        return self._public(row) if row else None

    def list_episodes(self, series_slug: str) -> List[Dict[str, Any]]:
        rows = [row for key, row in self.episodes.items() if key[0] == series_slug]
        rows.sort(key=lambda row: (row['season'], row['episode']))
        return [self._public(row) for row in rows]

    def upsert_latest(self, row: Dict[str, Any]) -> Dict[str, Any]:
        key = self._episode_key(row)
        merged = {**self.latest.get(key, {}), **row}
        merged['_sequence'] = self._touch()
        self.latest[key] = merged
        return self._public(merged)

    def recent_latest(self, limit: int) -> List[Dict[str, Any]]:
        rows = sorted(self.latest.values(), key=lambda row: (row.get('added_at') or '', row['_sequence']), reverse=True)
        return [self._public(row) for row in rows[:limit]]

    def recent_episodes(self, limit: int) -> List[Dict[str, Any]]:
        rows = sorted(self.episodes.values(), key=lambda row: row['_sequence'], reverse=True)
        return [self._public(row) for row in rows[:limit]]

    @staticmethod
    def _public(row: Dict[str, Any]) -> Dict[str, Any]:
        return {key: copy.deepcopy(value) for key, value in row.items() if not key.startswith('_')}
