"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import logging
from typing import Any, Dict, List, Optional

import requests

from app.config import Config
from exceptions import PersistenceFailure
from storage.base import (
    EPISODE_CONFLICT_KEY,
    SERIES_CONFLICT_KEY,
    TABLE_EPISODES,
    TABLE_LATEST,
    TABLE_SERIES,
    EpisodeStorage,
)

logger = logging.getLogger(__name__)

EPISODE_CHECK_COLUMNS = 'series_slug,season,episode,servers,thumbnail,episode_main_poster'
LATEST_COLUMNS = 'series_slug,series_title,season,episode,episode_title,thumbnail,added_at'


class SupabaseRestStorage(EpisodeStorage):
    """
    Persistência via API REST do Supabase (PostgREST).

    Upserts usam on_conflict + Prefer: resolution=merge-duplicates; qualquer
    resposta fora de 2xx ou erro de rede vira PersistenceFailure.
    """

    def __init__(self, url: Optional[str] = None, key: Optional[str] = None,
                 session: Optional[requests.Session] = None, timeout: int = 15):
        self.url = (url or Config.SUPABASE_URL or '').rstrip('/')
        self.key = key or Config.SUPABASE_SERVICE_ROLE_KEY or ''

        if not self.url or not self.key:
            raise ValueError("SUPABASE_URL e SUPABASE_SERVICE_ROLE_KEY devem estar configurados")

        self.session = session or requests.Session()
        self.timeout = timeout
        self.headers = {
            'apikey': self.key,
            'Authorization': f'Bearer {self.key}',
            'Content-Type': 'application/json',
            'Prefer': 'return=representation'
        }
        self.base_url = f"{self.url}/rest/v1"

    def _request(self, method: str, table: str, params: Optional[Dict[str, Any]] = None,
                 json_body: Optional[Any] = None, prefer: Optional[str] = None) -> List[Dict[str, Any]]:
        headers = dict(self.headers)
        if prefer:
            headers['Prefer'] = prefer

        try:
            response = self.session.request(
                method,
                f"{self.base_url}/{table}",
                headers=headers,
                params=params,
                json=json_body,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise PersistenceFailure(table, f"{type(e).__name__}: {str(e)[:100]}") from e

        if response.status_code not in (200, 201, 204, 206):
            raise PersistenceFailure(table, (response.text or '')[:200], response.status_code)

        if response.status_code == 204 or not response.content:
            return []

        try:
            data = response.json()
        except ValueError as e:
            raise PersistenceFailure(table, "resposta JSON inválida", response.status_code) from e

        if isinstance(data, dict):
            return [data]
        return data or []

    def _upsert(self, table: str, row: Dict[str, Any], conflict: str) -> Dict[str, Any]:
        data = self._request(
            'POST',
            table,
            params={'on_conflict': conflict},
            json_body=row,
            prefer='resolution=merge-duplicates,return=representation'
        )
        return data[0] if data else dict(row)

    def _select(self, table: str, filters: Dict[str, Any], columns: str = '*',
                order: Optional[str] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        params = {'select': columns}
        for column, value in filters.items():
            params[column] = f'eq.{value}'
        if order:
            params['order'] = order
        if limit:
            params['limit'] = limit
        return self._request('GET', table, params=params)

    def upsert_series(self, row: Dict[str, Any]) -> Dict[str, Any]:
        logger.debug(f"Supabase: upsert série {row.get('slug')}")
        return self._upsert(TABLE_SERIES, row, SERIES_CONFLICT_KEY)

    def get_series(self, slug: str) -> Optional[Dict[str, Any]]:
        rows = self._select(TABLE_SERIES, {'slug': slug}, limit=1)
        return rows[0] if rows else None

    def upsert_episode(self, row: Dict[str, Any]) -> Dict[str, Any]:
        logger.debug(f"Supabase: upsert episódio {row.get('series_slug')} S{row.get('season')}E{row.get('episode')} ({len(row.get('servers') or [])} servidores)")
        return self._upsert(TABLE_EPISODES, row, EPISODE_CONFLICT_KEY)

    def get_episode(self, series_slug: str, season: int, episode: int) -> Optional[Dict[str, Any]]:
        rows = self._select(
            TABLE_EPISODES,
            {'series_slug': series_slug, 'season': season, 'episode': episode},
            columns=EPISODE_CHECK_COLUMNS,
            limit=1
        )
        return rows[0] if rows else None

    def list_episodes(self, series_slug: str) -> List[Dict[str, Any]]:
        return self._select(
            TABLE_EPISODES,
            {'series_slug': series_slug},
            columns=EPISODE_CHECK_COLUMNS,
            order='season.asc,episode.asc'
        )

    def upsert_latest(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return self._upsert(TABLE_LATEST, row, EPISODE_CONFLICT_KEY)

    def recent_latest(self, limit: int) -> List[Dict[str, Any]]:
        return self._select(TABLE_LATEST, {}, columns=LATEST_COLUMNS, order='added_at.desc', limit=limit)

    def recent_episodes(self, limit: int) -> List[Dict[str, Any]]:
        return self._select(TABLE_EPISODES, {}, columns=EPISODE_CHECK_COLUMNS, order='updated_at.desc', limit=limit)
