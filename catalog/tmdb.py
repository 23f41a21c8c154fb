"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import logging
from typing import Any, Dict, List, Optional

import requests

from app.config import Config
from cache.catalog_cache import CatalogCache
from utils.text.cleaning import catalog_query_variants

logger = logging.getLogger(__name__)

MEDIA_TV = 'tv'
MEDIA_MOVIE = 'movie'
_MAX_EXTRA_IMAGES = 5
_MIN_API_KEY_LENGTH = 20


class TMDBClient:
    """Cliente do catálogo TMDB (busca por título e detalhes com imagens).

    Resultados de busca, buscas sem resultado e detalhes ficam em cache
    (Redis se disponível, memória caso contrário). Chave inválida
    (HTTP 401) desativa o cliente até o fim do processo.
    """

    def __init__(self, api_key: Optional[str] = None, session: Optional[requests.Session] = None,
                 cache: Optional[CatalogCache] = None, base_url: Optional[str] = None,
                 image_base: Optional[str] = None, timeout: int = 15):
        self.api_key = (api_key or Config.TMDB_API_KEY or '').strip()
        self.session = session or requests.Session()
        self.cache = cache or CatalogCache()
        self.base_url = (base_url or Config.TMDB_BASE_URL).rstrip('/')
        self.image_base = image_base or Config.TMDB_IMAGE_BASE
        self.timeout = timeout
        self.disabled = False

        if len(self.api_key) < _MIN_API_KEY_LENGTH:
            logger.warning("TMDB_API_KEY ausente ou inválida (muito curta) - catálogo desativado")
            self.disabled = True

    def _get_json(self, path: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        query = {'api_key': self.api_key, 'language': 'en-US', **params}
        try:
            response = self.session.get(f"{self.base_url}{path}", params=query, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"TMDB erro de requisição: {type(e).__name__} - {str(e)[:100]}")
            return None

        if response.status_code == 401:
            logger.error("TMDB_API_KEY inválida ou expirada - catálogo desativado")
            self.disabled = True
            return None
        if response.status_code != 200:
            logger.warning(f"TMDB API erro: {response.status_code} ({path})")
            return None

        try:
            return response.json()
        except ValueError:
            logger.warning(f"TMDB resposta inválida ({path})")
            return None

    def search(self, title: str, media_type: str = MEDIA_TV) -> Optional[int]:
        if self.disabled or not title:
            return None

        cached = self.cache.get_search(media_type, title)
        if cached:
            return cached
        if self.cache.is_miss(media_type, title):
            return None

        data = self._get_json(f"/search/{media_type}", {'query': title})
        if data is None:
            return None

        results = data.get('results') or []
        if not results:
            logger.debug(f"TMDB: nenhum resultado para \"{title}\"")
            self.cache.set_miss(media_type, title)
            return None

        first = results[0]
        logger.debug(f"TMDB: {len(results)} resultado(s) para \"{title}\", usando \"{first.get('name') or first.get('title')}\"")
        self.cache.set_search(media_type, title, first['id'])
        return first['id']

    def _image_urls(self, primary: Optional[str], extra: List[Dict]) -> List[str]:
        urls = []
        if primary:
            urls.append(f"{self.image_base}{primary}")
        for image in (extra or [])[:_MAX_EXTRA_IMAGES]:
            file_path = image.get('file_path')
            if not file_path:
                continue
            src = f"{self.image_base}{file_path}"
            if src not in urls:
                urls.append(src)
        return urls

    def fetch_details(self, catalog_id: int, media_type: str = MEDIA_TV) -> Optional[Dict[str, Any]]:
        if self.disabled or not catalog_id:
            return None

        cached = self.cache.get_details(media_type, catalog_id)
        if cached:
            return cached

        data = self._get_json(f"/{media_type}/{catalog_id}", {'append_to_response': 'images'})
        if not data:
            return None

        images = data.get('images') or {}
        posters = self._image_urls(data.get('poster_path'), images.get('posters'))
        backdrops = self._image_urls(data.get('backdrop_path'), images.get('backdrops'))

        details = {
            'tmdb_id': data.get('id'),
            'title': data.get('name') or data.get('title'),
            'description': data.get('overview') or None,
            'rating': round(float(data['vote_average']), 2) if data.get('vote_average') else None,
            'popularity': round(float(data['popularity']), 3) if data.get('popularity') else None,
            'status': data.get('status') or None,
            'genres': [genre.get('name') for genre in data.get('genres') or [] if genre.get('name')],
            'studios': [company.get('name') for company in data.get('production_companies') or [] if company.get('name')],
            'release_date': data.get('first_air_date') or data.get('release_date') or None,
            'total_seasons': data.get('number_of_seasons') or None,
            'total_episodes': data.get('number_of_episodes') or None,
            'runtime': data.get('runtime') or None,
            'posters': posters,
            'backdrops': backdrops,
            'poster': posters[0] if posters else None,
            'banner_image': backdrops[0] if backdrops else None,
        }

        self.cache.set_details(media_type, catalog_id, details)
        return details

    def lookup(self, title: Optional[str], media_type: str = MEDIA_TV) -> Optional[Dict[str, Any]]:
        # Tenta as variações do título até encontrar um ID
        for query in catalog_query_variants(title):
            if self.disabled:
                return None
            catalog_id = self.search(query, media_type)
            if catalog_id:
                logger.info(f"TMDB: \"{query}\" -> ID {catalog_id}")
                return self.fetch_details(catalog_id, media_type)

        if title:
            logger.info(f"TMDB: sem resultado para \"{title}\"")
        return None
