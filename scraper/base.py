"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from exceptions import FetchError
from models.episode import SeriesEpisodeLink
from utils.parsing.url_utils import normalize_host

logger = logging.getLogger(__name__)


# Classe base para scrapers de sites de episódios
class BaseScraper(ABC):
    SCRAPER_TYPE: str = ''
    DEFAULT_BASE_URL: str = ''
    DISPLAY_NAME: str = ''

    def __init__(self, fetcher, base_url: Optional[str] = None):
        resolved_url = (base_url or self.DEFAULT_BASE_URL or '').strip()
        if resolved_url and not resolved_url.endswith('/'):
            resolved_url = f"{resolved_url}/"
        if not resolved_url:
            raise ValueError(
                f"{self.__class__.__name__} requer DEFAULT_BASE_URL definido ou um base_url explícito"
            )
        self.base_url = resolved_url
        self.fetcher = fetcher

    @property
    def source_host(self) -> Optional[str]:
        return normalize_host(self.base_url)

    def fetch_page(self, url: str, referer: Optional[str] = None) -> str:
        # Referer padrão: home do site
        return self.fetcher.fetch_text(url, referer=referer or self.base_url)

    def homepage_candidates(self) -> List[str]:
        return [self.base_url]

    def fetch_homepage(self) -> Tuple[str, str]:
        """
        Busca a home tentando cada URL candidata em ordem.

        Returns:
            Tupla (url usada, html)

        Raises:
            FetchError: se todas as candidatas falharem
        """
        last_error: Optional[FetchError] = None
        for candidate in self.homepage_candidates():
            try:
                html = self.fetch_page(candidate, referer=self.base_url)
            except FetchError as e:
                last_error = e
                logger.warning(f"Falha ao buscar home {candidate}: {e}")
                continue

            if candidate != self.base_url:
                logger.info(f"Usando home alternativa: {candidate}")
            return candidate, html

        raise last_error or FetchError("Todas as URLs da home falharam")

    @abstractmethod
    def series_url(self, series_slug: str) -> str:
        pass

    @abstractmethod
    def episode_url(self, series_slug: str, season: int, episode: int) -> str:
        pass

    @abstractmethod
    def derive_series_url(self, episode_url: str) -> Optional[str]:
        pass

    @abstractmethod
    def fetch_season_episodes(self, post_id: str, season: int, nonce: Optional[str] = None) -> List[SeriesEpisodeLink]:
        pass
