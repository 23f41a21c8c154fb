"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import logging
from typing import List, Optional

from app.config import Config
from exceptions import FetchError
from models.episode import SeriesEpisodeLink
from scraper.base import BaseScraper
from utils.parsing.episode_code import strip_episode_suffix
from utils.parsing.html_extraction import parse_season_episodes
from utils.parsing.url_utils import last_path_segment

logger = logging.getLogger(__name__)

SEASON_ACTION = 'action_select_season'


# Scraper específico para Toonstream (WordPress + tema dooplay)
class ToonstreamScraper(BaseScraper):
    SCRAPER_TYPE = 'toonstream'
    DEFAULT_BASE_URL = 'https://toonstream.one/'
    DISPLAY_NAME = 'Toonstream'

    def __init__(self, fetcher, base_url: Optional[str] = None, ajax_url: Optional[str] = None,
                 fallbacks: Optional[List[str]] = None):
        super().__init__(fetcher, base_url or Config.HOME_URL)
        self.ajax_url = ajax_url or (Config.AJAX_URL if base_url is None else f"{self.base_url}wp-admin/admin-ajax.php")
        self.fallbacks = Config.HOME_FALLBACKS if fallbacks is None else fallbacks

    def homepage_candidates(self) -> List[str]:
        # Principal, alternativas do ambiente e padrões do tema, sem duplicatas
        candidates = [self.base_url, *self.fallbacks, f"{self.base_url}home/", f"{self.base_url}page/1/"]
        return list(dict.fromkeys(candidates))

    def series_url(self, series_slug: str) -> str:
        return f"{self.base_url}series/{series_slug}/"

    def episode_url(self, series_slug: str, season: int, episode: int) -> str:
        return f"{self.base_url}episode/{series_slug}-{season}x{episode}/"

    def derive_series_url(self, episode_url: str) -> Optional[str]:
        # /episode/naruto-2x5/ -> /series/naruto/
        episode_slug = last_path_segment(episode_url)
        if not episode_slug:
            return None
        return self.series_url(strip_episode_suffix(episode_slug) or episode_slug)

    def fetch_season_episodes(self, post_id: str, season: int, nonce: Optional[str] = None) -> List[SeriesEpisodeLink]:
        # Lista de episódios de uma temporada via admin-ajax (falha retorna lista vazia)
        if not post_id or not season:
            return []

        data = {
            'action': SEASON_ACTION,
            'season': str(season),
            'post': str(post_id),
        }
        if nonce:
            data['nonce'] = nonce
            data['_wpnonce'] = nonce

        try:
            html = self.fetcher.post_form(self.ajax_url, data, referer=self.base_url)
        except FetchError as e:
            logger.warning(f"Falha ao buscar episódios da temporada {season} (post {post_id}): {e}")
            return []

        if not html:
            return []
        return parse_season_episodes(html, self.base_url)
