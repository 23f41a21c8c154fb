"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import re
from typing import Optional

from models.episode import EpisodeCode
from utils.parsing.url_utils import last_path_segment

# <slug>-<temporada>x<episódio>
_EPISODE_SLUG_REGEX = re.compile(r'^(?P<slug>.+)-(?P<season>\d+)x(?P<episode>\d+)$', re.IGNORECASE)
# Texto livre como "1x5" (listagens da API de temporadas)
_EPISODE_CODE_TEXT_REGEX = re.compile(r'(\d+)\s*x\s*(\d+)', re.IGNORECASE)


# Extrai o slug do episódio de uma URL ou devolve o próprio valor se já for slug
def _episode_slug(url_or_slug: str) -> Optional[str]:
    value = url_or_slug.strip()
    if '/' in value:
        return last_path_segment(value)
    return value or None


def _build_code(season: str, episode: str) -> Optional[EpisodeCode]:
    season_int = int(season)
    episode_int = int(episode)
    if season_int <= 0 or episode_int <= 0:
        return None
    return EpisodeCode(season=season_int, episode=episode_int)


# Converte "naruto-2x5" (ou URL terminando nele) em EpisodeCode(2, 5); None se não casar
def parse_episode_code(url_or_slug: Optional[str]) -> Optional[EpisodeCode]:
    if not url_or_slug:
        return None
    slug = _episode_slug(url_or_slug)
    if not slug:
        return None
    match = _EPISODE_SLUG_REGEX.match(slug)
    if not match:
        return None
    return _build_code(match.group('season'), match.group('episode'))


# Extrai código de um texto livre (ex: "1x5" no card da listagem)
def parse_episode_code_text(text: Optional[str]) -> Optional[EpisodeCode]:
    if not text:
        return None
    match = _EPISODE_CODE_TEXT_REGEX.search(text)
    if not match:
        return None
    return _build_code(match.group(1), match.group(2))


# Remove o sufixo -SxE de um slug de episódio
def strip_episode_suffix(slug: Optional[str]) -> Optional[str]:
    if not slug:
        return None
    match = _EPISODE_SLUG_REGEX.match(slug)
    if match:
        return match.group('slug')
    return slug
