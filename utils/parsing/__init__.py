"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

from utils.parsing.episode_code import (
    parse_episode_code,
    parse_episode_code_text,
    strip_episode_suffix
)
from utils.parsing.html_extraction import (
    extract_embeds,
    extract_episode_cards,
    extract_episode_meta,
    extract_nonce,
    extract_post_id,
    extract_season_numbers,
    extract_series_episode_links,
    extract_series_meta,
    extract_series_url_from_breadcrumb,
    parse_season_episodes
)
from utils.parsing.link_resolver import EmbedResolver, is_video_url, needs_follow, classify_iframe
from utils.parsing.url_utils import normalize_url, normalize_host, is_same_host

__all__ = [
    'parse_episode_code',
    'parse_episode_code_text',
    'strip_episode_suffix',
    'extract_embeds',
    'extract_episode_cards',
    'extract_episode_meta',
    'extract_nonce',
    'extract_post_id',
    'extract_season_numbers',
    'extract_series_episode_links',
    'extract_series_meta',
    'extract_series_url_from_breadcrumb',
    'parse_season_episodes',
    'EmbedResolver',
    'is_video_url',
    'needs_follow',
    'classify_iframe',
    'normalize_url',
    'normalize_host',
    'is_same_host',
]
