"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import re

# ranma1-2 / ranma-1-2 -> ranma 1/2
REGEX_HALF_FRACTION = re.compile(r'(\w+)1[-/]2', re.IGNORECASE)
REGEX_HALF_FRACTION_DASHED = re.compile(r'(\w+)-1[-/]2', re.IGNORECASE)
REGEX_HALF_FRACTION_SLUG_END = re.compile(r'(\w+)1-2$', re.IGNORECASE)

# Informação de temporada/episódio
REGEX_SEASON_WITH_SEPARATOR = re.compile(r'[:\-–—]+\s*Season\s*\d+', re.IGNORECASE)
REGEX_SEASON_WORD = re.compile(r'\s*Season\s*\d+', re.IGNORECASE)
REGEX_SEASON_EPISODE = re.compile(r'\s*S\d+E?\d*', re.IGNORECASE)
REGEX_EPISODE_CODE = re.compile(r'\s*\d+x\d+', re.IGNORECASE)
REGEX_EPISODE_CODE_SUFFIX = re.compile(r'-\d+x\d+$', re.IGNORECASE)

# Tags de idioma e qualidade
REGEX_LANGUAGE_TAGS = re.compile(r'\s*(Hindi Dub|Dubbed|Subbed|Dub|Sub|English|Japanese|Hindi)\s*', re.IGNORECASE)
REGEX_QUALITY_TAGS = re.compile(r'\s*(1080p|720p|480p|HD|4K)\s*', re.IGNORECASE)

REGEX_PARENTHESES = re.compile(r'\([^)]*\)')
REGEX_BRACKETS = re.compile(r'\[[^\]]*\]')
REGEX_MULTIPLE_SPACES = re.compile(r'\s+')

# Sufixos comuns de títulos de anime
REGEX_ANIME_SUFFIXES = re.compile(r'\s*(the animation|the series|movie|ova|special)$', re.IGNORECASE)

# Slugs
REGEX_SLUG_QUOTES = re.compile(r'[\'"]')
REGEX_SLUG_INVALID = re.compile(r'[^\w\s-]')
REGEX_SLUG_DASHES = re.compile(r'-+')
REGEX_WORD_START = re.compile(r'\b\w')
