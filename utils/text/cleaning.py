"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

from typing import List, Optional
from utils.text.constants import (
    REGEX_HALF_FRACTION,
    REGEX_HALF_FRACTION_DASHED,
    REGEX_HALF_FRACTION_SLUG_END,
    REGEX_SEASON_WITH_SEPARATOR,
    REGEX_SEASON_WORD,
    REGEX_SEASON_EPISODE,
    REGEX_EPISODE_CODE,
    REGEX_EPISODE_CODE_SUFFIX,
    REGEX_LANGUAGE_TAGS,
    REGEX_QUALITY_TAGS,
    REGEX_PARENTHESES,
    REGEX_BRACKETS,
    REGEX_MULTIPLE_SPACES,
    REGEX_ANIME_SUFFIXES,
    REGEX_SLUG_QUOTES,
    REGEX_SLUG_INVALID,
    REGEX_SLUG_DASHES,
    REGEX_WORD_START,
)


# Gera slug em minúsculas separado por hífens ("Spy x Family" -> "spy-x-family")
def clean_slug(name: Optional[str]) -> str:
    slug = (name or 'item').lower()
    slug = REGEX_SLUG_QUOTES.sub('', slug)
    slug = REGEX_SLUG_INVALID.sub('', slug)
    slug = REGEX_MULTIPLE_SPACES.sub('-', slug)
    slug = REGEX_SLUG_DASHES.sub('-', slug)
    return slug.strip('-')


# Remove temporada, idioma, qualidade e colchetes do título antes da busca no catálogo
def clean_title_for_catalog(title: Optional[str]) -> Optional[str]:
    if not title:
        return title

    cleaned = REGEX_HALF_FRACTION.sub(r'\1 1/2', title)
    cleaned = REGEX_HALF_FRACTION_DASHED.sub(r'\1 1/2', cleaned)

    # Slugs viram palavras (spy-x-family -> spy x family)
    cleaned = cleaned.replace('-', ' ')

    cleaned = REGEX_SEASON_WITH_SEPARATOR.sub('', cleaned)
    cleaned = REGEX_SEASON_WORD.sub('', cleaned)
    cleaned = REGEX_SEASON_EPISODE.sub('', cleaned)
    cleaned = REGEX_EPISODE_CODE.sub('', cleaned)

    cleaned = REGEX_LANGUAGE_TAGS.sub(' ', cleaned)
    cleaned = REGEX_QUALITY_TAGS.sub(' ', cleaned)

    cleaned = REGEX_PARENTHESES.sub('', cleaned)
    cleaned = REGEX_BRACKETS.sub('', cleaned)

    return REGEX_MULTIPLE_SPACES.sub(' ', cleaned).strip()


# Variações de busca: título limpo, título original e sem sufixo de anime
def catalog_query_variants(title: Optional[str]) -> List[str]:
    if not title or not title.strip():
        return []

    cleaned = clean_title_for_catalog(title)
    variants = []
    if cleaned:
        variants.append(cleaned)
    if cleaned != title:
        variants.append(title)

    without_suffix = REGEX_ANIME_SUFFIXES.sub('', cleaned or '').strip()
    if without_suffix and without_suffix != cleaned:
        variants.append(without_suffix)

    return list(dict.fromkeys(variants))


# Nome legível da série a partir do slug ("spy-x-family-2x5" -> "Spy X Family")
def series_name_from_slug(slug: Optional[str]) -> Optional[str]:
    if not slug:
        return None

    name = REGEX_EPISODE_CODE_SUFFIX.sub('', slug)
    name = REGEX_HALF_FRACTION_SLUG_END.sub(r'\1 1/2', name)
    name = name.replace('-', ' ')
    name = REGEX_WORD_START.sub(lambda match: match.group(0).upper(), name)
    return name.strip() or None
