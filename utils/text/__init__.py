"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

from utils.text.cleaning import (
    clean_slug,
    clean_title_for_catalog,
    catalog_query_variants,
    series_name_from_slug
)

__all__ = [
    'clean_slug',
    'clean_title_for_catalog',
    'catalog_query_variants',
    'series_name_from_slug',
]
