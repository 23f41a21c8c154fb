"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

from catalog.tmdb import TMDBClient

__all__ = ['TMDBClient']
