"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# Modelo de dados para série (chave única: slug)
@dataclass
class SeriesRecord:
    slug: str
    title: str
    url: str = ''
    description: Optional[str] = None
    poster: Optional[str] = None
    genres: List[str] = field(default_factory=list)
    year: Optional[int] = None
    catalog: Dict[str, Any] = field(default_factory=dict)

    def to_row(self) -> Dict[str, Any]:
        """Converte para a linha da tabela series (dados do catálogo têm prioridade)"""
        catalog = self.catalog or {}
        poster = catalog.get('poster') or self.poster
        release_date = catalog.get('release_date')
        year = self.year
        if not year and release_date:
            try:
                year = int(str(release_date).split('-')[0])
            except ValueError:
                year = None

        return {
            'slug': self.slug,
            'title': self.title,
            'description': catalog.get('description') or self.description,
            'poster': poster,
            'banner_image': catalog.get('banner_image'),
            'cover_image_large': poster,
            'cover_image_extra_large': poster,
            'genres': catalog.get('genres') or self.genres,
            'tmdb_id': catalog.get('tmdb_id'),
            'rating': catalog.get('rating'),
            'popularity': catalog.get('popularity'),
            'status': catalog.get('status'),
            'studios': catalog.get('studios') or [],
            'release_date': release_date,
            'total_seasons': catalog.get('total_seasons') or 1,
            'total_episodes': catalog.get('total_episodes'),
            'posters': catalog.get('posters') or ([self.poster] if self.poster else []),
            'backdrops': catalog.get('backdrops') or [],
            'year': year,
        }

    @property
    def effective_poster(self) -> Optional[str]:
        return (self.catalog or {}).get('poster') or self.poster
