"""Registro e criação dos scrapers de sites de episódios."""

from __future__ import annotations

from typing import Any, Dict, Optional, Type

from .base import BaseScraper
from .toonstream import ToonstreamScraper

_SCRAPER_REGISTRY: Dict[str, Type[BaseScraper]] = {
    ToonstreamScraper.SCRAPER_TYPE: ToonstreamScraper,
}


# Normaliza o nome do scraper para comparações
def normalize_scraper_type(scraper_type: str) -> str:
    return scraper_type.strip().lower().replace('-', '_')


# Retorna metadados dos scrapers disponíveis
def available_scraper_types() -> Dict[str, Dict[str, Any]]:
    return {
        scraper_type: {
            "type": scraper_type,
            "class_name": scraper_class.__name__,
            "default_url": scraper_class.DEFAULT_BASE_URL,
            "display_name": scraper_class.DISPLAY_NAME or scraper_class.__name__,
        }
        for scraper_type, scraper_class in _SCRAPER_REGISTRY.items()
    }


# Cria uma instância do scraper solicitado
def create_scraper(scraper_type: str, fetcher, base_url: Optional[str] = None, **kwargs) -> BaseScraper:
    normalized = normalize_scraper_type(scraper_type)
    scraper_class = _SCRAPER_REGISTRY.get(normalized)
    if not scraper_class:
        available = ", ".join(sorted(_SCRAPER_REGISTRY.keys())) or "nenhum"
        raise ValueError(f"Scraper '{scraper_type}' não encontrado. Disponíveis: {available}")
    return scraper_class(fetcher, base_url=base_url, **kwargs)


__all__ = [
    "BaseScraper",
    "ToonstreamScraper",
    "available_scraper_types",
    "create_scraper",
    "normalize_scraper_type",
]
