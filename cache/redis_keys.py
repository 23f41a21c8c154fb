"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import hashlib


def title_hash(title: str) -> str:
    # Normaliza o título (lowercase, sem espaços extras) e gera hash MD5
    normalized = ' '.join(title.lower().strip().split())
    return hashlib.md5(normalized.encode('utf-8')).hexdigest()


# ============================================================================
# 📁 catalog/ - Catálogo TMDB (catalog/tmdb.py)
# ============================================================================

def catalog_search_key(media_type: str, title: str) -> str:
    # Chave Redis para ID encontrado na busca por título (7d TTL)
    return f"catalog/search/{media_type}/{title_hash(title)}"


def catalog_details_key(media_type: str, catalog_id) -> str:
    # Chave Redis para detalhes de um ID do catálogo (7d TTL)
    return f"catalog/details/{media_type}/{catalog_id}"


def catalog_miss_key(media_type: str, title: str) -> str:
    # Chave Redis para busca sem resultado (12h TTL)
    return f"catalog/miss/{media_type}/{title_hash(title)}"
