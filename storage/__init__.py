"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import logging
from typing import Optional

from app.config import Config
from storage.base import EpisodeStorage
from storage.memory import MemoryStorage
from storage.supabase_rest import SupabaseRestStorage

logger = logging.getLogger(__name__)


def create_storage(url: Optional[str] = None, key: Optional[str] = None) -> EpisodeStorage:
    # Supabase quando configurado; memória caso contrário (execução local/testes)
    supabase_url = url or Config.SUPABASE_URL
    supabase_key = key or Config.SUPABASE_SERVICE_ROLE_KEY

    if supabase_url and supabase_key:
        logger.info("Usando armazenamento Supabase REST")
        return SupabaseRestStorage(supabase_url, supabase_key)

    logger.warning("Supabase não configurado - usando armazenamento em memória")
    return MemoryStorage()


__all__ = [
    'EpisodeStorage',
    'MemoryStorage',
    'SupabaseRestStorage',
    'create_storage',
]
