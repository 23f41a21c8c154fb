"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import logging
import json
import time
from typing import Optional, Dict, Any
from app.config import Config
from cache.redis_client import get_redis_client
from cache.redis_keys import catalog_search_key, catalog_details_key, catalog_miss_key

logger = logging.getLogger(__name__)


# Cache para buscas e detalhes do catálogo (TMDB)
class CatalogCache:
    def __init__(self, redis_client=None, use_redis: bool = True,
                 ttl: Optional[int] = None, miss_ttl: Optional[int] = None):
        self.redis = (redis_client or get_redis_client()) if use_redis else None
        self.ttl = ttl or Config.CATALOG_CACHE_TTL
        self.miss_ttl = miss_ttl or Config.CATALOG_MISS_TTL
        # Memória é usada apenas quando Redis não está disponível
        self._memory: Dict[str, Any] = {}
        self._memory_expiry: Dict[str, float] = {}

    def _memory_get(self, key: str) -> Optional[Any]:
        expire_at = self._memory_expiry.get(key)
        if expire_at is not None and time.time() >= expire_at:
            # Expirou, remove
            self._memory.pop(key, None)
            self._memory_expiry.pop(key, None)
            return None
        return self._memory.get(key)

    def _memory_set(self, key: str, value: Any, ttl: int) -> None:
        self._memory[key] = value
        self._memory_expiry[key] = time.time() + ttl

    def _get(self, key: str) -> Optional[Any]:
        # Redis primeiro, memória se Redis não disponível
        if self.redis:
            try:
                data_str = self.redis.get(key)
                if data_str:
                    return json.loads(data_str.decode('utf-8'))
                return None
            except json.JSONDecodeError as e:
                logger.warning(f"[CatalogCache] Erro ao decodificar JSON (chave: {key}) - {e}")
                return None
            except Exception as e:
                # Redis falhou durante operação, não usa memória
                logger.debug(f"[CatalogCache] Erro ao ler Redis: {type(e).__name__} - {key}")
                return None

        return self._memory_get(key)

    def _set(self, key: str, value: Any, ttl: int) -> None:
        if self.redis:
            try:
                self.redis.setex(key, ttl, json.dumps(value, separators=(',', ':')))
            except Exception as e:
                logger.debug(f"[CatalogCache] Erro ao salvar Redis: {type(e).__name__} - {key}")
            return

        self._memory_set(key, value, ttl)

    def get_search(self, media_type: str, title: str) -> Optional[int]:
        return self._get(catalog_search_key(media_type, title))

    def set_search(self, media_type: str, title: str, catalog_id: int) -> None:
        self._set(catalog_search_key(media_type, title), catalog_id, self.ttl)

    def is_miss(self, media_type: str, title: str) -> bool:
        return bool(self._get(catalog_miss_key(media_type, title)))

    def set_miss(self, media_type: str, title: str) -> None:
        # Busca sem resultado - evita repetir a consulta por algumas horas
        self._set(catalog_miss_key(media_type, title), int(time.time()), self.miss_ttl)

    def get_details(self, media_type: str, catalog_id) -> Optional[Dict[str, Any]]:
        return self._get(catalog_details_key(media_type, catalog_id))

    def set_details(self, media_type: str, catalog_id, details: Dict[str, Any]) -> None:
        self._set(catalog_details_key(media_type, catalog_id), details, self.ttl)
