"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import os
from typing import List, Optional


# Converte duração (10m, 12h, 7d) para segundos
def _parse_duration(duration_str: str) -> int:
    duration_str = duration_str.strip().lower()

    if duration_str.endswith('s'):
        return int(duration_str[:-1])
    elif duration_str.endswith('m'):
        return int(duration_str[:-1]) * 60
    elif duration_str.endswith('h'):
        return int(duration_str[:-1]) * 3600
    elif duration_str.endswith('d'):
        return int(duration_str[:-1]) * 86400
    else:
        # Assume segundos se não especificado
        return int(duration_str)


# Converte "true/1/yes/on" em booleano
def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


# Separa lista por vírgula ou quebra de linha, descartando vazios
def _parse_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    items = value.replace('\n', ',').split(',')
    return [item.strip() for item in items if item.strip()]


def _ensure_trailing_slash(url: str) -> str:
    url = url.strip()
    return url if url.endswith('/') else f"{url}/"


class Config:
    # Servidor / agendador externo (apenas registrados no startup)
    PORT: int = int(os.getenv('PORT', '8000'))
    CRON_SCHEDULE: str = os.getenv('CRON_SCHEDULE', '*/10 * * * *')

    # Site de origem
    HOME_URL: str = _ensure_trailing_slash(os.getenv('TOONSTREAM_HOME_URL', 'https://toonstream.one/'))
    HOME_FALLBACKS: List[str] = _parse_list(os.getenv('TOONSTREAM_HOME_FALLBACKS'))
    AJAX_URL: str = os.getenv('TOONSTREAM_AJAX_URL', f"{HOME_URL}wp-admin/admin-ajax.php")
    COOKIES: Optional[str] = (os.getenv('TOONSTREAM_COOKIES') or '').strip() or None

    # Ciclo de sincronização
    POLL_INTERVAL: int = _parse_duration(os.getenv('POLL_INTERVAL', '10m'))
    REQUEST_DELAY: float = float(os.getenv('REQUEST_DELAY', '0.3'))  # Pausa entre requisições consecutivas
    MAX_PARALLEL_SERIES: int = int(os.getenv('MAX_PARALLEL_SERIES', '4'))  # Reservado - o ciclo é sequencial
    SYNC_MAX_ATTEMPTS: int = 3
    LATEST_AUDIT_LIMIT: int = int(os.getenv('LATEST_AUDIT_LIMIT', '25'))
    EMPTY_SERVERS_AUDIT_LIMIT: int = int(os.getenv('EMPTY_SERVERS_AUDIT_LIMIT', '50'))

    # HTTP
    REQUEST_TIMEOUT: int = int(os.getenv('REQUEST_TIMEOUT', '30'))
    MAX_RETRIES: int = int(os.getenv('MAX_RETRIES', '3'))
    RETRY_BASE_DELAY: float = float(os.getenv('RETRY_BASE_DELAY', '0.5'))  # Backoff linear: tentativa * base
    MAX_REDIRECTS: int = 5

    # Resolução de embeds
    EMBED_MAX_DEPTH: int = int(os.getenv('EMBED_MAX_DEPTH', '3'))
    EMBED_DEPTH_PADDING: int = 2  # Saltos extras para cadeias de players

    # Proxy
    USE_PROXY: bool = _parse_bool(os.getenv('USE_PROXY'))
    PROXY_LIST: List[str] = _parse_list(os.getenv('PROXY_LIST'))
    PROXY_FILE: Optional[str] = os.getenv('PROXY_FILE', None)
    PROXY_TYPE: str = os.getenv('PROXY_TYPE', 'http')
    PROXY_VALIDATE: bool = _parse_bool(os.getenv('PROXY_VALIDATE'), default=True)
    PROXY_TEST_URL: str = os.getenv('PROXY_TEST_URL', 'https://httpbin.org/ip')
    PROXY_MAX_TEST: int = int(os.getenv('PROXY_MAX_TEST', '20'))
    PROXY_TEST_TIMEOUT: int = 10

    # Persistência (obrigatório)
    SUPABASE_URL: Optional[str] = os.getenv('SUPABASE_URL', None)
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = os.getenv('SUPABASE_SERVICE_ROLE_KEY', None)

    # Catálogo (obrigatório)
    TMDB_API_KEY: Optional[str] = os.getenv('TMDB_API_KEY', None)
    TMDB_BASE_URL: str = 'https://api.themoviedb.org/3'
    TMDB_IMAGE_BASE: str = 'https://image.tmdb.org/t/p/original'
    CATALOG_CACHE_TTL: int = _parse_duration(os.getenv('CATALOG_CACHE_TTL', '7d'))
    CATALOG_MISS_TTL: int = _parse_duration(os.getenv('CATALOG_MISS_TTL', '12h'))

    # Redis
    REDIS_HOST: Optional[str] = os.getenv('REDIS_HOST', None)  # None = não configurado
    REDIS_PORT: int = int(os.getenv('REDIS_PORT', '6379'))
    REDIS_DB: int = int(os.getenv('REDIS_DB', '0'))

    # Logging
    LOG_LEVEL: int = int(os.getenv('LOG_LEVEL', '1'))
    LOG_FORMAT: str = os.getenv('LOG_FORMAT', 'console')  # 'json' ou 'console'

    # Variáveis sem as quais o processo não inicia
    REQUIRED_ENV: List[str] = ['SUPABASE_URL', 'SUPABASE_SERVICE_ROLE_KEY', 'TMDB_API_KEY']

    @classmethod
    def missing_required(cls) -> List[str]:
        return [name for name in cls.REQUIRED_ENV if not (getattr(cls, name, None) or '').strip()]
