"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import logging
import redis
from typing import Optional
from app.config import Config
logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None
_initialized = False


def init_redis():
    global _redis_client, _initialized
    _initialized = True
    # Se REDIS_HOST não está configurado, retorna sem logar (bootstrap loga o status)
    if not Config.REDIS_HOST or Config.REDIS_HOST.strip() == '':
        _redis_client = None
        return

    try:
        _redis_client = redis.Redis(
            host=Config.REDIS_HOST,
            port=Config.REDIS_PORT,
            db=Config.REDIS_DB,
            decode_responses=False,  # Retorna bytes
            socket_connect_timeout=2,
            socket_timeout=2
        )
        _redis_client.ping()
    except redis.RedisError as e:
        _redis_client = None
        logger.debug(f"Redis indisponível: {type(e).__name__}")


def get_redis_client() -> Optional[redis.Redis]:
    # Tenta conectar uma única vez por processo
    if _redis_client is None and not _initialized:
        init_redis()
    return _redis_client
