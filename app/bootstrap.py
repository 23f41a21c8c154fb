"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import logging
from app.config import Config
from cache.catalog_cache import CatalogCache
from cache.redis_client import init_redis, get_redis_client
from catalog.tmdb import TMDBClient
from core.sync.orchestrator import SyncOrchestrator
from exceptions import ConfigurationError
from scraper import available_scraper_types, create_scraper
from storage import create_storage
from utils.http.fetcher import HttpFetcher
from utils.http.proxy import ProxyPool
from utils.parsing.link_resolver import EmbedResolver

logger = logging.getLogger(__name__)


class Bootstrap:
    @staticmethod
    def validate_config() -> None:
        """Falha cedo se variáveis obrigatórias estiverem ausentes"""
        missing = Config.missing_required()
        if missing:
            raise ConfigurationError("Variáveis de ambiente obrigatórias ausentes", missing)

    @staticmethod
    def initialize_redis() -> None:
        """Inicializa Redis (opcional - não falha se não disponível)"""
        init_redis()

        redis_client = get_redis_client()
        if redis_client:
            logger.info("[[ Redis Conectado ]]")
        elif Config.REDIS_HOST and Config.REDIS_HOST.strip():
            logger.warning("[[ Redis Não Conectado ]] - usando cache em memória")
        else:
            logger.warning("[[ Redis Não Conectado ]] - REDIS_HOST não configurado")

    @staticmethod
    def create_orchestrator() -> SyncOrchestrator:
        """Monta fetcher, proxies, scraper, resolver, catálogo e armazenamento"""
        Bootstrap.validate_config()
        Bootstrap.initialize_redis()

        proxy_pool = ProxyPool()
        fetcher = HttpFetcher(proxy_pool=proxy_pool)
        scraper = create_scraper('toonstream', fetcher)
        resolver = EmbedResolver(fetcher, source_host=scraper.source_host, default_referer=scraper.base_url)
        catalog = TMDBClient(cache=CatalogCache())
        storage = create_storage()

        logger.info(f"Site de origem: {scraper.base_url}")
        logger.info(f"Scrapers disponíveis: {list(available_scraper_types().keys())}")
        logger.info(f"Proxy: {'ativado' if proxy_pool.enabled else 'desativado'}")
        # Agendamento e porta pertencem ao processo externo; apenas registrados
        logger.info(f"Agendamento externo: '{Config.CRON_SCHEDULE}' (porta {Config.PORT})")

        return SyncOrchestrator(
            scraper=scraper,
            resolver=resolver,
            storage=storage,
            catalog=catalog,
            proxy_pool=proxy_pool
        )
