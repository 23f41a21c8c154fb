"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from app.config import Config
from core.sync.run_context import (
    OUTCOME_DUPLICATE,
    OUTCOME_FAILED,
    OUTCOME_NEW,
    OUTCOME_SKIPPED,
    OUTCOME_UNCHANGED,
    OUTCOME_UPDATED,
    REASON_BACKFILL,
    REASON_LATEST_AUDIT,
    REASON_MISSING_DATA,
    REASON_SMART_NEW,
    RunContext,
    RunStats,
    SyncHints,
    SyncOutcome,
)
from exceptions import FetchError, InvalidEpisodeUrlError, StorageError
from models.episode import (
    EpisodeCard,
    EpisodeCode,
    EpisodeRecord,
    ResolvedServer,
    SeriesEpisodeLink,
    ServerOption,
    UpdateCheck,
)
from models.series import SeriesRecord
from utils.parsing.episode_code import parse_episode_code
from utils.parsing.html_extraction import (
    as_document,
    extract_embeds,
    extract_episode_cards,
    extract_episode_meta,
    extract_nonce,
    extract_post_id,
    extract_season_numbers,
    extract_series_episode_links,
    extract_series_meta,
    extract_series_url_from_breadcrumb,
)
from utils.parsing.url_utils import has_redirector_marker, is_same_host, last_path_segment, normalize_url
from utils.text.cleaning import clean_slug, series_name_from_slug

logger = logging.getLogger(__name__)


def episode_needs_update(row: Optional[Dict[str, Any]]) -> UpdateCheck:
    # Episódio precisa de sync se não existe ou se faltam servidores, thumbnail ou pôster
    if not row:
        return UpdateCheck(exists=False, needs_update=True)

    servers = row.get('servers')
    has_servers = isinstance(servers, list) and len(servers) > 0
    has_thumbnail = bool(row.get('thumbnail'))
    has_poster = bool(row.get('episode_main_poster'))

    return UpdateCheck(
        exists=True,
        needs_update=not (has_servers and has_thumbnail and has_poster),
        missing_servers=not has_servers,
        missing_thumbnail=not has_thumbnail,
        missing_poster=not has_poster
    )


def is_usable_server(final_url: Optional[str], intermediate_url: Optional[str], source_host: Optional[str]) -> bool:
    # Servidor só entra na lista se é http(s) e saiu do site de origem
    if not normalize_url(final_url) or final_url == intermediate_url:
        return False
    if has_redirector_marker(final_url):
        return False
    return not is_same_host(final_url, source_host)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SyncOrchestrator:
    """
    Sincroniza episódios do site de origem com o armazenamento.

    Um ciclo (run) busca a home, sincroniza cada card de episódio, completa
    as séries vistas na home, audita o feed de últimos episódios e os
    episódios recentes com dados faltando. Tudo é sequencial, com uma
    pausa fixa entre requisições externas.
    """

    def __init__(
        self,
        scraper,
        resolver,
        storage,
        catalog=None,
        proxy_pool=None,
        request_delay: Optional[float] = None,
        max_attempts: Optional[int] = None,
        verify_base_delay: float = 0.5,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.scraper = scraper
        self.resolver = resolver
        self.storage = storage
        self.catalog = catalog
        self.proxy_pool = proxy_pool
        self.request_delay = Config.REQUEST_DELAY if request_delay is None else request_delay
        self.max_attempts = max_attempts or Config.SYNC_MAX_ATTEMPTS
        self.verify_base_delay = verify_base_delay
        self._sleep = sleep

    def _pause(self, factor: float = 1.0) -> None:
        delay = self.request_delay * factor
        if delay > 0:
            self._sleep(delay)

    # ------------------------------------------------------------------
    # Ciclo completo
    # ------------------------------------------------------------------

    def run(self, force: bool = False) -> RunStats:
        context = RunContext(force=force)
        logger.info("Sincronização iniciada")

        if self.proxy_pool:
            self.proxy_pool.initialize()
            proxy_stats = self.proxy_pool.get_stats()
            if proxy_stats['enabled']:
                logger.info(f"Proxies: {proxy_stats['active']}/{proxy_stats['total']} ativos")

        latest_series = self.poll_homepage(context)
        self.update_series_from_latest(latest_series, context)
        self.audit_latest_episodes(context)
        self.audit_empty_servers(context)
        self.log_summary(context.stats)
        return context.stats

    def poll_homepage(self, context: RunContext) -> Dict[str, EpisodeCode]:
        # slug da série -> episódio que apareceu na home
        latest_series: Dict[str, EpisodeCode] = {}
        try:
            home_url, html = self.scraper.fetch_homepage()
        except FetchError as e:
            logger.error(f"Home inacessível em todas as URLs candidatas: {e}")
            return latest_series

        cards = extract_episode_cards(html, home_url)
        logger.info(f"{len(cards)} episódio(s) candidato(s) na home")

        for card in cards:
            outcome = self.sync_episode(card.url, context, SyncHints(card=card), force=context.force)
            if outcome and outcome.series_slug and outcome.code:
                latest_series[outcome.series_slug] = outcome.code
            self._pause()

        return latest_series

    def update_series_from_latest(self, latest_series: Dict[str, EpisodeCode], context: RunContext) -> None:
        if not latest_series:
            logger.info("Nenhuma série para completar a partir da home")
            return

        logger.info(f"Verificando {len(latest_series)} série(s) com episódios novos")
        for series_slug, triggering in latest_series.items():
            self.ensure_series_complete(series_slug, triggering, context)
            self._pause()

    # ------------------------------------------------------------------
    # Episódio
    # ------------------------------------------------------------------

    def sync_episode(self, url: str, context: RunContext, hints: Optional[SyncHints] = None,
                     force: bool = False) -> Optional[SyncOutcome]:
        hints = hints or SyncHints()
        stats = context.stats
        series_slug: Optional[str] = None
        code: Optional[EpisodeCode] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                html = self.scraper.fetch_page(url, referer=hints.series_url)
            except FetchError as e:
                if hints.tolerate_missing:
                    logger.info(f"Episódio ignorado (inacessível): {url} - {e}")
                    stats.skipped_episodes += 1
                    return SyncOutcome(OUTCOME_SKIPPED, series_slug, code)
                logger.error(f"Falha ao buscar episódio {url}: {e}")
                stats.failed_episodes += 1
                return SyncOutcome(OUTCOME_FAILED, series_slug, code)

            doc = as_document(html)

            try:
                code = hints.code or parse_episode_code(url)
                if not code:
                    raise InvalidEpisodeUrlError(url)

                series_url = (
                    extract_series_url_from_breadcrumb(doc, url)
                    or self.scraper.derive_series_url(url)
                    or hints.series_url
                )
                series_slug = last_path_segment(series_url) or clean_slug(hints.series_title)

                if not force and context.was_processed(series_slug, code):
                    logger.debug(f"Já processado nesta execução: {series_slug} {code}")
                    return SyncOutcome(OUTCOME_DUPLICATE, series_slug, code)

                check = episode_needs_update(self.storage.get_episode(series_slug, code.season, code.episode))
                if not force and not check.needs_update:
                    context.mark_processed(series_slug, code)
                    logger.debug(f"Sem mudanças: {series_slug} {code}")
                    return SyncOutcome(OUTCOME_UNCHANGED, series_slug, code)

                if check.exists and check.needs_update:
                    logger.info(f"Atualizando {series_slug} S{code.season}E{code.episode} (faltando: {', '.join(check.missing_fields())})")
                elif check.exists:
                    logger.info(f"Forçando atualização de {series_slug} S{code.season}E{code.episode}")

                fallback_title = hints.series_title or (hints.card.title if hints.card else None)
                series = self.resolve_series(series_url, series_slug, fallback_title, context)
                record = self.build_episode_record(url, doc, code, series, hints)

                self.storage.upsert_episode(record.to_row())
                self.storage.upsert_latest(record.to_latest_row(series.title, _now_iso()))
                persisted = self.storage.get_episode(record.series_slug, record.season, record.episode)
            except InvalidEpisodeUrlError as e:
                logger.error(str(e))
                stats.failed_episodes += 1
                return SyncOutcome(OUTCOME_FAILED, series_slug, code)
            except StorageError as e:
                logger.error(f"Falha de persistência em {url}: {e}")
                stats.failed_episodes += 1
                return SyncOutcome(OUTCOME_FAILED, series_slug, code)

            if persisted:
                context.mark_processed(record.series_slug, code)
                stats.total_servers += len(record.servers)
                stats.series_processed.add(record.series_slug)
                if check.exists:
                    stats.updated_episodes += 1
                    status = OUTCOME_UPDATED
                else:
                    stats.new_episodes += 1
                    status = OUTCOME_NEW

                attempt_info = f" (tentativa {attempt})" if attempt > 1 else ''
                logger.info(f"Sincronizado {series.title} S{code.season}E{code.episode} ({hints.reason}){attempt_info} | Servidores: {len(record.servers)}")
                return SyncOutcome(status, record.series_slug, code, len(record.servers))

            logger.warning(f"Episódio {record.series_slug} S{code.season}E{code.episode} ausente após upsert, tentando novamente")
            if attempt < self.max_attempts:
                self._sleep(self.verify_base_delay * attempt)

        logger.error(f"Falha ao persistir {series_slug} {code} após {self.max_attempts} tentativa(s)")
        stats.failed_episodes += 1
        return SyncOutcome(OUTCOME_FAILED, series_slug, code)

    def resolve_series(self, series_url: Optional[str], series_slug: str, fallback_title: Optional[str],
                       context: RunContext) -> SeriesRecord:
        cache_key = series_url or series_slug
        cached = context.series_cache.get(cache_key)
        if cached:
            return cached

        meta: Dict[str, Any] = {}
        if series_url:
            try:
                meta = extract_series_meta(self.scraper.fetch_page(series_url), series_url)
            except FetchError as e:
                logger.warning(f"Falha ao buscar página da série {series_url}: {e}")

        slug_name = series_name_from_slug(series_slug)
        title = meta.get('title') or fallback_title or slug_name or series_slug

        catalog: Dict[str, Any] = {}
        if self.catalog:
            details = self.catalog.lookup(slug_name) if slug_name else None
            if not details and title and title != slug_name:
                details = self.catalog.lookup(title)
            catalog = details or {}

        series = SeriesRecord(
            slug=series_slug,
            title=title,
            url=series_url or '',
            description=meta.get('description'),
            poster=meta.get('poster'),
            genres=meta.get('genres') or [],
            year=meta.get('year'),
            catalog=catalog
        )

        self.storage.upsert_series(series.to_row())
        logger.info(f"Série salva: {series.title} (slug: {series.slug}, catálogo: {'sim' if catalog else 'não'})")
        context.series_cache[cache_key] = series
        return series

    def build_episode_record(self, url: str, html, code: EpisodeCode, series: SeriesRecord,
                             hints: Optional[SyncHints] = None) -> EpisodeRecord:
        hints = hints or SyncHints()
        doc = as_document(html)
        meta = extract_episode_meta(doc, url)
        card = hints.card or EpisodeCard(url=url)

        servers = self.resolve_servers(extract_embeds(doc, url, self.scraper.source_host), url)
        api_image = self._episode_image_from_api(doc, code)
        series_poster = series.effective_poster

        thumbnail = api_image or meta['thumbnail'] or card.thumbnail_url or series_poster
        return EpisodeRecord(
            series_slug=series.slug,
            season=code.season,
            episode=code.episode,
            title=meta['title'] or card.title or f"Episode {code.episode}",
            thumbnail=thumbnail,
            poster=api_image or meta['poster'] or series_poster,
            card_thumbnail=api_image or meta['thumbnail'] or card.thumbnail_url,
            list_thumbnail=api_image or card.thumbnail_url or meta['thumbnail'],
            player_thumbnail=api_image or meta['poster'] or meta['thumbnail'] or card.thumbnail_url,
            servers=servers
        )

    def resolve_servers(self, options: List[ServerOption], episode_url: str) -> List[ResolvedServer]:
        servers = []
        for option in options:
            if option.direct_url:
                servers.append(ResolvedServer(
                    display_name=option.name,
                    final_url=option.direct_url,
                    ordinal=option.option
                ))
                continue

            final_url = self.resolver.resolve(option.intermediate_url, referer=episode_url)
            if is_usable_server(final_url, option.intermediate_url, self.scraper.source_host):
                servers.append(ResolvedServer(
                    display_name=option.name,
                    final_url=final_url,
                    ordinal=option.option,
                    intermediate_url=option.intermediate_url
                ))
            else:
                logger.warning(f"Servidor descartado (não resolvido): {option.intermediate_url[:80]}")
            self._pause()

        return servers

    def _episode_image_from_api(self, doc, code: EpisodeCode) -> Optional[str]:
        # Imagem do episódio na listagem AJAX da temporada (sem post id, segue sem imagem)
        post_id = extract_post_id(doc)
        if not post_id:
            return None

        for link in self.scraper.fetch_season_episodes(post_id, code.season, extract_nonce(doc)):
            if link.code == code and link.thumbnail_url:
                return link.thumbnail_url
        return None

    # ------------------------------------------------------------------
    # Série completa e auditorias
    # ------------------------------------------------------------------

    def ensure_series_complete(self, series_slug: str, triggering: Optional[EpisodeCode],
                               context: RunContext) -> None:
        try:
            series_row = self.storage.get_series(series_slug) or {}
            series_title = series_row.get('title') or series_slug
            series_url = self.scraper.series_url(series_slug)

            html = self.scraper.fetch_page(series_url)
            doc = as_document(html)
            post_id = extract_post_id(doc)
            if post_id:
                available = self._episodes_from_seasons(doc, post_id, series_title)
            else:
                # Sem post id não há API de temporadas: usa os links da própria página
                logger.warning(f"Post ID não encontrado para {series_title}, usando links da página da série")
                available = extract_series_episode_links(doc, series_url)

            if not available:
                logger.warning(f"Nenhum episódio encontrado para {series_title}")
                return

            existing = {(row['season'], row['episode']) for row in self.storage.list_episodes(series_slug)}
            missing = [link for link in available if (link.season, link.episode) not in existing]
            if not missing:
                logger.info(f"Todos os episódios de {series_title} já sincronizados")
                return

            to_sync = missing
            if triggering:
                previous = triggering.episode - 1
                if previous < 1 or (triggering.season, previous) in existing:
                    # Anterior existe: só o episódio novo
                    to_sync = [link for link in missing if link.code == triggering]
                else:
                    logger.info(f"{series_title}: S{triggering.season}E{previous} ausente, completando {len(missing)} episódio(s)")

            if not to_sync:
                logger.info(f"Nada a sincronizar para {series_title}")
                return

            reason = REASON_SMART_NEW if len(to_sync) == 1 else REASON_BACKFILL
            for link in to_sync:
                self.sync_episode(
                    link.url,
                    context,
                    SyncHints(
                        series_url=series_url,
                        series_title=series_title,
                        card=EpisodeCard(url=link.url, title=link.title, thumbnail_url=link.thumbnail_url),
                        code=link.code,
                        reason=reason
                    ),
                    force=True
                )
                self._pause()
        except (FetchError, StorageError) as e:
            logger.warning(f"Falha ao completar série {series_slug}: {e}")
            context.stats.failed_episodes += 1

    def _episodes_from_seasons(self, doc, post_id: str, series_title: str) -> List[SeriesEpisodeLink]:
        nonce = extract_nonce(doc)
        available = []
        for season in extract_season_numbers(doc):
            episodes = self.scraper.fetch_season_episodes(post_id, season, nonce)
            if episodes:
                logger.debug(f"{series_title} temporada {season}: {len(episodes)} episódio(s)")
                available.extend(episodes)
            self._pause()
        return available

    def audit_latest_episodes(self, context: RunContext, limit: Optional[int] = None) -> None:
        # Restaura episódios que estão no feed de últimos mas sumiram da tabela de episódios
        limit = limit or Config.LATEST_AUDIT_LIMIT
        try:
            entries = self.storage.recent_latest(limit)
            for entry in entries:
                slug, season, episode = entry['series_slug'], entry['season'], entry['episode']
                if self.storage.get_episode(slug, season, episode):
                    continue

                logger.info(f"Restaurando {entry.get('series_title') or slug} S{season}E{episode} a partir do feed")
                episode_url = self.scraper.episode_url(slug, season, episode)
                self.sync_episode(
                    episode_url,
                    context,
                    SyncHints(
                        series_url=self.scraper.series_url(slug),
                        series_title=entry.get('series_title'),
                        card=EpisodeCard(url=episode_url, title=entry.get('episode_title') or '', thumbnail_url=entry.get('thumbnail')),
                        code=EpisodeCode(int(season), int(episode)),
                        reason=REASON_LATEST_AUDIT
                    ),
                    force=True
                )
                self._pause()
        except StorageError as e:
            logger.error(f"Auditoria do feed de últimos episódios falhou: {e}")

    def audit_empty_servers(self, context: RunContext, limit: Optional[int] = None) -> None:
        # Reprocessa episódios recentes sem servidores, thumbnail ou pôster
        limit = limit or Config.EMPTY_SERVERS_AUDIT_LIMIT
        try:
            rows = self.storage.recent_episodes(limit)
        except StorageError as e:
            logger.error(f"Auditoria de dados faltando falhou: {e}")
            return

        updated = 0
        for row in rows:
            if not episode_needs_update(row).needs_update:
                continue

            slug, season, episode = row['series_slug'], row['season'], row['episode']
            outcome = self.sync_episode(
                self.scraper.episode_url(slug, season, episode),
                context,
                SyncHints(
                    series_url=self.scraper.series_url(slug),
                    code=EpisodeCode(int(season), int(episode)),
                    reason=REASON_MISSING_DATA,
                    tolerate_missing=True
                ),
                force=True
            )
            if outcome and outcome.persisted:
                updated += 1
            self._pause()

        if updated:
            logger.info(f"{updated} episódio(s) atualizado(s) com dados faltando")
        else:
            logger.info("Episódios recentes com dados completos")

    def log_summary(self, stats: RunStats) -> None:
        for line in stats.summary_lines():
            logger.info(line)
