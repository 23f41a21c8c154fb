"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

from unittest.mock import MagicMock

import pytest

from core.sync.orchestrator import SyncOrchestrator, episode_needs_update, is_usable_server
from core.sync.run_context import (
    OUTCOME_DUPLICATE,
    OUTCOME_FAILED,
    OUTCOME_NEW,
    OUTCOME_SKIPPED,
    OUTCOME_UNCHANGED,
    REASON_SMART_NEW,
    RunContext,
    SyncHints,
)
from exceptions import PersistenceFailure
from fakes import FakeFetcher, HOME, SOURCE_HOST
from models.episode import EpisodeCode
from scraper.toonstream import ToonstreamScraper
from storage.memory import MemoryStorage
from utils.parsing.link_resolver import EmbedResolver

SERIES_POSTS = {'naruto': '500', 'bleach': '600'}


def episode_url(slug, season, episode):
    return f"{HOME}episode/{slug}-{season}x{episode}/"


def trembed_url(post_id):
    return f"{HOME}?trembed=0&trid={post_id}&trtype=2"


def episode_page(slug, season, episode, post_id):
    return f"""
    <html><head><meta property="og:image" content="https://img.toonstream.one/{slug}-{season}x{episode}.jpg"></head>
    <body>
      <nav class="breadcrumb"><a href="/">Home</a><a href="/series/{slug}/">{slug.title()}</a></nav>
      <h1 class="entry-title">{slug.title()} {season}x{episode}</h1>
      <div class="video-options"><img src="https://img.toonstream.one/player-{slug}-{season}x{episode}.jpg"></div>
      <ul><li class="dooplay_player_option" data-post="{post_id}" data-nume="0" data-type="2">Server</li></ul>
    </body></html>
    """


def series_page(slug):
    return f"""
    <html><body>
      <article id="post-{SERIES_POSTS[slug]}"><h1 class="entry-title">{slug.title()}</h1></article>
      <ul><li><a data-season="1" href="#">Season 1</a></li></ul>
    </body></html>
    """


def season_listing(slug, season, episodes):
    items = []
    for episode in episodes:
        items.append(f"""
        <li><article class="post episodes">
          <img src="https://img.toonstream.one/list-{slug}-{season}x{episode}.jpg">
          <header class="entry-header"><span class="num-epi">{season}x{episode}</span>
          <h2 class="entry-title">Episode {episode}</h2></header>
          <a class="lnk-blk" href="{episode_url(slug, season, episode)}"></a>
        </article></li>
        """)
    return ''.join(items)


def homepage(*urls):
    articles = ''.join(
        f'<article class="post episodes"><h2 class="entry-title">card</h2><a href="{url}"></a></article>'
        for url in urls
    )
    return f"<html><body>{articles}</body></html>"


def add_episode(pages, slug, season, episode, post_id):
    # Página do episódio + página do player apontando para um host externo
    pages[episode_url(slug, season, episode)] = episode_page(slug, season, episode, post_id)
    pages[trembed_url(post_id)] = f'<iframe src="https://streamtape.com/e/{slug}-{season}x{episode}"></iframe>'


def build_orchestrator(pages, ajax=None, storage=None, catalog=None, sleep=None):
    fetcher = FakeFetcher(pages, ajax)
    scraper = ToonstreamScraper(fetcher, base_url=HOME, fallbacks=[])
    resolver = EmbedResolver(fetcher, source_host=SOURCE_HOST)
    orchestrator = SyncOrchestrator(
        scraper,
        resolver,
        storage if storage is not None else MemoryStorage(),
        catalog=catalog,
        request_delay=0,
        sleep=sleep or (lambda seconds: None)
    )
    return orchestrator, fetcher


@pytest.fixture
def two_series_site():
    pages = {
        HOME: homepage(episode_url('naruto', 1, 1), episode_url('bleach', 1, 1)),
        f"{HOME}series/naruto/": series_page('naruto'),
        f"{HOME}series/bleach/": series_page('bleach'),
    }
    add_episode(pages, 'naruto', 1, 1, '101')
    add_episode(pages, 'bleach', 1, 1, '201')
    ajax = {
        ('500', 1): season_listing('naruto', 1, [1]),
        ('600', 1): season_listing('bleach', 1, [1]),
    }
    return pages, ajax


class TestEpisodeNeedsUpdate:
    def test_missing_row(self):
        check = episode_needs_update(None)

        assert (check.exists, check.needs_update) == (False, True)

    def test_complete_row(self):
        row = {'servers': [{'url': 'https://streamtape.com/e/1'}], 'thumbnail': 't.jpg', 'episode_main_poster': 'p.jpg'}

        assert episode_needs_update(row).needs_update is False

    def test_missing_fields_are_reported(self):
        """Servidores vazios e pôster ausente marcam o episódio para atualização"""
        check = episode_needs_update({'servers': [], 'thumbnail': 't.jpg', 'episode_main_poster': None})

        assert check.needs_update
        assert check.missing_fields() == ['servers', 'poster']


class TestUsableServer:
    def test_external_final_url(self):
        assert is_usable_server('https://streamtape.com/e/1', trembed_url('1'), SOURCE_HOST)

    def test_rejected_urls(self):
        """Não resolvido, igual ao intermediário ou ainda no site de origem é descartado"""
        assert not is_usable_server(None, trembed_url('1'), SOURCE_HOST)
        assert not is_usable_server(trembed_url('1'), trembed_url('1'), SOURCE_HOST)
        assert not is_usable_server(f"{HOME}player/1/", trembed_url('1'), SOURCE_HOST)
        assert not is_usable_server('https://mirror.example/?trembed=1&trid=1', trembed_url('1'), SOURCE_HOST)
        assert not is_usable_server('about:blank', trembed_url('1'), SOURCE_HOST)


class TestRun:
    def test_homepage_episodes_are_persisted(self, two_series_site):
        """Dois cards de séries diferentes terminam com séries, episódios e feed salvos"""
        pages, ajax = two_series_site
        orchestrator, _ = build_orchestrator(pages, ajax)
        storage = orchestrator.storage

        stats = orchestrator.run()

        assert stats.new_episodes == 2
        assert stats.failed_episodes == 0
        assert stats.total_servers == 2
        assert stats.series_processed == {'naruto', 'bleach'}

        naruto = storage.get_episode('naruto', 1, 1)
        assert naruto['servers'] == [{
            'name': 'Server 1',
            'url': 'https://streamtape.com/e/naruto-1x1',
            'real_video': 'https://streamtape.com/e/naruto-1x1',
            'type': 'iframe',
            'option': 1,
            'intermediate_url': trembed_url('101'),
        }]
        assert naruto['title'] == 'Naruto 1x1'
        assert naruto['thumbnail'] == 'https://img.toonstream.one/naruto-1x1.jpg'
        assert naruto['episode_main_poster'] == 'https://img.toonstream.one/player-naruto-1x1.jpg'
        assert storage.get_series('bleach')['title'] == 'Bleach'
        assert len(storage.recent_latest(10)) == 2

    def test_second_run_is_idempotent(self, two_series_site):
        """Episódios completos não são regravados na execução seguinte"""
        pages, ajax = two_series_site
        orchestrator, _ = build_orchestrator(pages, ajax)
        orchestrator.run()

        stats = orchestrator.run()

        assert stats.new_episodes == 0
        assert stats.updated_episodes == 0
        assert len(orchestrator.storage.episodes) == 2

    def test_force_updates_existing(self, two_series_site):
        pages, ajax = two_series_site
        orchestrator, _ = build_orchestrator(pages, ajax)
        orchestrator.run()

        stats = orchestrator.run(force=True)

        assert stats.updated_episodes == 2
        assert len(orchestrator.storage.episodes) == 2

    def test_unreachable_homepage(self):
        """Home inacessível encerra o passo sem exceção"""
        orchestrator, fetcher = build_orchestrator({})

        stats = orchestrator.run()

        assert stats.total_processed == 0
        assert [url for url, _ in fetcher.calls[:3]] == [HOME, f"{HOME}home/", f"{HOME}page/1/"]

    def test_homepage_fallback(self, two_series_site):
        """Home alternativa é usada quando a principal falha"""
        pages, ajax = two_series_site
        pages[f"{HOME}home/"] = pages.pop(HOME)
        orchestrator, _ = build_orchestrator(pages, ajax)

        assert orchestrator.run().new_episodes == 2


class TestSyncEpisode:
    def test_unresolved_server_is_dropped(self):
        """Player que não resolve não entra na lista de servidores"""
        pages = {f"{HOME}series/naruto/": series_page('naruto')}
        add_episode(pages, 'naruto', 1, 1, '101')
        del pages[trembed_url('101')]
        orchestrator, _ = build_orchestrator(pages)

        outcome = orchestrator.sync_episode(episode_url('naruto', 1, 1), RunContext())

        assert outcome.status == OUTCOME_NEW
        assert outcome.servers == 0
        assert orchestrator.storage.get_episode('naruto', 1, 1)['servers'] == []

    def test_lazy_player_placeholder_is_not_saved(self):
        """Player com src="about:blank" grava o data-src, nunca o placeholder"""
        pages = {f"{HOME}series/naruto/": series_page('naruto')}
        add_episode(pages, 'naruto', 1, 1, '101')
        pages[trembed_url('101')] = '<iframe src="about:blank" data-src="https://streamtape.com/e/lazy"></iframe>'
        orchestrator, _ = build_orchestrator(pages)

        orchestrator.sync_episode(episode_url('naruto', 1, 1), RunContext())

        servers = orchestrator.storage.get_episode('naruto', 1, 1)['servers']
        assert [server['url'] for server in servers] == ['https://streamtape.com/e/lazy']

    def test_placeholder_only_player_leaves_episode_incomplete(self):
        """Sem URL real o episódio fica sem servidores e continua elegível para a auditoria"""
        pages = {f"{HOME}series/naruto/": series_page('naruto')}
        add_episode(pages, 'naruto', 1, 1, '101')
        pages[trembed_url('101')] = '<iframe src="about:blank"></iframe>'
        orchestrator, _ = build_orchestrator(pages)

        orchestrator.sync_episode(episode_url('naruto', 1, 1), RunContext())

        row = orchestrator.storage.get_episode('naruto', 1, 1)
        assert row['servers'] == []
        assert episode_needs_update(row).needs_update

    def test_duplicate_in_same_run(self):
        pages = {f"{HOME}series/naruto/": series_page('naruto')}
        add_episode(pages, 'naruto', 1, 1, '101')
        orchestrator, _ = build_orchestrator(pages)
        context = RunContext()

        orchestrator.sync_episode(episode_url('naruto', 1, 1), context)
        outcome = orchestrator.sync_episode(episode_url('naruto', 1, 1), context)

        assert outcome.status == OUTCOME_DUPLICATE
        assert context.stats.new_episodes == 1

    def test_unchanged_episode_is_not_written(self):
        """Episódio completo no armazenamento não dispara resolução de servidores"""
        pages = {f"{HOME}series/naruto/": series_page('naruto')}
        add_episode(pages, 'naruto', 1, 1, '101')
        orchestrator, fetcher = build_orchestrator(pages)
        orchestrator.sync_episode(episode_url('naruto', 1, 1), RunContext())
        fetcher.calls.clear()

        outcome = orchestrator.sync_episode(episode_url('naruto', 1, 1), RunContext())

        assert outcome.status == OUTCOME_UNCHANGED
        assert fetcher.fetched(trembed_url('101')) == []

    def test_episode_without_code_fails(self):
        url = f"{HOME}episode/naruto-special/"
        orchestrator, _ = build_orchestrator({url: '<html></html>'})
        context = RunContext()

        outcome = orchestrator.sync_episode(url, context)

        assert outcome.status == OUTCOME_FAILED
        assert context.stats.failed_episodes == 1

    def test_missing_page_is_skipped_when_tolerated(self):
        orchestrator, _ = build_orchestrator({})
        context = RunContext()

        outcome = orchestrator.sync_episode(
            episode_url('naruto', 1, 9), context, SyncHints(tolerate_missing=True), force=True
        )

        assert outcome.status == OUTCOME_SKIPPED
        assert context.stats.skipped_episodes == 1
        assert context.stats.failed_episodes == 0

    def test_verification_failure_retries_then_fails(self):
        """Episódio ausente após o upsert é repetido até o limite e conta como falha"""
        pages = {f"{HOME}series/naruto/": series_page('naruto')}
        add_episode(pages, 'naruto', 1, 1, '101')
        storage = MagicMock()
        storage.get_episode.return_value = None
        delays = []
        orchestrator, _ = build_orchestrator(pages, storage=storage, sleep=delays.append)
        context = RunContext()

        outcome = orchestrator.sync_episode(episode_url('naruto', 1, 1), context)

        assert outcome.status == OUTCOME_FAILED
        assert storage.upsert_episode.call_count == 3
        assert delays == [0.5, 1.0]
        assert context.stats.failed_episodes == 1
        # Série buscada uma única vez graças ao cache da execução
        assert storage.upsert_series.call_count == 1

    def test_persistence_failure_is_not_retried(self):
        pages = {f"{HOME}series/naruto/": series_page('naruto')}
        add_episode(pages, 'naruto', 1, 1, '101')
        storage = MagicMock()
        storage.get_episode.return_value = None
        storage.upsert_episode.side_effect = PersistenceFailure('episodes', 'timeout', 504)
        orchestrator, _ = build_orchestrator(pages, storage=storage)

        outcome = orchestrator.sync_episode(episode_url('naruto', 1, 1), RunContext())

        assert outcome.status == OUTCOME_FAILED
        assert storage.upsert_episode.call_count == 1

    def test_season_api_image_has_priority(self):
        """Imagem da listagem AJAX da temporada vira a thumbnail do episódio"""
        pages = {f"{HOME}series/naruto/": series_page('naruto')}
        add_episode(pages, 'naruto', 1, 1, '101')
        ajax = {('101', 1): season_listing('naruto', 1, [1])}
        orchestrator, _ = build_orchestrator(pages, ajax)

        orchestrator.sync_episode(episode_url('naruto', 1, 1), RunContext())

        row = orchestrator.storage.get_episode('naruto', 1, 1)
        assert row['thumbnail'] == 'https://img.toonstream.one/list-naruto-1x1.jpg'
        assert row['episode_main_poster'] == 'https://img.toonstream.one/list-naruto-1x1.jpg'

    def test_series_page_failure_degrades(self):
        """Sem a página da série o título vem do slug e o episódio é salvo"""
        pages = {}
        add_episode(pages, 'spy-x-family', 1, 1, '301')
        orchestrator, _ = build_orchestrator(pages)

        outcome = orchestrator.sync_episode(episode_url('spy-x-family', 1, 1), RunContext())

        assert outcome.status == OUTCOME_NEW
        assert orchestrator.storage.get_series('spy-x-family')['title'] == 'Spy X Family'

    def test_catalog_data_enriches_series(self):
        pages = {f"{HOME}series/naruto/": series_page('naruto')}
        add_episode(pages, 'naruto', 1, 1, '101')
        catalog = MagicMock()
        catalog.lookup.return_value = {
            'tmdb_id': 46260,
            'poster': 'https://image.tmdb.org/t/p/original/naruto.jpg',
            'genres': ['Animation'],
            'release_date': '2002-10-03',
        }
        orchestrator, _ = build_orchestrator(pages, catalog=catalog)

        orchestrator.sync_episode(episode_url('naruto', 1, 1), RunContext())

        series = orchestrator.storage.get_series('naruto')
        assert series['tmdb_id'] == 46260
        assert series['year'] == 2002
        catalog.lookup.assert_called_once_with('Naruto')


class TestSeriesCompletion:
    def test_gap_triggers_backfill(self):
        """Novo episódio com o anterior ausente completa todos os faltantes"""
        pages = {
            HOME: homepage(episode_url('naruto', 1, 3)),
            f"{HOME}series/naruto/": series_page('naruto'),
        }
        for episode in (1, 2, 3):
            add_episode(pages, 'naruto', 1, episode, f"10{episode}")
        ajax = {('500', 1): season_listing('naruto', 1, [1, 2, 3])}
        storage = MemoryStorage()
        orchestrator, _ = build_orchestrator(pages, ajax, storage=storage)
        orchestrator.sync_episode(episode_url('naruto', 1, 1), RunContext())

        stats = orchestrator.run()

        assert stats.new_episodes == 2
        assert [(row['season'], row['episode']) for row in storage.list_episodes('naruto')] == [(1, 1), (1, 2), (1, 3)]

    def test_previous_present_syncs_only_new(self):
        """Com o anterior salvo apenas o episódio disparador é sincronizado"""
        pages = {f"{HOME}series/naruto/": series_page('naruto')}
        for episode in (1, 2, 3):
            add_episode(pages, 'naruto', 1, episode, f"10{episode}")
        ajax = {('500', 1): season_listing('naruto', 1, [1, 2, 3])}
        orchestrator, _ = build_orchestrator(pages, ajax)
        orchestrator.sync_episode(episode_url('naruto', 1, 2), RunContext())
        orchestrator.sync_episode = MagicMock(wraps=orchestrator.sync_episode)

        orchestrator.ensure_series_complete('naruto', EpisodeCode(1, 3), RunContext())

        assert orchestrator.sync_episode.call_count == 1
        args, _ = orchestrator.sync_episode.call_args
        assert args[0] == episode_url('naruto', 1, 3)
        assert args[2].reason == REASON_SMART_NEW

    def test_series_without_post_id_uses_page_links(self):
        """Sem post id a série é completada pelos links de episódio da própria página"""
        pages = {f"{HOME}series/naruto/": (
            '<html><body><h1 class="entry-title">Naruto</h1><ul>'
            '<li><a href="/episode/naruto-1x2/">1x2</a></li>'
            '<li><a href="/episode/naruto-1x1/">1x1</a></li>'
            '</ul></body></html>'
        )}
        for episode in (1, 2):
            add_episode(pages, 'naruto', 1, episode, f"10{episode}")
        orchestrator, fetcher = build_orchestrator(pages)
        context = RunContext()

        orchestrator.ensure_series_complete('naruto', EpisodeCode(1, 2), context)

        assert context.stats.new_episodes == 2
        assert [(row['season'], row['episode']) for row in orchestrator.storage.list_episodes('naruto')] == [(1, 1), (1, 2)]
        # Nenhuma consulta à API de temporadas com o post da série
        assert all(data['post'] != SERIES_POSTS['naruto'] for _, data in fetcher.posts)


class TestAudits:
    def test_latest_entry_without_episode_is_restored(self):
        """Entrada do feed sem episódio correspondente é sincronizada de novo"""
        pages = {f"{HOME}series/naruto/": series_page('naruto')}
        add_episode(pages, 'naruto', 1, 4, '104')
        storage = MemoryStorage()
        storage.upsert_latest({
            'series_slug': 'naruto', 'series_title': 'Naruto', 'season': 1, 'episode': 4,
            'episode_title': 'Naruto 1x4', 'thumbnail': None, 'added_at': '2025-01-01T00:00:00+00:00',
        })
        orchestrator, _ = build_orchestrator(pages, storage=storage)

        orchestrator.audit_latest_episodes(RunContext())

        assert storage.get_episode('naruto', 1, 4) is not None

    def test_empty_servers_are_retried(self):
        """Episódio recente sem servidores é reprocessado quando o player volta"""
        pages = {f"{HOME}series/naruto/": series_page('naruto')}
        add_episode(pages, 'naruto', 1, 1, '101')
        player = pages.pop(trembed_url('101'))
        orchestrator, fetcher = build_orchestrator(pages)
        orchestrator.sync_episode(episode_url('naruto', 1, 1), RunContext())
        fetcher.pages[trembed_url('101')] = player
        context = RunContext()

        orchestrator.audit_empty_servers(context)

        assert context.stats.updated_episodes == 1
        assert len(orchestrator.storage.get_episode('naruto', 1, 1)['servers']) == 1

    def test_removed_episode_counts_as_skipped(self):
        storage = MemoryStorage()
        storage.upsert_episode({'series_slug': 'naruto', 'season': 1, 'episode': 7, 'title': 'x', 'servers': []})
        orchestrator, _ = build_orchestrator({}, storage=storage)
        context = RunContext()

        orchestrator.audit_empty_servers(context)

        assert context.stats.skipped_episodes == 1
        assert context.stats.failed_episodes == 0
