"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

from unittest.mock import MagicMock

import pytest
import requests

from exceptions import FetchError, FetchExhausted
from fakes import HOME
from utils.http.fetcher import HttpFetcher
from utils.http.headers import USER_AGENTS, build_request_headers
from utils.http.proxy import ProxyPool


def _response(status_code, text=''):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    return response


def _fetcher(session, delays, proxy_pool=None, retries=3, cookies=''):
    return HttpFetcher(
        session=session,
        proxy_pool=proxy_pool,
        home_url=HOME,
        cookies=cookies,
        timeout=5,
        retries=retries,
        base_delay=0.5,
        sleep=delays.append
    )


class TestRequestHeaders:
    def test_source_host_headers(self):
        """Requisições ao site de origem levam Referer, Origin, Sec-Fetch e cookies"""
        headers = build_request_headers(
            f"{HOME}episode/naruto-1x1/",
            source_host='toonstream.one',
            home_url=HOME,
            cookies='cf_clearance=abc'
        )

        assert headers['User-Agent'] in USER_AGENTS
        assert headers['Referer'] == HOME
        assert headers['Origin'] == 'https://toonstream.one'
        assert headers['Sec-Fetch-Site'] == 'same-origin'
        assert headers['Cookie'] == 'cf_clearance=abc'

    def test_external_host_headers(self):
        """Hosts externos não recebem headers nem cookies do site"""
        headers = build_request_headers(
            'https://streamtape.com/e/abc',
            source_host='toonstream.one',
            home_url=HOME,
            cookies='cf_clearance=abc',
            referer='https://toonstream.one/?trembed=0'
        )

        assert headers['Referer'] == 'https://toonstream.one/?trembed=0'
        assert 'Origin' not in headers
        assert 'Cookie' not in headers
        assert 'Sec-Fetch-Mode' not in headers


class TestHttpFetcher:
    def test_success_first_attempt(self):
        session = MagicMock()
        session.request.return_value = _response(200, '<html>ok</html>')
        delays = []

        text = _fetcher(session, delays).fetch_text(f"{HOME}episode/x-1x1/")

        assert text == '<html>ok</html>'
        assert session.request.call_count == 1
        assert delays == []
        assert session.max_redirects == 5

    def test_redirect_status_is_success(self):
        """Status 3xx final conta como sucesso"""
        session = MagicMock()
        session.request.return_value = _response(302, 'moved')

        assert _fetcher(session, []).fetch_text(HOME) == 'moved'

    def test_retries_with_linear_backoff(self):
        """Falhas transitórias são repetidas com espera crescente entre tentativas"""
        session = MagicMock()
        session.request.side_effect = [
            requests.ConnectionError('reset'),
            _response(503),
            _response(200, 'done'),
        ]
        delays = []

        text = _fetcher(session, delays).fetch_text(HOME)

        assert text == 'done'
        assert session.request.call_count == 3
        assert delays == [0.5, 1.0]

    def test_exhausted_raises(self):
        """Esgotadas as tentativas levanta FetchExhausted com o último erro"""
        session = MagicMock()
        session.request.return_value = _response(404)
        delays = []

        with pytest.raises(FetchExhausted) as exc_info:
            _fetcher(session, delays, retries=2).fetch_text(f"{HOME}missing/")

        assert isinstance(exc_info.value, FetchError)
        assert exc_info.value.attempts == 2
        assert exc_info.value.reason == 'HTTP 404'
        # Sem espera após a última tentativa
        assert delays == [0.5]

    def test_failed_proxy_is_marked_and_rotated(self):
        """Erro de conexão via proxy marca o proxy e a próxima tentativa usa outro"""
        pool = ProxyPool(enabled=True, proxy_list=['10.0.0.1:8080', '10.0.0.2:8080'], proxy_file='', validate=False)
        pool.initialize()
        session = MagicMock()
        session.request.side_effect = [requests.Timeout('lento'), _response(200, 'ok')]

        text = _fetcher(session, [], proxy_pool=pool).fetch_text(HOME)

        assert text == 'ok'
        first_proxies = session.request.call_args_list[0].kwargs['proxies']
        second_proxies = session.request.call_args_list[1].kwargs['proxies']
        assert first_proxies['http'] == 'http://10.0.0.1:8080'
        assert second_proxies['http'] == 'http://10.0.0.2:8080'
        assert pool.get_stats()['active'] == 1

    def test_proceeds_without_proxy(self):
        """Pool vazio ou desativado: requisição segue sem proxy"""
        pool = ProxyPool(enabled=False, proxy_list=[], proxy_file='')
        session = MagicMock()
        session.request.return_value = _response(200, 'ok')

        _fetcher(session, [], proxy_pool=pool).fetch_text(HOME)

        assert session.request.call_args.kwargs['proxies'] is None

    def test_post_form(self):
        """POST de formulário envia dados e headers de XHR"""
        session = MagicMock()
        session.request.return_value = _response(200, '<li></li>')
        data = {'action': 'action_select_season', 'season': '1', 'post': '10'}

        _fetcher(session, []).post_form(f"{HOME}wp-admin/admin-ajax.php", data, referer=HOME)

        args, kwargs = session.request.call_args
        assert args[0] == 'POST'
        assert kwargs['data'] == data
        assert kwargs['headers']['X-Requested-With'] == 'XMLHttpRequest'
        assert kwargs['headers']['Referer'] == HOME
