"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import logging
import time
from typing import Callable, Dict, Optional

import requests

from app.config import Config
from exceptions import FetchExhausted
from utils.http.headers import build_request_headers
from utils.parsing.url_utils import normalize_host

logger = logging.getLogger(__name__)


class HttpFetcher:
    """Busca texto via HTTP com retry, backoff linear, rodízio de User-Agent e proxy.

    Cada tentativa pede um proxy ao pool; erro de conexão ou timeout com
    proxy marca o proxy como falho antes da próxima tentativa. Status
    entre 200 e 399 é sucesso. Esgotadas as tentativas, levanta
    FetchExhausted.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        proxy_pool=None,
        source_host: Optional[str] = None,
        home_url: Optional[str] = None,
        cookies: Optional[str] = None,
        timeout: Optional[int] = None,
        retries: Optional[int] = None,
        base_delay: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.session = session or requests.Session()
        self.session.max_redirects = Config.MAX_REDIRECTS
        self.proxy_pool = proxy_pool
        self.home_url = home_url or Config.HOME_URL
        self.source_host = normalize_host(source_host or self.home_url)
        self.cookies = Config.COOKIES if cookies is None else cookies
        self.timeout = timeout or Config.REQUEST_TIMEOUT
        self.retries = retries or Config.MAX_RETRIES
        self.base_delay = Config.RETRY_BASE_DELAY if base_delay is None else base_delay
        self._sleep = sleep

    def _next_proxy(self):
        if not self.proxy_pool:
            return None
        return self.proxy_pool.get_next_proxy()

    def fetch_text(
        self,
        url: str,
        referer: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[int] = None,
        retries: Optional[int] = None,
        method: str = 'GET',
        data: Optional[Dict] = None
    ) -> str:
        attempts = retries or self.retries
        last_error = 'erro desconhecido'

        for attempt in range(1, attempts + 1):
            proxy = self._next_proxy()
            request_headers = build_request_headers(
                url,
                source_host=self.source_host,
                home_url=self.home_url,
                cookies=self.cookies,
                referer=referer,
                extra_headers=headers
            )

            try:
                response = self.session.request(
                    method,
                    url,
                    headers=request_headers,
                    data=data,
                    timeout=timeout or self.timeout,
                    proxies=proxy.as_requests_proxies() if proxy else None,
                    allow_redirects=True
                )
                if 200 <= response.status_code < 400:
                    return response.text or ''

                last_error = f"HTTP {response.status_code}"
                logger.warning(f"Requisição falhou ({response.status_code}) para {url[:80]} (tentativa {attempt}/{attempts})")
            except (requests.ConnectionError, requests.Timeout) as e:
                last_error = f"{type(e).__name__}: {str(e).splitlines()[0][:100] if str(e) else ''}"
                if proxy and self.proxy_pool:
                    self.proxy_pool.mark_proxy_as_failed(proxy)
                logger.debug(f"Erro de conexão em {url[:80]} (tentativa {attempt}/{attempts}): {last_error}")
            except requests.RequestException as e:
                last_error = f"{type(e).__name__}: {str(e).splitlines()[0][:100] if str(e) else ''}"
                logger.debug(f"Erro de requisição em {url[:80]} (tentativa {attempt}/{attempts}): {last_error}")

            if attempt < attempts:
                self._sleep(self.base_delay * attempt)

        raise FetchExhausted(url, last_error, attempts)

    def post_form(self, url: str, data: Dict, referer: Optional[str] = None) -> str:
        # POST de formulário para a API AJAX do site (admin-ajax.php)
        return self.fetch_text(
            url,
            referer=referer,
            headers={
                'X-Requested-With': 'XMLHttpRequest',
                'Accept': '*/*',
                'Content-Type': 'application/x-www-form-urlencoded; charset=UTF-8',
            },
            method='POST',
            data=data
        )
