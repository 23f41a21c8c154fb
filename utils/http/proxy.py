"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import logging
import os
import time
from typing import Dict, List, Optional
from urllib.parse import urlparse

import requests

from app.config import Config
from models.proxy import (
    HEALTH_FAILED,
    HEALTH_HEALTHY,
    HEALTH_UNTESTED,
    VALID_PROXY_TYPES,
    ProxyEndpoint,
)

logger = logging.getLogger(__name__)


def _valid_port(port) -> Optional[int]:
    # Valida se a porta é um número válido
    try:
        port_int = int(str(port).strip())
    except (ValueError, TypeError):
        return None
    if port_int <= 0 or port_int > 65535:
        return None
    return port_int


def _normalize_proxy_type(proxy_type: Optional[str]) -> str:
    proxy_type = (proxy_type or 'http').lower().strip()
    # Tipo inválido usa http como padrão
    return proxy_type if proxy_type in VALID_PROXY_TYPES else 'http'


def parse_proxy(line: str, default_type: str = 'http') -> Optional[ProxyEndpoint]:
    """
    Interpreta uma linha de proxy.

    Formatos aceitos:
        host:port
        host:port:user:pass
        user:pass@host:port
        scheme://[user:pass@]host:port

    Returns:
        ProxyEndpoint ou None se a linha for inválida
    """
    if not line:
        return None
    line = line.strip()
    if not line or line.startswith('#'):
        return None

    scheme = _normalize_proxy_type(default_type)

    if '://' in line:
        try:
            parsed = urlparse(line)
            port = _valid_port(parsed.port)
        except ValueError:
            return None
        if not parsed.hostname or not port:
            return None
        return ProxyEndpoint(
            host=parsed.hostname,
            port=port,
            username=parsed.username or None,
            password=parsed.password or None,
            scheme=_normalize_proxy_type(parsed.scheme)
        )

    username = password = None
    if '@' in line:
        credentials, address = line.rsplit('@', 1)
        if ':' not in credentials:
            return None
        username, password = credentials.split(':', 1)
        parts = address.split(':')
        if len(parts) != 2:
            return None
        host, port = parts
    else:
        parts = line.split(':')
        if len(parts) == 2:
            host, port = parts
        elif len(parts) == 4:
            host, port, username, password = parts
        else:
            return None

    port_int = _valid_port(port)
    host = host.strip()
    if not host or not port_int:
        return None

    return ProxyEndpoint(
        host=host,
        port=port_int,
        username=(username or '').strip() or None,
        password=(password or '').strip() or None,
        scheme=scheme
    )


class ProxyPool:
    """Pool de proxies com rodízio round-robin e exclusão de proxies com falha.

    Com o pool desativado todas as operações são no-op e get_next_proxy()
    sempre retorna None (as requisições seguem sem proxy).
    """

    def __init__(
        self,
        enabled: Optional[bool] = None,
        proxy_list: Optional[List[str]] = None,
        proxy_file: Optional[str] = None,
        validate: Optional[bool] = None,
        test_url: Optional[str] = None,
        max_test: Optional[int] = None,
        proxy_type: Optional[str] = None,
        test_timeout: Optional[int] = None,
        session: Optional[requests.Session] = None
    ):
        self.enabled = Config.USE_PROXY if enabled is None else enabled
        self.proxy_list = Config.PROXY_LIST if proxy_list is None else proxy_list
        self.proxy_file = Config.PROXY_FILE if proxy_file is None else proxy_file
        self.validate = Config.PROXY_VALIDATE if validate is None else validate
        self.test_url = test_url or Config.PROXY_TEST_URL
        self.max_test = Config.PROXY_MAX_TEST if max_test is None else max_test
        self.proxy_type = _normalize_proxy_type(proxy_type or Config.PROXY_TYPE)
        self.test_timeout = test_timeout or Config.PROXY_TEST_TIMEOUT
        self.session = session
        self.proxies: List[ProxyEndpoint] = []
        self._cursor = 0

    def _load_candidates(self) -> List[ProxyEndpoint]:
        lines = list(self.proxy_list or [])

        if self.proxy_file:
            if os.path.isfile(self.proxy_file):
                with open(self.proxy_file, 'r', encoding='utf-8') as handle:
                    lines.extend(handle.read().splitlines())
            else:
                logger.warning(f"Arquivo de proxies não encontrado: {self.proxy_file}")

        candidates = []
        seen = set()
        for line in lines:
            proxy = parse_proxy(line, self.proxy_type)
            if not proxy:
                if line.strip() and not line.strip().startswith('#'):
                    logger.debug(f"Linha de proxy ignorada: {line.strip()[:40]}")
                continue
            if proxy.key in seen:
                continue
            seen.add(proxy.key)
            candidates.append(proxy)
        return candidates

    def _probe(self, proxy: ProxyEndpoint) -> bool:
        getter = self.session.get if self.session else requests.get
        try:
            response = getter(
                self.test_url,
                proxies=proxy.as_requests_proxies(),
                timeout=self.test_timeout
            )
            return 200 <= response.status_code < 400
        except requests.RequestException as e:
            logger.debug(f"Proxy {proxy} falhou no teste: {type(e).__name__}")
            return False

    def initialize(self) -> None:
        # Recarrega candidatos (falhas anteriores são esquecidas)
        self.proxies = []
        self._cursor = 0

        if not self.enabled:
            logger.info("Proxy desativado")
            return

        candidates = self._load_candidates()
        if not candidates:
            logger.warning("Proxy ativado, mas nenhum proxy válido foi configurado")
            return

        if self.validate:
            tested = 0
            for proxy in candidates:
                if tested >= self.max_test:
                    # Além do limite de testes: permanece sem teste e em rodízio
                    self.proxies.append(proxy)
                    continue
                tested += 1
                if self._probe(proxy):
                    proxy.health = HEALTH_HEALTHY
                    self.proxies.append(proxy)
            logger.info(f"Proxies testados: {tested} - ativos: {len(self.proxies)}/{len(candidates)}")
        else:
            self.proxies = candidates
            logger.info(f"Proxies carregados: {len(self.proxies)} (sem validação)")

    def get_next_proxy(self) -> Optional[ProxyEndpoint]:
        if not self.enabled or not self.proxies:
            return None

        total = len(self.proxies)
        for offset in range(total):
            index = (self._cursor + offset) % total
            proxy = self.proxies[index]
            if not proxy.is_failed:
                self._cursor = (index + 1) % total
                return proxy

        return None

    def mark_proxy_as_failed(self, proxy: Optional[ProxyEndpoint]) -> None:
        if not self.enabled or proxy is None:
            return
        if proxy.health != HEALTH_FAILED:
            proxy.health = HEALTH_FAILED
            proxy.last_failure_time = time.time()
            logger.warning(f"Proxy marcado como falho: {proxy}")

    def get_stats(self) -> Dict:
        active = [proxy for proxy in self.proxies if not proxy.is_failed]
        return {
            'enabled': self.enabled,
            'total': len(self.proxies),
            'active': len(active),
            'healthy': len([proxy for proxy in active if proxy.health == HEALTH_HEALTHY]),
            'untested': len([proxy for proxy in active if proxy.health == HEALTH_UNTESTED]),
        }
