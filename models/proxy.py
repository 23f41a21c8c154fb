"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

from dataclasses import dataclass
from typing import Dict, Optional

HEALTH_UNTESTED = 'untested'
HEALTH_HEALTHY = 'healthy'
HEALTH_FAILED = 'failed'

VALID_PROXY_TYPES = ['http', 'https', 'socks5', 'socks5h']


# Endpoint de proxy gerenciado pelo ProxyPool
@dataclass
class ProxyEndpoint:
    host: str
    port: int
    username: Optional[str] = None
    password: Optional[str] = None
    scheme: str = 'http'
    health: str = HEALTH_UNTESTED
    last_failure_time: Optional[float] = None

    @property
    def url(self) -> str:
        """Monta a URL no formato [protocol]://[user:pass@]host:port"""
        if self.username and self.password:
            return f"{self.scheme}://{self.username}:{self.password}@{self.host}:{self.port}"
        return f"{self.scheme}://{self.host}:{self.port}"

    @property
    def key(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def is_failed(self) -> bool:
        return self.health == HEALTH_FAILED

    def as_requests_proxies(self) -> Dict[str, str]:
        """Dicionário de proxy para requests (mesmo túnel para http e https)"""
        return {
            'http': self.url,
            'https': self.url
        }

    def __str__(self) -> str:
        # Nunca expõe credenciais em logs
        return f"{self.scheme}://{self.key}"
