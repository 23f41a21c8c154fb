"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import random
from typing import Dict, Optional

from utils.parsing.url_utils import is_same_host, url_origin

# Pool fixo de User-Agents (um sorteado por requisição)
USER_AGENTS = [
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0',
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Safari/605.1.15',
    'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
]

BASE_HEADERS = {
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
    'Cache-Control': 'no-cache',
    'Pragma': 'no-cache',
    'Upgrade-Insecure-Requests': '1',
}


def random_user_agent() -> str:
    return random.choice(USER_AGENTS)


# Monta headers de navegador; headers de domínio só para o site de origem
def build_request_headers(
    url: str,
    source_host: Optional[str] = None,
    home_url: Optional[str] = None,
    cookies: Optional[str] = None,
    referer: Optional[str] = None,
    extra_headers: Optional[Dict[str, str]] = None
) -> Dict[str, str]:
    headers = {'User-Agent': random_user_agent(), **BASE_HEADERS}

    if referer:
        headers['Referer'] = referer

    if extra_headers:
        headers.update(extra_headers)

    if source_host and is_same_host(url, source_host):
        if not headers.get('Referer') and home_url:
            headers['Referer'] = home_url

        if home_url:
            headers['Origin'] = url_origin(home_url)
        headers['Sec-Fetch-Dest'] = 'document'
        headers['Sec-Fetch-Mode'] = 'navigate'
        headers['Sec-Fetch-Site'] = 'same-origin'
        headers['Sec-Fetch-User'] = '?1'

        if cookies:
            headers['Cookie'] = cookies

    return headers
