"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

from typing import Iterable, Optional
from urllib.parse import urljoin, urlparse

# Entidades que o site costuma deixar codificadas dentro de href/src (ex: &#038; no lugar de &)
_HTML_ENTITIES = [
    ('&#038;', '&'),
    ('&#38;', '&'),
    ('&amp;', '&'),
    ('&#039;', "'"),
    ('&#39;', "'"),
    ('&apos;', "'"),
    ('&#034;', '"'),
    ('&#34;', '"'),
    ('&quot;', '"'),
    ('&lt;', '<'),
    ('&gt;', '>'),
]

# Atributos de URL em ordem de prioridade (players e imagens lazy-load)
LAZY_SRC_ATTRS = ('src', 'data-src', 'data-lazy-src')

_WEB_SCHEMES = ('http', 'https')

# Marcadores de URLs intermediárias do player do site
REDIRECTOR_MARKERS = ('trembed', 'trid=', 'trtype=')


# Decodifica entidades HTML comuns (numéricas e nomeadas) em uma URL bruta
def decode_html_entities(value: Optional[str]) -> Optional[str]:
    if not value:
        return value
    for entity, char in _HTML_ENTITIES:
        value = value.replace(entity, char)
    return value


# Normaliza URL: decodifica entidades, resolve relativa contra a base e aceita só http(s)
def normalize_url(raw_url: Optional[str], base: Optional[str] = None) -> Optional[str]:
    if not raw_url:
        return None

    decoded = decode_html_entities(raw_url.strip())
    if not decoded:
        return None

    try:
        resolved = urljoin(base, decoded) if base else decoded
        parsed = urlparse(resolved)
    except ValueError:
        return None

    # Sem esquema web (relativa sem base, about:, data:, javascript:) ou sem host não é navegável
    if parsed.scheme.lower() not in _WEB_SCHEMES or not parsed.netloc:
        return None

    return resolved


# Hostname em minúsculas sem prefixo www.
def normalize_host(url_or_host: Optional[str]) -> Optional[str]:
    if not url_or_host:
        return None
    value = url_or_host.strip()
    if '://' in value:
        try:
            value = urlparse(value).hostname or ''
        except ValueError:
            return None
    value = value.lower()
    if value.startswith('www.'):
        value = value[4:]
    return value or None


# Verifica se a URL pertence ao host do site de origem
def is_same_host(url: Optional[str], source_host: Optional[str]) -> bool:
    if not url or not source_host:
        return False
    host = normalize_host(url)
    return bool(host) and host == normalize_host(source_host)


# Verifica se a URL carrega marcadores de redirecionador do player (trembed/trid/trtype)
def has_redirector_marker(url: Optional[str]) -> bool:
    if not url:
        return False
    return any(marker in url for marker in REDIRECTOR_MARKERS)


# Origem (esquema + host) de uma URL
def url_origin(url: str) -> str:
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return url.rstrip('/')
    return f"{parsed.scheme}://{parsed.netloc}"


# Último segmento não vazio do caminho da URL
def last_path_segment(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    try:
        path = urlparse(url).path
    except ValueError:
        return None
    parts = [part for part in path.split('/') if part]
    return parts[-1] if parts else None


# Corrige URLs protocol-relative (//cdn...) e normaliza imagens
def normalize_image_url(raw_url: Optional[str], base: Optional[str] = None) -> Optional[str]:
    if not raw_url:
        return None
    raw_url = raw_url.strip()
    if raw_url.startswith('//'):
        return normalize_url(f"https:{raw_url}")
    return normalize_url(raw_url, base)


# Primeira URL navegável entre candidatos brutos (ex: src="about:blank" data-src="https://...")
def first_valid_url(candidates: Iterable[Optional[str]], base: Optional[str] = None) -> Optional[str]:
    for candidate in candidates:
        normalized = normalize_image_url(candidate, base)
        if normalized:
            return normalized
    return None
