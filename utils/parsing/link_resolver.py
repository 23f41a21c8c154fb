"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import re
import logging
from typing import List, Optional, Set
from bs4 import BeautifulSoup

from app.config import Config
from exceptions import FetchError, ResolutionAbandoned
from models.episode import (
    CLASSIFICATION_REDIRECTOR,
    CLASSIFICATION_REJECTED,
    CLASSIFICATION_TERMINAL,
    CLASSIFICATION_UNKNOWN,
    EmbedCandidate,
)
from utils.parsing.url_utils import (
    LAZY_SRC_ATTRS,
    first_valid_url,
    has_redirector_marker,
    is_same_host,
    normalize_url,
)

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = ('.mp4', '.m3u8', '.webm', '.mkv', '.avi', '.mov', '.flv')
VIDEO_PATH_MARKERS = ('/video/', '/stream/', '/hls/')
VIDEO_HOST_MARKERS = (
    'googlevideo.com', 'googleusercontent.com',
    'streamtape', 'filemoon', 'voe.sx', 'dood', 'mixdrop', 'streamlare',
)

# Fragmentos que identificam hosts/caminhos de players conhecidos
KNOWN_PLAYER_HOSTS = (
    'play.', 'player.', '/video/', '/embed/', '/e/', '/t/',
    'zephyrflick', 'filemoon', 'streamtape', 'dood', 'voe.sx', 'mixdrop',
    'emturbovid', 'turbovid', 'vidmoly', 'streamwish', 'vidhide', 'vidguard',
    'vidsrc', 'embedsito', 'upstream', 'mp4upload', 'okru', 'sbplay',
    'streamsb', 'vidcloud', 'goload', 'gogo',
)

FOLLOW_PATH_MARKERS = ('/embed/', '/player/', '/e/')

# Extratores de scripts em ordem de prioridade (o grupo 1, quando existe, é a URL)
SCRIPT_URL_PATTERNS = [
    # src=/file=/url= apontando para mídia
    re.compile(r'["\']?(?:src|file|source|url|video_url|stream_url)["\']?\s*[:=]\s*["\']([^"\']+\.(?:mp4|m3u8|webm)[^"\']*)', re.IGNORECASE),
    # iframe/embed/player montados em script
    re.compile(r'(?:iframe|embed|player).*?src=["\']([^"\']+)["\']', re.IGNORECASE),
    # Chaves JSON
    re.compile(r'"(?:url|file|src|source)":\s*"([^"]+)"', re.IGNORECASE),
    re.compile(r"'(?:url|file|src|source)':\s*'([^']+)'", re.IGNORECASE),
    # Setup de players (jwplayer, videojs)
    re.compile(r'(?:player|jwplayer|videojs).*?["\']?(?:file|src|source)["\']?\s*[:=]\s*["\']([^"\']+)', re.IGNORECASE),
    # Redirecionamentos via location
    re.compile(r'(?:window\.)?location(?:\.href)?\s*=\s*["\']([^"\']+)["\']'),
    re.compile(r'location\.replace\s*\(\s*["\']([^"\']+)["\']\s*\)'),
    # URLs de mídia soltas
    re.compile(r'https?://[^\s"\'<>\]]+\.(?:mp4|m3u8|webm)', re.IGNORECASE),
    # Qualquer URL https (último recurso)
    re.compile(r'https?://[^\s"\'<>\]]+', re.IGNORECASE),
]


def is_video_url(url: Optional[str]) -> bool:
    # Heurística de URL de vídeo: extensão, caminho de streaming ou host conhecido
    if not url:
        return False
    lower = url.lower()
    if any(ext in lower for ext in VIDEO_EXTENSIONS):
        return True
    if any(marker in url for marker in VIDEO_PATH_MARKERS):
        return True
    return any(marker in url for marker in VIDEO_HOST_MARKERS)


def needs_follow(url: Optional[str], source_host: Optional[str] = None) -> bool:
    # URL intermediária que precisa de mais um salto
    if not url:
        return False
    if has_redirector_marker(url):
        return True
    if source_host and is_same_host(url, source_host):
        return True
    return any(marker in url for marker in FOLLOW_PATH_MARKERS)


def is_known_player(url: Optional[str]) -> bool:
    if not url:
        return False
    return any(fragment in url for fragment in KNOWN_PLAYER_HOSTS)


def classify_iframe(url: Optional[str], source_host: Optional[str] = None) -> str:
    # Não navegável -> rejeitado; mesmo site ou redirecionador -> seguir; externo -> terminal
    if not normalize_url(url):
        return CLASSIFICATION_REJECTED
    if has_redirector_marker(url) or (source_host and is_same_host(url, source_host)):
        return CLASSIFICATION_REDIRECTOR
    if is_known_player(url) or is_video_url(url):
        return CLASSIFICATION_TERMINAL
    return CLASSIFICATION_UNKNOWN


class EmbedResolver:
    """Resolve uma URL intermediária de player até a URL final do vídeo/player.

    Busca em profundidade limitada: cada salto baixa a página, procura
    <video>/<source>, depois o primeiro iframe e por fim URLs em scripts.
    O conjunto de visitados é por chamada, então ciclos (A -> B -> A)
    terminam. Falha de rede em qualquer salto abandona a resolução e
    resolve() retorna None.
    """

    def __init__(self, fetcher, source_host: Optional[str] = None,
                 max_depth: Optional[int] = None, default_referer: Optional[str] = None):
        self.fetcher = fetcher
        self.source_host = source_host
        depth = Config.EMBED_MAX_DEPTH if max_depth is None else max_depth
        self.max_depth = depth + Config.EMBED_DEPTH_PADDING
        self.default_referer = default_referer

    def resolve(self, start_url: Optional[str], referer: Optional[str] = None) -> Optional[str]:
        if not start_url:
            return None

        visited: Set[str] = set()
        try:
            return self._resolve_hop(start_url, 0, referer or self.default_referer, visited)
        except ResolutionAbandoned as e:
            logger.warning(f"Resolução abandonada: {e}")
            return None

    def _resolve_hop(self, url: str, depth: int, referer: Optional[str], visited: Set[str]) -> str:
        if url in visited or depth > self.max_depth:
            return url

        visited.add(url)
        logger.debug(f"[Profundidade {depth}] Resolvendo: {url[:80]}")

        try:
            html = self.fetcher.fetch_text(url, referer=referer)
        except FetchError as e:
            raise ResolutionAbandoned(url, depth, str(e)[:120]) from e

        doc = BeautifulSoup(html or '', 'html.parser')

        direct = self._pick_direct_video(doc, url)
        if direct:
            logger.debug(f"Fonte de vídeo direta: {direct[:60]}")
            return direct

        iframe = self._pick_iframe(doc, url, depth, visited)
        if iframe:
            if iframe.classification != CLASSIFICATION_REDIRECTOR:
                logger.debug(f"Iframe terminal ({iframe.classification}): {iframe.url[:60]}")
                return iframe.url
            if depth < self.max_depth:
                return self._resolve_hop(iframe.url, depth + 1, url, visited)

        candidates = self._pick_from_scripts(doc, url, visited)
        for candidate in candidates:
            if is_video_url(candidate):
                logger.debug(f"Vídeo encontrado em script: {candidate[:60]}")
                return candidate

        if depth < self.max_depth:
            for candidate in candidates:
                if needs_follow(candidate, self.source_host):
                    return self._resolve_hop(candidate, depth + 1, url, visited)

        return url

    def _pick_direct_video(self, doc: BeautifulSoup, url: str) -> Optional[str]:
        for tag in doc.find_all(['video', 'source']):
            # blob: e afins não passam na normalização
            normalized = first_valid_url((tag.get(attr) for attr in LAZY_SRC_ATTRS), url)
            if normalized:
                return normalized
        return None

    def _pick_iframe(self, doc: BeautifulSoup, url: str, depth: int, visited: Set[str]) -> Optional[EmbedCandidate]:
        for iframe in doc.find_all('iframe'):
            normalized = first_valid_url((iframe.get(attr) for attr in LAZY_SRC_ATTRS), url)
            if not normalized or normalized == url or normalized in visited:
                continue
            candidate = EmbedCandidate(
                url=normalized,
                depth=depth + 1,
                classification=classify_iframe(normalized, self.source_host)
            )
            if candidate.classification != CLASSIFICATION_REJECTED:
                return candidate
        return None

    def _pick_from_scripts(self, doc: BeautifulSoup, url: str, visited: Set[str]) -> List[str]:
        candidates = []
        for script in doc.find_all('script'):
            content = script.string or script.get_text() or ''
            if not content:
                continue
            for pattern in SCRIPT_URL_PATTERNS:
                for match in pattern.finditer(content):
                    raw = match.group(1) if match.groups() else match.group(0)
                    normalized = normalize_url(raw, url)
                    if not normalized or normalized == url or normalized in visited:
                        continue
                    if normalized not in candidates:
                        candidates.append(normalized)
        return candidates
