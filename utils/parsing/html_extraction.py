"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

import re
import logging
from typing import Callable, Dict, List, Optional, Union
from bs4 import BeautifulSoup, Tag

from models.episode import EpisodeCard, SeriesEpisodeLink, ServerOption
from utils.parsing.episode_code import parse_episode_code, parse_episode_code_text
from utils.parsing.url_utils import (
    LAZY_SRC_ATTRS,
    first_valid_url,
    has_redirector_marker,
    is_same_host,
    normalize_image_url,
    normalize_url,
    url_origin,
)

logger = logging.getLogger(__name__)

Markup = Union[str, bytes, BeautifulSoup]

# Template da URL intermediária do player (dooplay)
TREMBED_URL_TEMPLATE = "{origin}/?trembed={nume}&trid={post}&trtype={type}"

_POST_ID_SCRIPT_PATTERNS = [
    re.compile(r'"post_id"\s*:\s*"?(\d+)"?'),
    re.compile(r"'post_id'\s*:\s*'?(\d+)'?"),
    re.compile(r'post[_-]?id\s*=\s*[\'"]?(\d+)[\'"]?', re.IGNORECASE),
]

_NONCE_SCRIPT_PATTERNS = [
    re.compile(r'["\']nonce["\']\s*:\s*["\']([A-Za-z0-9_-]+)["\']'),
    re.compile(r'["\']_wpnonce["\']\s*:\s*["\']([A-Za-z0-9_-]+)["\']'),
    re.compile(r'nonce\s*=\s*["\']([A-Za-z0-9_-]+)["\']'),
    re.compile(r'ajax_nonce\s*[=:]\s*["\']([A-Za-z0-9_-]+)["\']'),
    re.compile(r'security\s*[=:]\s*["\']([A-Za-z0-9_-]+)["\']'),
    re.compile(r'dooplay\s*=\s*\{[^}]*nonce\s*:\s*["\']([A-Za-z0-9_-]+)["\']'),
    re.compile(r'var\s+\w+\s*=\s*\{[^}]*["\']nonce["\']\s*:\s*["\']([A-Za-z0-9_-]+)["\']'),
]

_BODY_POST_ID_REGEX = re.compile(r'postid-(\d+)')
_SEASON_TEXT_REGEX = re.compile(r'season\s+(\d+)', re.IGNORECASE)
_YEAR_REGEX = re.compile(r'\d{4}')
_WHITESPACE_REGEX = re.compile(r'\s+')


# Aceita HTML bruto ou documento já parseado (evita parse duplicado)
def as_document(markup: Markup) -> BeautifulSoup:
    if isinstance(markup, BeautifulSoup):
        return markup
    return BeautifulSoup(markup or '', 'html.parser')


def _collapse_whitespace(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    collapsed = _WHITESPACE_REGEX.sub(' ', text).strip()
    return collapsed or None


# Primeira URL navegável entre os atributos (placeholders como about:blank são pulados)
def _lazy_src(elem: Optional[Tag], base_url: Optional[str] = None,
              attrs=('data-src', 'src', 'data-lazy-src')) -> Optional[str]:
    if not elem:
        return None
    return first_valid_url((elem.get(attr) for attr in attrs), base_url)


def _meta_content(doc: BeautifulSoup, prop: str) -> Optional[str]:
    meta = doc.find('meta', attrs={'property': prop})
    if meta and meta.get('content'):
        return meta.get('content').strip() or None
    return None


def _script_texts(doc: BeautifulSoup) -> List[str]:
    return [script.string or script.get_text() or '' for script in doc.find_all('script')]


# Cards de episódio da home/listagem - dedup por URL normalizada
def extract_episode_cards(html: Markup, base_url: Optional[str] = None) -> List[EpisodeCard]:
    doc = as_document(html)
    cards = []
    seen = set()

    for article in doc.select('article.episodes, article.post'):
        anchor = article.select_one('a[href*="/episode/"]')
        if not anchor:
            continue

        url = normalize_url(anchor.get('href'), base_url)
        if not url or url in seen:
            continue
        seen.add(url)

        title_elem = article.select_one('.entry-title, h2')
        title = title_elem.get_text(strip=True) if title_elem else ''
        if not title:
            title = (anchor.get('title') or '').strip()

        img = article.select_one('figure img, .post-thumbnail img, img')
        thumb = _lazy_src(img, base_url)

        cards.append(EpisodeCard(url=url, title=title, thumbnail_url=thumb))

    if cards:
        return cards

    # Fallback: qualquer âncora com caminho de episódio
    for anchor in doc.select('a[href*="/episode/"], a[href*="/watch/"]'):
        url = normalize_url(anchor.get('href'), base_url)
        if not url or url in seen:
            continue
        seen.add(url)

        title = (anchor.get('title') or anchor.get_text() or '').strip()
        thumb = _lazy_src(anchor.find('img'), base_url, ('data-src', 'src'))
        cards.append(EpisodeCard(url=url, title=title, thumbnail_url=thumb))

    return cards


# Links de episódios da página da série, ordenados por (temporada, episódio)
def extract_series_episode_links(html: Markup, base_url: Optional[str] = None) -> List[SeriesEpisodeLink]:
    doc = as_document(html)
    links = []
    seen = set()

    for anchor in doc.select('a[href*="/episode/"]'):
        url = normalize_url(anchor.get('href'), base_url)
        if not url or '/episode/' not in url:
            continue

        code = parse_episode_code(url)
        if not code or code.key in seen:
            continue
        seen.add(code.key)

        thumb = _lazy_src(anchor.find('img'), base_url, ('data-src', 'src'))
        links.append(SeriesEpisodeLink(
            url=url,
            code=code,
            title=anchor.get_text(strip=True),
            thumbnail_url=thumb
        ))

    links.sort(key=lambda link: (link.season, link.episode))
    return links


# Opções de servidor: player options (dooplay) viram URL trembed; iframes externos são diretos
def extract_embeds(html: Markup, base_url: str, source_host: Optional[str] = None) -> List[ServerOption]:
    doc = as_document(html)
    options = []
    seen = set()
    origin = url_origin(base_url)

    for item in doc.select('li.dooplay_player_option'):
        post = (item.get('data-post') or '').strip()
        nume = (item.get('data-nume') or '').strip()
        player_type = (item.get('data-type') or '').strip() or '2'

        # data-nume="trailer" e similares não são servidores
        if not post or not nume.isdigit():
            continue

        trembed_url = TREMBED_URL_TEMPLATE.format(origin=origin, nume=nume, post=post, type=player_type)
        if trembed_url in seen:
            continue
        seen.add(trembed_url)

        option_number = int(nume) + 1
        options.append(ServerOption(
            name=f"Server {option_number}",
            option=option_number,
            intermediate_url=trembed_url
        ))

    for iframe in doc.find_all('iframe'):
        url = _lazy_src(iframe, base_url, LAZY_SRC_ATTRS)
        if not url or url in seen:
            continue
        seen.add(url)

        is_external = not is_same_host(url, source_host) and not has_redirector_marker(url)
        option_number = len(options) + 1
        options.append(ServerOption(
            name=f"Server {option_number}",
            option=option_number,
            intermediate_url=None if is_external else url,
            direct_url=url if is_external else None
        ))

    return options


def _first_match(extractors: List[Callable[[], Optional[str]]]) -> Optional[str]:
    for extractor in extractors:
        value = extractor()
        if value:
            value = str(value).strip()
            if value:
                return value
    return None


def _match_scripts(doc: BeautifulSoup, patterns: List[re.Pattern]) -> Optional[str]:
    for content in _script_texts(doc):
        for pattern in patterns:
            match = pattern.search(content)
            if match and match.group(1):
                return match.group(1)
    return None


# ID do post WordPress: data-attributes -> inputs -> body/article -> scripts
def extract_post_id(html: Markup) -> Optional[str]:
    doc = as_document(html)

    def from_data_attributes():
        elem = doc.select_one('[data-post], [data-post-id]')
        if not elem:
            return None
        return elem.get('data-post') or elem.get('data-post-id')

    def from_inputs():
        elem = doc.select_one('input[name="post"], input[name="post_id"]')
        return elem.get('value') if elem else None

    def from_body_class():
        body = doc.find('body')
        if not body:
            return None
        classes = ' '.join(body.get('class') or [])
        match = _BODY_POST_ID_REGEX.search(classes)
        return match.group(1) if match else None

    def from_article_id():
        article = doc.select_one('article[id^="post-"]')
        if not article:
            return None
        return article.get('id', '').replace('post-', '', 1)

    return _first_match([
        from_data_attributes,
        from_inputs,
        from_body_class,
        from_article_id,
        lambda: _match_scripts(doc, _POST_ID_SCRIPT_PATTERNS),
    ])


# Nonce do WordPress: inputs -> data-nonce -> scripts
def extract_nonce(html: Markup) -> Optional[str]:
    doc = as_document(html)

    def from_input(name):
        def extractor():
            elem = doc.select_one(f'input[name="{name}"]')
            return elem.get('value') if elem else None
        return extractor

    def from_data_attribute():
        elem = doc.select_one('[data-nonce]')
        return elem.get('data-nonce') if elem else None

    return _first_match([
        from_input('_wpnonce'),
        from_input('nonce'),
        from_data_attribute,
        lambda: _match_scripts(doc, _NONCE_SCRIPT_PATTERNS),
    ])


# Título, thumbnail e pôster da página do episódio
def extract_episode_meta(html: Markup, base_url: Optional[str] = None) -> Dict[str, Optional[str]]:
    doc = as_document(html)

    title_elem = doc.select_one('h1.entry-title')
    title = title_elem.get_text(strip=True) if title_elem else None
    if not title:
        title = _meta_content(doc, 'og:title')
    if not title and doc.title:
        title = doc.title.get_text(strip=True)

    thumbnail = _meta_content(doc, 'og:image')
    if not thumbnail:
        thumbnail = _lazy_src(doc.select_one('div.post-thumbnail img'), base_url, ('src',))
    if not thumbnail:
        thumbnail = _lazy_src(doc.select_one('div.video-options img'), base_url, ('src',))

    poster = _lazy_src(doc.select_one('div.video-options img'), base_url, LAZY_SRC_ATTRS)

    return {
        'title': _collapse_whitespace(title),
        'thumbnail': normalize_image_url(thumbnail, base_url),
        'poster': poster,
    }


# Metadados da página da série (título, descrição, pôster, gêneros, ano)
def extract_series_meta(html: Markup, base_url: Optional[str] = None) -> Dict:
    doc = as_document(html)

    title_elem = doc.select_one('h1.entry-title')
    title = title_elem.get_text(strip=True) if title_elem else None
    if not title:
        title = _meta_content(doc, 'og:title')
    if not title and doc.title:
        title = doc.title.get_text(strip=True)

    description = _meta_content(doc, 'og:description')
    if not description:
        paragraph = doc.select_one('div.entry-content p')
        description = paragraph.get_text(strip=True) if paragraph else None

    poster = _meta_content(doc, 'og:image')
    if not poster:
        poster = _lazy_src(doc.select_one('div.post-thumbnail img'), base_url, ('src',))

    genres = []
    for link in doc.select('a[rel="tag"], .genres a'):
        name = link.get_text(strip=True)
        if name and name not in genres:
            genres.append(name)

    year = None
    year_elem = doc.select_one('span.year, .year')
    if year_elem:
        match = _YEAR_REGEX.search(year_elem.get_text())
        if match:
            year = int(match.group(0))

    return {
        'title': _collapse_whitespace(title),
        'description': _collapse_whitespace(description),
        'poster': normalize_image_url(poster, base_url),
        'genres': genres,
        'year': year,
    }


# URL da série a partir do breadcrumb (último link para /series/)
def extract_series_url_from_breadcrumb(html: Markup, base_url: Optional[str] = None) -> Optional[str]:
    doc = as_document(html)
    links = doc.select('nav.breadcrumb a[href*="/series/"], .entry-meta a[href*="/series/"]')
    if not links:
        return None
    return normalize_url(links[-1].get('href'), base_url)


# Temporadas disponíveis na página da série (padrão: [1])
def extract_season_numbers(html: Markup) -> List[int]:
    doc = as_document(html)
    seasons = set()

    for elem in doc.select('[data-season], option[value]'):
        value = (elem.get('data-season') or elem.get('value') or '').strip()
        if value.isdigit() and int(value) > 0:
            seasons.add(int(value))

    if not seasons:
        for block in doc.select('.aa-cnt .se-c'):
            label = block.select_one('.se-t')
            match = _SEASON_TEXT_REGEX.search(label.get_text() if label else '')
            if match:
                seasons.add(int(match.group(1)))

    if not seasons:
        seasons.add(1)

    return sorted(seasons)


# Lista de episódios retornada pela API AJAX de temporadas (action_select_season)
def parse_season_episodes(html: Markup, base_url: Optional[str] = None) -> List[SeriesEpisodeLink]:
    doc = as_document(html)
    episodes = []

    for item in doc.find_all('li'):
        article = item.select_one('article.post, article.episodes')
        if not article:
            continue

        link = article.select_one('a.lnk-blk, a[href*="/episode/"]')
        url = normalize_url(link.get('href') if link else None, base_url)

        code_elem = article.select_one('.num-epi, .entry-header span')
        code = parse_episode_code_text(code_elem.get_text(strip=True) if code_elem else '')
        if not url or not code:
            continue

        title_elem = article.select_one('.entry-title, h2')
        image = _lazy_src(article.select_one('img'), base_url)

        episodes.append(SeriesEpisodeLink(
            url=url,
            code=code,
            title=title_elem.get_text(strip=True) if title_elem else '',
            thumbnail_url=image
        ))

    return episodes
