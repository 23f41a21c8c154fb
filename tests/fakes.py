"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""

from exceptions import FetchExhausted

HOME = 'https://toonstream.one/'
SOURCE_HOST = 'toonstream.one'


class FakeFetcher:
    """Fetcher em memória: URL -> HTML (ou exceção); registra as chamadas"""

    def __init__(self, pages=None, ajax=None):
        self.pages = dict(pages or {})
        self.ajax = ajax or {}
        self.calls = []
        self.posts = []

    def fetch_text(self, url, referer=None, **kwargs):
        self.calls.append((url, referer))
        page = self.pages.get(url)
        if page is None:
            raise FetchExhausted(url, 'HTTP 404', 1)
        if isinstance(page, Exception):
            raise page
        return page

    def post_form(self, url, data, referer=None):
        self.posts.append((url, dict(data)))
        key = (data.get('post'), int(data.get('season')))
        response = self.ajax.get(key)
        if response is None:
            raise FetchExhausted(url, 'HTTP 400', 1)
        return response

    def fetched(self, url):
        return [call for call in self.calls if call[0] == url]
