"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""


# Exceção base para erros de scraper
class ScraperError(Exception):
    pass


# Erro de configuração (variáveis obrigatórias ausentes ou inválidas)
class ConfigurationError(ScraperError):
    def __init__(self, message: str, missing: list = None):
        self.message = message
        self.missing = missing or []
        if self.missing:
            message = f"{message}: {', '.join(self.missing)}"
        super().__init__(message)


# URL de episódio sem código <temporada>x<episódio>
class InvalidEpisodeUrlError(ScraperError):
    def __init__(self, url: str, reason: str = "código de episódio ausente"):
        self.url = url
        self.reason = reason
        super().__init__(f"URL de episódio inválida: {url} - {reason}")
