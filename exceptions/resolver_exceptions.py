"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""


# Exceção base para erros do resolvedor de embeds
class ResolverError(Exception):
    pass


# Cadeia de embed abandonada (salto não carregou)
class ResolutionAbandoned(ResolverError):
    def __init__(self, url: str, depth: int, reason: str = ""):
        self.url = url
        self.depth = depth
        self.reason = reason
        message = f"Resolução abandonada em {url} (profundidade {depth})"
        if reason:
            message += f" - {reason}"
        super().__init__(message)
