"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""


# Exceção base para erros de requisição HTTP
class FetchError(Exception):
    pass


# Todas as tentativas de uma requisição falharam
class FetchExhausted(FetchError):
    def __init__(self, url: str, reason: str = "", attempts: int = 0):
        self.url = url
        self.reason = reason
        self.attempts = attempts
        message = f"Falha ao buscar {url}"
        if attempts:
            message += f" após {attempts} tentativa(s)"
        if reason:
            message += f": {reason}"
        super().__init__(message)
