"""Copyright (c) 2025 DFlexy"""
"""https://github.com/DFlexy"""


# Exceção base para erros de persistência
class StorageError(Exception):
    pass


# Armazenamento rejeitou uma escrita ou leitura
class PersistenceFailure(StorageError):
    def __init__(self, table: str, reason: str = "", status_code: int = 0):
        self.table = table
        self.reason = reason
        self.status_code = status_code
        message = f"Falha de persistência na tabela '{table}'"
        if status_code:
            message += f" (HTTP {status_code})"
        if reason:
            message += f" - {reason}"
        super().__init__(message)
