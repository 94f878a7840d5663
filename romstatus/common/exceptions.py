"""Hierarquia de exceções customizadas do romstatus.

Erros de I/O do sistema de ficheiros (OSError) nunca são embrulhados aqui:
propagam tal como chegam para que o chamador decida o que fazer.
"""

from __future__ import annotations
from typing import Optional, Any


# ============================================================================
# BASE EXCEPTIONS
# ============================================================================

class RomStatusError(Exception):
    """Exceção base para todos os erros do romstatus."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ConfigurationError(RomStatusError):
    """Erro relacionado à configuração do sistema."""
    pass


# ============================================================================
# DAT ERRORS
# ============================================================================

class DATError(RomStatusError):
    """Erro relacionado a ficheiros DAT."""
    pass


class DATParseError(DATError):
    """Erro ao fazer parse de ficheiro DAT."""

    def __init__(self, path: str, reason: str = ""):
        msg = f"Falha ao processar DAT {path}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, {"path": path, "reason": reason})
        self.path = path


class StatusConsistencyError(DATError):
    """Um jogo ficou classificado como encontrado e incompleto ao mesmo tempo."""

    def __init__(self, dat_name: str, game_names: list[str]):
        super().__init__(
            f"Jogos em partições encontrado/incompleto simultaneamente: {', '.join(game_names)}",
            {"dat": dat_name, "count": len(game_names)},
        )
        self.game_names = game_names


# ============================================================================
# NETWORKING ERRORS
# ============================================================================

class NetworkError(RomStatusError):
    """Erro relacionado a operações de rede."""
    pass


class DownloadError(NetworkError):
    """Erro ao fazer download de ficheiro."""

    def __init__(self, url: str, reason: str = ""):
        msg = f"Falha ao descarregar {url}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, {"url": url, "reason": reason})
        self.url = url


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def format_exception_chain(exc: BaseException) -> str:
    """Formata uma exceção com toda a cadeia de causas."""
    messages = []
    current: Optional[BaseException] = exc
    while current is not None:
        if isinstance(current, RomStatusError):
            messages.append(str(current))
        else:
            messages.append(f"{type(current).__name__}: {current}")
        current = current.__cause__

    return " → ".join(messages)
