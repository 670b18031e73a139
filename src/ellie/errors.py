"""Exceções do domínio ellie-live.

Todas derivam de ``EllieLiveError`` para que ``src.main`` possa reportar
falhas esperadas numa única linha em stderr, deixando o resto propagar.
"""


class EllieLiveError(Exception):
    """Base para erros esperados do fluxo de scaffolding."""


class InvalidIdentifierError(EllieLiveError, ValueError):
    """Identificador/URL do Ellie que não pode ser usado como diretório."""


class FetchError(EllieLiveError):
    """Falha ao obter a revisão a partir da API do Ellie."""


class ModuleHeaderError(EllieLiveError, ValueError):
    """Código Elm sem cabeçalho ``module X exposing (..)``."""


class EntrypointError(EllieLiveError):
    """Zero ou vários ficheiros .elm encontrados ao retomar um projeto."""

    def __init__(self, message: str, paths: list | None = None):
        super().__init__(message)
        self.paths = list(paths or [])


class CommandNotFoundError(EllieLiveError):
    """Executável externo ausente (elm-json, git, elm-live...)."""


class CommandFailedError(EllieLiveError):
    """Comando externo terminou com código diferente de zero."""

    def __init__(self, result):
        super().__init__(f"comando falhou ({result.describe()}): {' '.join(result.args)}")
        self.result = result
