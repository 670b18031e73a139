"""Pacote ellie: fetch de snippets, extração de módulos e scaffolding.

Re-exports usados por ``src.core`` e pelos testes.
"""

from .errors import EllieLiveError
from .models import ModulePath, Package, SnippetPayload, FetchResult

__all__ = ["EllieLiveError", "ModulePath", "Package", "SnippetPayload", "FetchResult"]
