"""Descoberta do módulo Elm de entrada.

- extract_module_path: lê o cabeçalho ``module X.Y exposing (..)`` do código
- resolve_entrypoint: recupera o módulo a partir de ``src/`` num projeto já
  existente (sem payload disponível)
"""

import re
from pathlib import Path

from .errors import EntrypointError, ModuleHeaderError
from .models import SOURCE_DIR, SOURCE_EXT, ModulePath

_MODULE_HEADER_RE = re.compile(
    r"^(?:port\s+)?module\s+([A-Z][A-Za-z0-9_]*(?:\.[A-Z][A-Za-z0-9_]*)*)\s+exposing\s*\(",
    re.MULTILINE,
)


def extract_module_path(source: str) -> ModulePath:
    """Retorna os segmentos do primeiro cabeçalho de módulo encontrado.

    Levanta ``ModuleHeaderError`` se o código não declarar um módulo.
    """
    match = _MODULE_HEADER_RE.search(source or "")
    if match is None:
        raise ModuleHeaderError("cabeçalho 'module ... exposing (...)' não encontrado no código Elm")
    return ModulePath.from_dotted(match.group(1))


def find_source_files(project_dir: Path | str) -> list[Path]:
    """Lista ordenada de ficheiros ``.elm`` sob ``<project_dir>/src``."""
    src = Path(project_dir) / SOURCE_DIR
    if not src.is_dir():
        return []
    return sorted(p for p in src.rglob(f"*{SOURCE_EXT}") if p.is_file())


def resolve_entrypoint(project_dir: Path | str) -> ModulePath:
    """Recupera o ``ModulePath`` do único ficheiro Elm do projeto.

    Zero ou múltiplos ficheiros levantam ``EntrypointError`` com a lista de
    caminhos encontrados. Sem cache: o diretório é lido a cada chamada.
    """
    project_dir = Path(project_dir)
    found = find_source_files(project_dir)
    rel = [p.relative_to(project_dir).as_posix() for p in found]
    if not found:
        raise EntrypointError(f"nenhum ficheiro {SOURCE_EXT} encontrado em {project_dir / SOURCE_DIR}", rel)
    if len(found) > 1:
        raise EntrypointError(
            f"esperado um único ficheiro {SOURCE_EXT} em {project_dir / SOURCE_DIR}, encontrados: {', '.join(rel)}",
            rel,
        )

    inner = found[0].relative_to(project_dir / SOURCE_DIR)
    return ModulePath(inner.with_suffix("").parts)
