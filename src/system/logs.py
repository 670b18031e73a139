"""Subsistema de logs: diretórios, ficheiro de debug e histórico de sessões.

A raiz vem de ``ELLIE_LOG_ROOT`` (ou de ``settings["log_root"]``). Dentro
dela:

- ``debug/debug_log-<data>.txt`` (+ ``.jsonl``): handlers instalados por
  ``src.main``;
- ``history.jsonl``: uma linha por projeto criado ou retomado.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from ..config.settings import DEFAULT_SETTINGS
from .log_helpers import ensure_dir_writable, format_date_for_log, utc_timestamp, write_json

logger = logging.getLogger(__name__)

DEBUG_LOG_FILENAME = "debug_log"
HISTORY_FILENAME = "history.jsonl"


@dataclass(frozen=True)
# Representa os diretórios usados pelo subsistema de logs
class LogPaths:
    """Agrupa a raiz de logs e o diretório de debug."""

    root: Path
    debug_dir: Path

    @property
    def history_file(self) -> Path:
        return self.root / HISTORY_FILENAME


def get_log_paths(root: str | Path | None = None) -> LogPaths:
    """Resolve a raiz de logs e garante os diretórios criados.

    Prioridade: argumento, ``ELLIE_LOG_ROOT``, default de settings.
    """
    env_root = os.getenv("ELLIE_LOG_ROOT")
    candidate = root or env_root or DEFAULT_SETTINGS["log_root"]
    log_root = Path(candidate).expanduser()
    ensure_dir_writable(log_root)
    debug_dir = log_root / "debug"
    ensure_dir_writable(debug_dir)
    return LogPaths(log_root, debug_dir)


def get_debug_file_path(root: str | Path | None = None) -> Path:
    """Retorna caminho do arquivo de debug diário.

    Nomeia o arquivo com a data atual no diretório de debug.
    """
    date_str = format_date_for_log(None)
    return get_log_paths(root).debug_dir / f"{DEBUG_LOG_FILENAME}-{date_str}.txt"


def record_session(
    event: str,
    ellie_id: str,
    project_dir: Path,
    module: str,
    root: str | Path | None = None,
    durable: bool = True,
) -> None:
    """Anexa ao histórico um evento ``scaffolded`` ou ``resumed``."""
    entry = {
        "ts": utc_timestamp(),
        "event": event,
        "ellie_id": ellie_id,
        "project_dir": str(project_dir),
        "module": module,
    }
    logger.debug("record_session: %s", entry)
    write_json(get_log_paths(root).history_file, entry, durable)
