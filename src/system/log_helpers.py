"""Helpers de baixo nível para o subsistema de logging.

Fornece escrita durável com lock exclusivo (portalocker), serialização
JSONL e verificação de diretórios graváveis.
"""

from pathlib import Path
import os
from datetime import datetime, timezone
import logging
import json as _json

import portalocker

logger = logging.getLogger(__name__)


# -----------------------
# Escrita segura
# -----------------------
def write_text(path: Path, text: str, durable: bool = True) -> None:
    """Anexe texto a `path` de forma segura, usando lock e fsync (quando `durable`).

    Cria o diretório pai quando necessário. Falhas de I/O são registadas
    e não interrompem o programa (o histórico é best-effort).
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            locked = False
            try:
                try:
                    portalocker.lock(fh, portalocker.LOCK_EX)
                    locked = True
                except portalocker.LockException as exc:
                    logger.debug("write_text: portalocker.lock falhou em %s: %s", path, exc)

                fh.write(text)
                fh.flush()

                if durable:
                    try:
                        os.fsync(fh.fileno())
                    except OSError as exc:
                        logger.debug("write_text: fsync falhou em %s: %s", path, exc)
            finally:
                if locked:
                    try:
                        portalocker.unlock(fh)
                    except portalocker.LockException as exc:
                        logger.debug("write_text: portalocker.unlock falhou em %s: %s", path, exc)
    except OSError as exc:
        logger.error("write_text: falhou em %s: %s", path, exc, exc_info=True)


def write_json(path: Path, obj: dict, durable: bool = True) -> None:
    """Serialize um objeto como JSONL e anexe ao ficheiro `path`.

    Em caso de objetos não serializáveis por padrão, usa `default=str` como
    fallback.
    """
    try:
        line = _json.dumps(obj, ensure_ascii=False) + "\n"
    except (TypeError, ValueError) as exc:
        logger.debug("write_json: fallback default=str usado em %s: %s", path, exc)
        line = _json.dumps(obj, ensure_ascii=False, default=str) + "\n"
    write_text(path, line, durable)


# -----------------------
# Datas e diretórios
# -----------------------
def format_date_for_log(dt: datetime | None = None) -> str:
    """Data ``YYYY-MM-DD`` usada nos nomes dos ficheiros diários."""
    return (dt or datetime.now()).strftime("%Y-%m-%d")


def utc_timestamp() -> str:
    """Timestamp ISO-8601 em UTC para entradas JSONL."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def ensure_dir_writable(p: Path) -> bool:
    """Garante, em melhor esforço, que `p` existe e é gravável."""
    try:
        p.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.error("ensure_dir_writable: não foi possível criar %s: %s", p, exc, exc_info=True)
        return False
    if not os.access(p, os.W_OK):
        logger.error("ensure_dir_writable: sem permissão de escrita em %s", p)
        return False
    return True
