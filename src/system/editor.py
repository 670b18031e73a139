"""Abertura do editor do utilizador sobre o projeto (fire-and-forget)."""

import logging
import os
import shlex
import shutil
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def resolve_editor(settings: dict | None = None) -> list[str] | None:
    """Resolve o comando do editor: ELLIE_EDITOR, depois VISUAL, depois EDITOR.

    Retorna a lista de argumentos (ex.: ``["code", "-n"]``) ou None quando
    nenhum editor configurado existe no PATH.
    """
    candidates = [(settings or {}).get("editor"), os.environ.get("VISUAL"), os.environ.get("EDITOR")]
    for raw in candidates:
        if not raw:
            continue
        try:
            cmd = shlex.split(raw)
        except ValueError as exc:
            logger.debug("resolve_editor: comando inválido %r: %s", raw, exc)
            continue
        if not cmd:
            continue
        if shutil.which(cmd[0]) is None:
            logger.debug("resolve_editor: %s não encontrado no PATH", cmd[0])
            continue
        return cmd
    return None


def open_editor(paths, settings: dict | None = None, popen=subprocess.Popen):
    """Abre ``paths`` no editor sem esperar pelo processo.

    Falhas são apenas registadas: o editor nunca interrompe o fluxo.
    Retorna o handle do processo ou None.
    """
    settings = settings or {}
    if not settings.get("open_editor", True):
        logger.debug("open_editor: desativado por configuração")
        return None
    cmd = resolve_editor(settings)
    if cmd is None:
        logger.warning("Nenhum editor configurado (ELLIE_EDITOR/VISUAL/EDITOR); a continuar sem editor")
        return None
    args = cmd + [str(Path(p)) for p in paths]
    logger.info("Abrindo editor: %s", " ".join(args))
    try:
        return popen(args)
    except OSError as exc:
        logger.warning("Falha ao abrir editor %s: %s", cmd[0], exc)
        return None
