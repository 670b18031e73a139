"""Core do ellie-live.

Decide entre criar um projeto novo a partir do Ellie ou retomar um
diretório existente, abre o editor e mantém o elm-live em primeiro plano
até ele terminar.
"""

import logging
from pathlib import Path

from ..config.settings import load_settings
from ..ellie.fetcher import fetch_revision
from ..ellie.identifier import parse_ellie_id
from ..ellie.models import ModulePath
from ..ellie.modules import resolve_entrypoint
from ..ellie.scaffold import materialize_project
from ..system.editor import open_editor
from ..system.logs import record_session
from ..system.process import ProcessLifecycleManager, run_once

logger = logging.getLogger(__name__)


# ========================
# 1. Projeto novo
# ========================


# Auxilia run; o diretório só é criado depois de um fetch bem-sucedido
def create_project(ellie_id: str, project_dir: Path, settings: dict, runner=run_once, session=None) -> ModulePath:
    """Obtém o snippet e materializa o projeto em ``project_dir``.

    Levanta ``FetchError`` antes de tocar no disco quando o fetch falha.
    """
    result = fetch_revision(ellie_id, settings, session=session)
    payload = result.unwrap()
    project_dir.mkdir()
    logger.info("Criando projeto %r em %s", payload.title or ellie_id, project_dir)
    return materialize_project(project_dir, ellie_id, payload, settings, runner)


# ========================
# 2. Fluxo principal
# ========================


# Função principal do módulo; executa o fluxo completo até o elm-live sair
def run(
    raw_id: str,
    settings: dict | None = None,
    manager: ProcessLifecycleManager | None = None,
    cwd: Path | str | None = None,
    runner=run_once,
) -> int:
    """Cria ou retoma o projeto e corre o live-reload.

    Parâmetros:
        raw_id: id ou URL do Ellie.
        settings: configurações (``load_settings()`` quando None).
        manager: dono do processo elm-live; o chamador controla sinais.
        cwd: diretório onde o projeto ``<id>/`` é procurado/criado.

    Retorna o código de saída a usar pelo processo (0 quando o elm-live
    termina ou é parado pelo próprio programa).
    """
    settings = settings if settings is not None else load_settings()
    manager = manager if manager is not None else ProcessLifecycleManager()
    ellie_id = parse_ellie_id(raw_id)
    project_dir = Path(cwd or Path.cwd()) / ellie_id

    if not project_dir.exists():
        module_path = create_project(ellie_id, project_dir, settings, runner)
        event = "scaffolded"
    else:
        logger.info("Diretório %s já existe; retomando projeto", project_dir)
        module_path = resolve_entrypoint(project_dir)
        event = "resumed"
    record_session(
        event,
        ellie_id,
        project_dir,
        module_path.dotted,
        settings.get("log_root"),
        durable=settings.get("durable_writes", True),
    )

    entry_file = module_path.source_file()
    manager.track(open_editor([project_dir, project_dir / entry_file], settings))

    manager.start_live_reload(module_path, cwd=project_dir, settings=settings)
    result = manager.wait()
    if result is not None:
        logger.info("live-reload terminou (%s)", result.describe())
    return 0
