"""Materialização de um projeto Elm local a partir de um snippet Ellie.

Ordem das etapas em ``materialize_project``:

1. ``index.html`` com a tag do bundle compilado injetada;
2. diretório ``src``;
3. código em ``src/<Modulo>.elm`` (subdiretórios para módulos com pontos);
4. ``elm.json`` fixo (dependências vazias, preenchidas pelo elm-json);
5. ``.gitignore``;
6. ``elm-json install --yes ...``;
7. ``git init`` / ``git add --all`` / ``git commit``.

Não é transacional: uma falha a meio deixa o diretório parcialmente
populado, sem rollback.
"""

import json
import logging
from pathlib import Path
from typing import NamedTuple

from ..config.settings import BUILD_CACHE_DIR, COMPILED_OUTPUT, CORE_PACKAGE, DEFAULT_SETTINGS, SCRIPT_TAG
from ..system.process import run_once
from .models import ModulePath, SnippetPayload
from .modules import extract_module_path

logger = logging.getLogger(__name__)

GITIGNORE = f"{BUILD_CACHE_DIR}\n{COMPILED_OUTPUT}\n"


# ========================
# 1. Transformações de conteúdo
# ========================


class ScriptInjection(NamedTuple):
    html: str
    injected: bool


def inject_script_tag(html: str, tag: str = SCRIPT_TAG) -> ScriptInjection:
    """Insere ``tag`` imediatamente antes da primeira ocorrência de ``<script``.

    Transformação de texto, sem parse de DOM. Sem ``<script`` no HTML o
    conteúdo volta inalterado com ``injected=False``.
    """
    idx = html.find("<script")
    if idx < 0:
        return ScriptInjection(html, False)
    return ScriptInjection(html[:idx] + tag + html[idx:], True)


def render_elm_json(elm_version: str = DEFAULT_SETTINGS["elm_version"]) -> str:
    """Manifesto ``elm.json`` de aplicação com dependências vazias."""
    manifest = {
        "type": "application",
        "source-directories": ["src"],
        "elm-version": elm_version,
        "dependencies": {"direct": {}, "indirect": {}},
        "test-dependencies": {"direct": {}, "indirect": {}},
    }
    return json.dumps(manifest, indent=4) + "\n"


def build_install_args(packages) -> list[str]:
    """Argumentos ``nome@versão`` para o elm-json, garantindo ``elm/core``.

    O Ellie fornece ``elm/core`` implicitamente; aqui ele é acrescentado
    (sem versão) quando nenhum pacote tem exatamente esse nome.
    """
    packages = list(packages or [])
    args = [p.install_arg for p in packages]
    if not any(p.name == CORE_PACKAGE for p in packages):
        args.append(CORE_PACKAGE)
    return args


# ========================
# 2. Comandos externos
# ========================


# Auxilia install_dependencies/init_repository; aplica a política de códigos != 0
def _run_step(runner, args: list[str], cwd: Path, settings: dict):
    result = runner(args, cwd=cwd)
    if not result.ok:
        if settings.get("strict_commands", True):
            result.check()
        logger.warning("Comando %s terminou com %s; a continuar", args[0], result.describe())
    return result


def install_dependencies(project_dir: Path, packages, settings: dict | None = None, runner=run_once):
    """Executa ``elm-json install --yes <pacotes>`` no diretório do projeto."""
    settings = settings or DEFAULT_SETTINGS
    args = [settings.get("elm_json_bin", DEFAULT_SETTINGS["elm_json_bin"]), "install", "--yes"]
    args += build_install_args(packages)
    return _run_step(runner, args, Path(project_dir), settings)


def init_repository(project_dir: Path, ellie_id: str, settings: dict | None = None, runner=run_once) -> list:
    """Cria o repositório git com um commit inicial apontando para o snippet."""
    settings = settings or DEFAULT_SETTINGS
    git = settings.get("git_bin", DEFAULT_SETTINGS["git_bin"])
    site = str(settings.get("site_url", DEFAULT_SETTINGS["site_url"])).rstrip("/")
    message = f"Initial code from {site}/{ellie_id}."
    steps = [
        [git, "init"],
        [git, "add", "--all"],
        [git, "commit", "--message", message],
    ]
    return [_run_step(runner, step, Path(project_dir), settings) for step in steps]


# ========================
# 3. Scaffold completo
# ========================


# Função principal do módulo; cria o projeto e devolve o módulo de entrada
def materialize_project(
    project_dir: Path,
    ellie_id: str,
    payload: SnippetPayload,
    settings: dict | None = None,
    runner=run_once,
) -> ModulePath:
    """Escreve os ficheiros do projeto e executa elm-json e git.

    ``project_dir`` deve existir. Erros de escrita propagam sem rollback.
    """
    settings = settings or DEFAULT_SETTINGS
    project_dir = Path(project_dir)

    injection = inject_script_tag(payload.html_shell)
    if not injection.injected:
        logger.warning("HTML do snippet %s sem <script>; index.html não referencia %s", ellie_id, COMPILED_OUTPUT)
    (project_dir / "index.html").write_text(injection.html, encoding="utf-8")

    (project_dir / "src").mkdir()

    module_path = extract_module_path(payload.source_code)
    source_file = project_dir / module_path.source_file()
    source_file.parent.mkdir(parents=True, exist_ok=True)
    source_file.write_text(payload.source_code, encoding="utf-8")
    logger.info("Módulo %s escrito em %s", module_path.dotted, source_file)

    elm_version = settings.get("elm_version", DEFAULT_SETTINGS["elm_version"])
    if payload.runtime_version and payload.runtime_version != elm_version:
        logger.warning("Snippet usa Elm %s; elm.json fixado em %s", payload.runtime_version, elm_version)
    (project_dir / "elm.json").write_text(render_elm_json(elm_version), encoding="utf-8")
    (project_dir / ".gitignore").write_text(GITIGNORE, encoding="utf-8")

    install_dependencies(project_dir, payload.packages, settings, runner)
    init_repository(project_dir, ellie_id, settings, runner)
    return module_path

