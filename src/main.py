"""Ponto de entrada do ellie-live.

Este módulo realiza a inicialização da aplicação: parsing de argumentos CLI,
carregamento das configurações, configuração de logging, instalação de
handlers de debug e execução do fluxo em ``core`` dentro do gestor de
processos (que liga SIGTERM/SIGINT ao elm-live).
"""

from .core.args import parse_args, get_log_config
import logging as _logging
import sys
from .config.settings import load_settings
from .ellie.errors import EllieLiveError
from .system.logs import get_debug_file_path
from .system.process import ProcessLifecycleManager
from .core.core import run as _run

import json as _json


def main(argv: list[str] | None = None) -> int:
    """Inicializa a aplicação e corre o fluxo até o elm-live terminar.

    Args:
        argv: Lista de argumentos (usada em testes). Quando ``None`` a função
            utiliza os argumentos de linha de comando do processo.

    Returns:
        Código de saída: 0 em sucesso, 1 para erros esperados do domínio.
    """
    args = parse_args(argv)
    settings = load_settings()
    log_conf = get_log_config(settings)

    level = getattr(_logging, log_conf.get("level", "INFO"), _logging.INFO)
    _logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        _setup_debug_file_handler(log_conf.get("root"))
    except OSError as exc:
        _logging.getLogger(__name__).debug("falha ao configurar debug file handler: %s", exc, exc_info=True)

    try:
        with ProcessLifecycleManager() as manager:
            return _run(args.ellie_id, settings=settings, manager=manager)
    except EllieLiveError as exc:
        _logging.getLogger(__name__).error("%s", exc)
        print(f"ellie-live: erro: {exc}", file=sys.stderr)
        return 1


def _setup_debug_file_handler(root=None) -> None:
    """Instala handlers de ficheiro para debug e hook global de exceções.

    Adiciona ao logger root um handler human-readable (texto) e um JSONL
    (uma linha de JSON por evento). Também instala um ``sys.excepthook``
    que envia exceções não tratadas para o logger root antes do traceback
    padrão.

    Evita duplicar handlers se já existirem handlers de ficheiro com os
    mesmos caminhos.
    """
    debug_path = get_debug_file_path(root)

    # Handler texto (legível por humanos)
    fh = _logging.FileHandler(str(debug_path), encoding="utf-8")
    fh.setLevel(_logging.DEBUG)
    fmt = _logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    fh.setFormatter(fmt)

    jpath = debug_path.with_suffix(".jsonl")
    jfh = _logging.FileHandler(str(jpath), encoding="utf-8")
    jfh.setLevel(_logging.DEBUG)
    jfh.setFormatter(_get_json_formatter())

    root_logger = _logging.getLogger()
    if _has_existing_file_handler(root_logger, fh, jfh):
        fh.close()
        jfh.close()
    else:
        root_logger.addHandler(fh)
        root_logger.addHandler(jfh)

    def _exc_hook(exc_type, exc_value, exc_tb):
        root_logger.error("Unhandled exception", exc_info=(exc_type, exc_value, exc_tb))
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = _exc_hook


# Auxiliares extraídas para reduzir complexidade


def _get_json_formatter():
    class _JSONFormatter(_logging.Formatter):
        def format(self, record):
            obj = {
                "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
                "level": record.levelname,
                "name": record.name,
                "msg": record.getMessage(),
            }
            if record.exc_info:
                obj["exc"] = self.formatException(record.exc_info)
            return _json.dumps(obj, ensure_ascii=False)

    return _JSONFormatter()


def _has_existing_file_handler(root, fh, jfh):
    bases = (getattr(fh, "baseFilename", None), getattr(jfh, "baseFilename", None))
    for h in root.handlers:
        if isinstance(h, _logging.FileHandler) and getattr(h, "baseFilename", None) in bases:
            return True
    return False


if __name__ == "__main__":
    sys.exit(main())
