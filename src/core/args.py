"""Parser de argumentos da linha de comando.

Docstrings e mensagens em português.

A CLI aceita um único argumento posicional, o id ou URL de um exemplo do
Ellie, além de ``--help`` e ``--version``. Opções de logging, executáveis e
endpoints são lidas do ambiente por ``src.config.settings``.
"""

import argparse
from typing import Sequence

from ..config.settings import VERSION
from ..ellie.identifier import parse_ellie_id
from ..ellie.errors import InvalidIdentifierError

# ========================
# 0. Configuração do parser
# ========================


# Função principal do módulo; cria e retorna o ArgumentParser configurado
def configure_argparser() -> argparse.ArgumentParser:
    """Cria e retorna ArgumentParser configurado para o ellie-live."""
    parser = argparse.ArgumentParser(
        prog="ellie-live",
        description="Cria um projeto Elm local a partir de um exemplo do Ellie e inicia o elm-live",
    )
    parser.add_argument(
        "ellie_id",
        metavar="<ellie-id-or-url>",
        help="o id ou URL de um exemplo do ellie-app",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


# ========================
# 1. Análise e validação
# ========================


# Auxilia src.main; criado para analisar argv e validar o identificador
def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Analisa argv e retorna Namespace com ``ellie_id`` já normalizado.

    Um identificador inválido termina via ``parser.error`` (código 2).
    """
    parser = configure_argparser()
    ns = parser.parse_args(argv)
    try:
        ns.ellie_id = parse_ellie_id(ns.ellie_id)
    except InvalidIdentifierError as exc:
        parser.error(str(exc))
    return ns


# Auxilia src.main; criado para extrair configuração de logging das settings
def get_log_config(settings: dict) -> dict:
    """Retorna dict com configuração de logging ('level' e 'root')."""
    level = str(settings.get("log_level") or "INFO").upper()
    return {"level": level, "root": settings.get("log_root")}
