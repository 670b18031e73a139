"""Configurações do ellie-live.

Este módulo centraliza endpoints da API, executáveis externos, versão Elm
fixada no ``elm.json`` e opções de logging. Carrega valores a partir de
``DEFAULT_SETTINGS`` e permite overrides via arquivo ``.env`` ou variáveis
de ambiente (prefixo ``ELLIE_*``). As funções públicas principais são:

- ``load_settings()`` -> dicionário com as chaves de ``DEFAULT_SETTINGS``.
- ``validate_settings()`` -> normaliza tipos (timeout, flags booleanas).

Comentários e mensagens de log estão em português.
"""

import os
from pathlib import Path


# ========================
# Constantes e padrões globais
# ========================

VERSION = "0.1.0"

CORE_PACKAGE = "elm/core"
COMPILED_OUTPUT = "elm.js"
BUILD_CACHE_DIR = "elm-stuff/"
SCRIPT_TAG = f'<script src="/{COMPILED_OUTPUT}"></script>'

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")

DEFAULT_SETTINGS = {
    "api_url": "https://ellie-app.com/api",
    "site_url": "https://ellie-app.com",
    "elm_version": "0.19.1",
    "request_timeout": 30.0,
    "elm_json_bin": "elm-json",
    "git_bin": "git",
    "elm_live_bin": "elm-live",
    "editor": None,
    "open_editor": True,
    "strict_commands": True,
    "durable_writes": True,
    "log_level": "INFO",
    "log_root": str(Path.home() / ".cache" / "ellie-live"),
}

# Mapeamento variável de ambiente -> chave em settings
ENV_MAP = {
    "ELLIE_API_URL": "api_url",
    "ELLIE_SITE_URL": "site_url",
    "ELLIE_ELM_VERSION": "elm_version",
    "ELLIE_REQUEST_TIMEOUT": "request_timeout",
    "ELLIE_ELM_JSON_BIN": "elm_json_bin",
    "ELLIE_GIT_BIN": "git_bin",
    "ELLIE_ELM_LIVE_BIN": "elm_live_bin",
    "ELLIE_EDITOR": "editor",
    "ELLIE_OPEN_EDITOR": "open_editor",
    "ELLIE_STRICT_COMMANDS": "strict_commands",
    "ELLIE_DURABLE_WRITES": "durable_writes",
    "ELLIE_LOG_LEVEL": "log_level",
    "ELLIE_LOG_ROOT": "log_root",
}


# ========================
# 1. Carregamento das configurações
# ========================


# Função principal do módulo; carrega todas as configurações do ambiente
def load_settings() -> dict:
    """Carrega configurações combinando DEFAULTS + .env + ambiente.

    Retorna um dicionário com as mesmas chaves de ``DEFAULT_SETTINGS``,
    já validado por ``validate_settings``. As variáveis em ambiente
    sobrescrevem valores do arquivo `.env`.
    """
    import logging

    logger = logging.getLogger(__name__)

    settings = DEFAULT_SETTINGS.copy()
    env_path = Path(os.getenv("ELLIE_ENV_FILE", ".env"))

    env_items = _merge_env_items(env_path, logger)
    _apply_env_overrides(env_items, settings)

    return validate_settings(settings)


# ========================
# 2. Funções auxiliares para ambiente e overrides
# ========================


# Auxilia load_settings; criado para centralizar leitura do .env
def _read_env_file(path: Path | str) -> dict:
    """Lê um arquivo `.env` e devolve um dicionário chave->valor.

    Linhas vazias e comentários (começando com '#') são ignorados.
    """
    import logging

    logger = logging.getLogger(__name__)
    result: dict[str, str] = {}
    p = Path(path)
    if not p.exists():
        return result
    try:
        with p.open("r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                key, val = line.split("=", 1)
                key = key.strip()
                val = val.strip().strip('"').strip("'")
                result[key] = val
    except OSError as exc:
        logger.debug("Falha ao ler .env em %s: %s", p, exc)
        return {}
    return result


# Auxilia load_settings; criado para unir variáveis do ambiente e .env
def _merge_env_items(env_path: Path, logger) -> dict:
    """Retorna um mapeamento combinado de `.env` e env vars do processo.

    As variáveis do processo sobrescrevem o arquivo `.env`.
    """
    env_items = _read_env_file(env_path)
    if env_items == {} and env_path.exists():
        logger.warning("Erro ou ficheiro .env vazio em %s", env_path)
    env_items.update(os.environ)
    return env_items


# Auxilia load_settings; copia apenas as chaves conhecidas (prefixo ELLIE_)
def _apply_env_overrides(env_items: dict, settings: dict) -> None:
    for env_var, key in ENV_MAP.items():
        raw = env_items.get(env_var)
        if raw is None:
            continue
        settings[key] = raw.strip() if isinstance(raw, str) else raw


# ========================
# 3. Validação e normalização
# ========================


# Auxilia validate_settings; converte "1"/"true"/"no"... para bool
def _coerce_bool(name: str, raw, default: bool, logger) -> bool:
    if isinstance(raw, bool):
        return raw
    val = str(raw).strip().lower()
    if val in _TRUE_VALUES:
        return True
    if val in _FALSE_VALUES:
        return False
    logger.warning("Valor booleano inválido para %s: %s; usando %s", name, raw, default)
    return default


# Auxilia validate_settings; garante timeout numérico e positivo
def _coerce_timeout(raw, default: float, logger) -> float:
    try:
        val = float(raw)
    except (TypeError, ValueError):
        logger.warning("ELLIE_REQUEST_TIMEOUT inválido: %s; usando %s", raw, default)
        return default
    if val <= 0:
        logger.warning("ELLIE_REQUEST_TIMEOUT deve ser > 0: %s; usando %s", raw, default)
        return default
    return val


# Função principal de validação; normaliza e valida configurações
def validate_settings(settings: dict) -> dict:
    """Normaliza e valida o dicionário de configurações.

    Valores inválidos são substituídos pelo default correspondente e
    registados como warning; chaves ausentes recebem o default.
    """
    import logging

    logger = logging.getLogger(__name__)
    if not isinstance(settings, dict):
        raise TypeError("settings deve ser um dict")

    for key, default in DEFAULT_SETTINGS.items():
        settings.setdefault(key, default)

    settings["request_timeout"] = _coerce_timeout(
        settings["request_timeout"], DEFAULT_SETTINGS["request_timeout"], logger
    )
    settings["open_editor"] = _coerce_bool("ELLIE_OPEN_EDITOR", settings["open_editor"], True, logger)
    settings["strict_commands"] = _coerce_bool("ELLIE_STRICT_COMMANDS", settings["strict_commands"], True, logger)
    settings["durable_writes"] = _coerce_bool("ELLIE_DURABLE_WRITES", settings["durable_writes"], True, logger)
    settings["log_level"] = str(settings["log_level"] or "INFO").upper()
    settings["site_url"] = str(settings["site_url"]).rstrip("/")
    if not settings["editor"]:
        settings["editor"] = None

    for key in ("elm_json_bin", "git_bin", "elm_live_bin", "elm_version", "api_url"):
        if not settings[key]:
            logger.warning("Configuração vazia para %s; usando %s", key, DEFAULT_SETTINGS[key])
            settings[key] = DEFAULT_SETTINGS[key]

    logger.debug("Configurações validadas e normalizadas")
    return settings
