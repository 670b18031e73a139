"""Normalização do identificador Ellie recebido na linha de comando."""

import logging
from urllib.parse import urlparse

from .errors import InvalidIdentifierError

logger = logging.getLogger(__name__)


def parse_ellie_id(raw: str) -> str:
    """Converte um id ou URL (``https://ellie-app.com/<id>``) no id do snippet.

    O resultado é usado tanto como chave na API quanto como nome do
    diretório do projeto, por isso não pode conter separadores de caminho.
    """
    value = (raw or "").strip()
    if value.lower().startswith(("http://", "https://")):
        parsed = urlparse(value)
        parts = [p for p in parsed.path.split("/") if p]
        if not parts:
            raise InvalidIdentifierError(f"URL sem id de snippet: {raw!r}")
        if len(parts) > 1:
            logger.debug("parse_ellie_id: ignorando segmentos extra em %s", value)
        value = parts[0]

    if not value or value in (".", "..") or "/" in value or "\\" in value:
        raise InvalidIdentifierError(f"identificador Ellie inválido: {raw!r}")
    return value
