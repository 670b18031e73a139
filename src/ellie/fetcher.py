"""Cliente da API GraphQL do Ellie.

Funções principais:
- build_query: monta a query GraphQL para uma revisão
- fetch_revision: envia o POST e devolve um ``FetchResult``
- parse_payload: converte o JSON da resposta em ``SnippetPayload``

Falhas (rede, HTTP, JSON, erros GraphQL, revisão inexistente) nunca são
levantadas aqui: ficam registadas em ``FetchResult.error`` e o chamador
decide. Não há retries.
"""

import json
import logging

import requests  # type: ignore[import-untyped]

from ..config.settings import DEFAULT_SETTINGS
from .models import FetchResult, Package, SnippetPayload

logger = logging.getLogger(__name__)

_QUERY_TEMPLATE = """query {{
  revision(id: {ellie_id}) {{
    elmCode
    elmVersion
    htmlCode
    title
    packages {{
      name
      version
    }}
  }}
}}"""


def build_query(ellie_id: str) -> str:
    """Retorna a query GraphQL; o id é embutido como string literal escapada."""
    return _QUERY_TEMPLATE.format(ellie_id=json.dumps(ellie_id))


# Auxilia fetch_revision; valida apenas as chaves de que o scaffold precisa
def parse_payload(data) -> SnippetPayload:
    """Converte ``{"data": {"revision": {...}}}`` em ``SnippetPayload``.

    Levanta ``ValueError`` quando a resposta traz erros GraphQL, revisão
    nula ou campos obrigatórios ausentes.
    """
    if not isinstance(data, dict):
        raise ValueError("resposta da API não é um objeto JSON")
    errors = data.get("errors")
    if errors:
        if not isinstance(errors, list):
            errors = [errors]
        msgs = [str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors]
        raise ValueError("erros GraphQL: " + "; ".join(msgs))
    inner = data.get("data")
    if not isinstance(inner, dict):
        raise ValueError("resposta da API sem objeto \"data\"")
    revision = inner.get("revision")
    if not isinstance(revision, dict):
        raise ValueError("revisão não encontrada")

    missing = [k for k in ("elmCode", "htmlCode") if not isinstance(revision.get(k), str)]
    if missing:
        raise ValueError(f"campos ausentes na revisão: {', '.join(missing)}")

    raw_packages = revision.get("packages") or []
    if not isinstance(raw_packages, list):
        raise ValueError(f"lista de pacotes malformada na revisão: {raw_packages!r}")
    packages = []
    for item in raw_packages:
        try:
            packages.append(Package(name=str(item["name"]), version=str(item["version"])))
        except (KeyError, TypeError) as exc:
            raise ValueError(f"pacote malformado na revisão: {item!r}") from exc

    return SnippetPayload(
        source_code=revision["elmCode"],
        runtime_version=str(revision.get("elmVersion") or ""),
        html_shell=revision["htmlCode"],
        title=str(revision.get("title") or ""),
        packages=tuple(packages),
    )


def fetch_revision(ellie_id: str, settings: dict | None = None, session=None) -> FetchResult:
    """Obtém a revisão ``ellie_id`` da API do Ellie numa única requisição.

    - settings: usa ``api_url`` e ``request_timeout`` (defaults quando None)
    - session: objeto com ``post`` compatível com ``requests`` (testes)
    """
    settings = settings or DEFAULT_SETTINGS
    url = settings.get("api_url", DEFAULT_SETTINGS["api_url"])
    timeout = settings.get("request_timeout", DEFAULT_SETTINGS["request_timeout"])
    poster = session if session is not None else requests

    logger.info("A obter snippet %s de %s", ellie_id, url)
    try:
        resp = poster.post(
            url,
            json={"query": build_query(ellie_id)},
            headers={"content-type": "application/json"},
            timeout=timeout,
        )
        resp.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Falha ao obter snippet %s: %s", ellie_id, exc)
        return FetchResult(error=f"erro de rede: {exc}")

    try:
        data = resp.json()
    except ValueError as exc:
        logger.warning("Resposta inválida para snippet %s: %s", ellie_id, exc)
        return FetchResult(error=f"resposta JSON inválida: {exc}")

    try:
        payload = parse_payload(data)
    except ValueError as exc:
        logger.warning("Snippet %s inutilizável: %s", ellie_id, exc)
        return FetchResult(error=str(exc))

    logger.debug("Snippet %s obtido: %r (%d pacotes)", ellie_id, payload.title, len(payload.packages))
    return FetchResult(payload=payload)
