import json
import logging

import requests

from src.ellie import fetcher


class FakeResponse:
    def __init__(self, data=None, status=200, bad_json=False):
        self.data = data
        self.status = status
        self.bad_json = bad_json

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} Server Error")

    def json(self):
        if self.bad_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.data


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.response


REVISION = {
    "elmCode": "module Main exposing (main)\n\nmain = text \"hi\"\n",
    "elmVersion": "0.19.1",
    "htmlCode": "<html><body><script>var app = Elm.Main.init()</script></body></html>",
    "title": "Hello",
    "packages": [
        {"name": "elm/core", "version": "1.0.5"},
        {"name": "elm/html", "version": "1.0.0"},
    ],
}


def test_build_query_embeds_escaped_id():
    """A query pede todos os campos e escapa o id como string GraphQL."""
    q = fetcher.build_query('ab"c')
    assert 'revision(id: "ab\\"c")' in q
    for field in ("elmCode", "elmVersion", "htmlCode", "title", "packages", "name", "version"):
        assert field in q


def test_fetch_revision_success_posts_query():
    session = FakeSession(FakeResponse({"data": {"revision": REVISION}}))
    settings = {"api_url": "https://example.test/api", "request_timeout": 7.0}

    result = fetcher.fetch_revision("abc123", settings, session=session)

    assert result.ok
    payload = result.payload
    assert payload.title == "Hello"
    assert payload.runtime_version == "0.19.1"
    assert payload.source_code == REVISION["elmCode"]
    assert [p.install_arg for p in payload.packages] == ["elm/core@1.0.5", "elm/html@1.0.0"]

    assert len(session.calls) == 1
    url, kwargs = session.calls[0]
    assert url == "https://example.test/api"
    assert kwargs["timeout"] == 7.0
    assert kwargs["headers"]["content-type"] == "application/json"
    assert 'revision(id: "abc123")' in kwargs["json"]["query"]
    # corpo deve ser serializável como JSON simples {"query": "..."}
    assert list(json.loads(json.dumps(kwargs["json"])).keys()) == ["query"]


def test_fetch_revision_network_error_is_reported(caplog):
    caplog.set_level(logging.WARNING)
    session = FakeSession(exc=requests.ConnectionError("connection refused"))

    result = fetcher.fetch_revision("abc123", session=session)

    assert not result.ok
    assert "connection refused" in result.error
    assert any("Falha ao obter snippet" in r.message for r in caplog.records)


def test_fetch_revision_http_error_status():
    result = fetcher.fetch_revision("abc123", session=FakeSession(FakeResponse(status=502)))
    assert not result.ok
    assert "502" in result.error


def test_fetch_revision_invalid_json():
    result = fetcher.fetch_revision("abc123", session=FakeSession(FakeResponse(bad_json=True)))
    assert not result.ok
    assert "JSON" in result.error


def test_fetch_revision_graphql_errors_and_missing_revision():
    errors = {"errors": [{"message": "Not found"}], "data": None}
    result = fetcher.fetch_revision("abc123", session=FakeSession(FakeResponse(errors)))
    assert not result.ok and "Not found" in result.error

    null_rev = {"data": {"revision": None}}
    result = fetcher.fetch_revision("abc123", session=FakeSession(FakeResponse(null_rev)))
    assert not result.ok and "revisão" in result.error


def test_parse_payload_requires_code_fields():
    data = {"data": {"revision": {"elmCode": "module Main exposing (..)", "packages": []}}}
    result = fetcher.fetch_revision("abc123", session=FakeSession(FakeResponse(data)))
    assert not result.ok
    assert "htmlCode" in result.error


def test_parse_payload_defaults_optional_fields():
    payload = fetcher.parse_payload({"data": {"revision": {"elmCode": "x", "htmlCode": "y"}}})
    assert payload.packages == ()
    assert payload.title == ""
    assert payload.runtime_version == ""


def test_fetch_revision_unexpected_data_shape_is_reported():
    """``data`` que não é objeto vira falha reportada, nunca AttributeError."""
    for body in ({"data": ["unexpected"]}, {"data": "texto"}, {"data": None}):
        result = fetcher.fetch_revision("abc123", session=FakeSession(FakeResponse(body)))
        assert not result.ok
        assert "data" in result.error


def test_parse_payload_rejects_malformed_packages_and_errors():
    rev = dict(REVISION, packages={"name": "elm/html"})
    result = fetcher.fetch_revision("abc123", session=FakeSession(FakeResponse({"data": {"revision": rev}})))
    assert not result.ok and "pacotes" in result.error

    result = fetcher.fetch_revision("abc123", session=FakeSession(FakeResponse({"errors": "boom"})))
    assert not result.ok and "boom" in result.error
