import json
import logging

import pytest

from src.config.settings import DEFAULT_SETTINGS, SCRIPT_TAG
from src.ellie import scaffold
from src.ellie.errors import CommandFailedError, ModuleHeaderError
from src.ellie.models import Package, SnippetPayload
from src.system.process import ProcessResult


class FakeRunner:
    """Regista comandos e devolve códigos configurados por subcomando."""

    def __init__(self, codes=None):
        self.codes = dict(codes or {})
        self.calls = []

    def __call__(self, args, cwd=None):
        self.calls.append((list(args), cwd))
        return ProcessResult(tuple(args), self.codes.get(args[1], 0))


def _payload(**overrides):
    data = {
        "source_code": "module Main exposing (main)\n\nmain = text \"oi\"\n",
        "runtime_version": "0.19.1",
        "html_shell": '<html><script src="x"></script></html>',
        "title": "Exemplo",
        "packages": (Package("elm/core", "1.0.0"),),
    }
    data.update(overrides)
    return SnippetPayload(**data)


# -----------------------
# inject_script_tag
# -----------------------
def test_inject_script_tag_before_first_script():
    html = "<head><script>a()</script></head><body><script>b()</script></body>"
    out = scaffold.inject_script_tag(html)
    assert out.injected
    assert out.html == "<head>" + SCRIPT_TAG + "<script>a()</script></head><body><script>b()</script></body>"
    # remover a tag devolve o original byte a byte
    assert out.html.replace(SCRIPT_TAG, "", 1) == html


def test_inject_script_tag_without_script_is_noop():
    html = "<html><body><div id='app'></div></body></html>"
    out = scaffold.inject_script_tag(html)
    assert out.injected is False
    assert out.html == html


def test_inject_script_tag_is_case_sensitive_text_match():
    assert scaffold.inject_script_tag("<SCRIPT></SCRIPT>").injected is False


# -----------------------
# build_install_args / render_elm_json
# -----------------------
def test_build_install_args_appends_core_when_missing():
    pkgs = [Package("elm/html", "1.0.0"), Package("elm/json", "1.1.3")]
    assert scaffold.build_install_args(pkgs) == ["elm/html@1.0.0", "elm/json@1.1.3", "elm/core"]


def test_build_install_args_does_not_duplicate_core():
    pkgs = [Package("elm/core", "1.0.5"), Package("elm/html", "1.0.0")]
    args = scaffold.build_install_args(pkgs)
    assert args == ["elm/core@1.0.5", "elm/html@1.0.0"]
    assert sum(a.startswith("elm/core") for a in args) == 1


def test_build_install_args_empty_and_similar_names():
    assert scaffold.build_install_args([]) == ["elm/core"]
    assert scaffold.build_install_args(None) == ["elm/core"]
    # apenas o nome exato conta
    assert scaffold.build_install_args([Package("elm/core-extra", "1.0.0")])[-1] == "elm/core"


def test_render_elm_json_template():
    data = json.loads(scaffold.render_elm_json("0.19.1"))
    assert data == {
        "type": "application",
        "source-directories": ["src"],
        "elm-version": "0.19.1",
        "dependencies": {"direct": {}, "indirect": {}},
        "test-dependencies": {"direct": {}, "indirect": {}},
    }


# -----------------------
# install_dependencies / init_repository
# -----------------------
def test_install_dependencies_command(tmp_path):
    runner = FakeRunner()
    scaffold.install_dependencies(tmp_path, [Package("elm/html", "1.0.0")], DEFAULT_SETTINGS, runner)
    assert runner.calls == [(["elm-json", "install", "--yes", "elm/html@1.0.0", "elm/core"], tmp_path)]


def test_init_repository_runs_three_steps_in_order(tmp_path):
    runner = FakeRunner()
    settings = dict(DEFAULT_SETTINGS, git_bin="/usr/bin/git", site_url="https://ellie-app.com")
    scaffold.init_repository(tmp_path, "abc123", settings, runner)
    assert [c[0] for c in runner.calls] == [
        ["/usr/bin/git", "init"],
        ["/usr/bin/git", "add", "--all"],
        ["/usr/bin/git", "commit", "--message", "Initial code from https://ellie-app.com/abc123."],
    ]


def test_strict_policy_aborts_on_failed_step(tmp_path):
    """Com strict_commands, um git add falhado impede o commit."""
    runner = FakeRunner(codes={"add": 128})
    with pytest.raises(CommandFailedError) as exc_info:
        scaffold.init_repository(tmp_path, "abc123", DEFAULT_SETTINGS, runner)
    assert [c[0][1] for c in runner.calls] == ["init", "add"]
    assert exc_info.value.result.returncode == 128


def test_tolerant_policy_continues_and_warns(tmp_path, caplog):
    caplog.set_level(logging.WARNING)
    runner = FakeRunner(codes={"install": 1, "commit": 1})
    settings = dict(DEFAULT_SETTINGS, strict_commands=False)
    scaffold.install_dependencies(tmp_path, [], settings, runner)
    results = scaffold.init_repository(tmp_path, "abc123", settings, runner)
    assert [r.returncode for r in results] == [0, 0, 1]
    assert len(runner.calls) == 4
    assert sum("a continuar" in r.message for r in caplog.records) == 2


# -----------------------
# materialize_project
# -----------------------
def test_materialize_project_end_to_end(tmp_path):
    runner = FakeRunner()
    payload = _payload()

    module_path = scaffold.materialize_project(tmp_path, "abc123", payload, DEFAULT_SETTINGS, runner)

    assert module_path.segments == ("Main",)
    assert sorted(p.relative_to(tmp_path).as_posix() for p in tmp_path.rglob("*")) == [
        ".gitignore",
        "elm.json",
        "index.html",
        "src",
        "src/Main.elm",
    ]
    assert (tmp_path / "index.html").read_text() == '<html>' + SCRIPT_TAG + '<script src="x"></script></html>'
    assert (tmp_path / "src" / "Main.elm").read_text() == payload.source_code
    assert json.loads((tmp_path / "elm.json").read_text())["type"] == "application"
    assert (tmp_path / ".gitignore").read_text().splitlines() == ["elm-stuff/", "elm.js"]

    install = runner.calls[0][0]
    assert install[:3] == ["elm-json", "install", "--yes"]
    assert [a for a in install if a.startswith("elm/core")] == ["elm/core@1.0.0"]
    assert [c[0][1] for c in runner.calls[1:]] == ["init", "add", "commit"]
    assert all(cwd == tmp_path for _, cwd in runner.calls)


def test_materialize_project_nested_module(tmp_path):
    payload = _payload(source_code="module Pages.Home exposing (main)\n", packages=())
    module_path = scaffold.materialize_project(tmp_path, "abc123", payload, DEFAULT_SETTINGS, FakeRunner())
    assert module_path.dotted == "Pages.Home"
    assert (tmp_path / "src" / "Pages" / "Home.elm").read_text() == payload.source_code


def test_materialize_project_warns_without_script_and_version_mismatch(tmp_path, caplog):
    caplog.set_level(logging.WARNING)
    payload = _payload(html_shell="<html></html>", runtime_version="0.19.0")
    scaffold.materialize_project(tmp_path, "abc123", payload, DEFAULT_SETTINGS, FakeRunner())
    assert (tmp_path / "index.html").read_text() == "<html></html>"
    assert json.loads((tmp_path / "elm.json").read_text())["elm-version"] == "0.19.1"
    messages = " ".join(r.message for r in caplog.records)
    assert "sem <script>" in messages
    assert "0.19.0" in messages


def test_materialize_project_without_header_leaves_partial_dir(tmp_path):
    """Sem rollback: o index.html e src/ ficam no disco quando o cabeçalho falta."""
    runner = FakeRunner()
    with pytest.raises(ModuleHeaderError):
        scaffold.materialize_project(tmp_path, "abc123", _payload(source_code="main = 1"), DEFAULT_SETTINGS, runner)
    assert (tmp_path / "index.html").exists()
    assert (tmp_path / "src").is_dir()
    assert not (tmp_path / "elm.json").exists()
    assert runner.calls == []
