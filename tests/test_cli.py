"""CLI tests for parse, serve and config commands."""

import importlib
import json
import subprocess

from click.testing import CliRunner

from mparser.cli import cli
from mparser.models import Link, MessageInfo

parse_mod = importlib.import_module("mparser.cli.parse")
serve_mod = importlib.import_module("mparser.cli.serve")


def _fake_parse_message(calls):
    def _fake(text, config=None):
        calls.append((text, config))
        return MessageInfo(mentions=["bob"], emoticons=[], links=[Link(url="http://a.example", title="A")])

    return _fake


def test_parse_raw_prints_json(monkeypatch):
    calls = []
    monkeypatch.setattr(parse_mod, "parse_message", _fake_parse_message(calls))

    result = CliRunner().invoke(cli, ["parse", "--raw", "@bob http://a.example"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {
        "mentions": ["bob"],
        "emoticons": [],
        "links": [{"url": "http://a.example", "title": "A"}],
    }
    assert calls[0][0] == "@bob http://a.example"


def test_parse_reads_stdin_and_applies_overrides(monkeypatch):
    calls = []
    monkeypatch.setattr(parse_mod, "parse_message", _fake_parse_message(calls))

    result = CliRunner().invoke(
        cli,
        ["parse", "--timeout", "1.5", "--workers", "3", "--deadline", "4", "-"],
        input="hello @bob",
    )

    assert result.exit_code == 0, result.output
    assert "mentions" in result.output
    text, config = calls[0]
    assert text == "hello @bob"
    assert config.fetch_timeout_seconds == 1.5
    assert config.max_concurrency_fetch == 3
    assert config.resolve_deadline_seconds == 4


def test_parse_rejects_zero_workers(monkeypatch):
    monkeypatch.setattr(parse_mod, "parse_message", _fake_parse_message([]))

    result = CliRunner().invoke(cli, ["parse", "--workers", "0", "text"])

    assert result.exit_code != 0


def test_serve_builds_uvicorn_command_from_env(monkeypatch):
    commands = []
    monkeypatch.setenv("LISTEN_HOST", "0.0.0.0")
    monkeypatch.setenv("LISTEN_PORT", "9555")
    monkeypatch.setattr(serve_mod.subprocess, "run", lambda cmd, check: commands.append(cmd))

    result = CliRunner().invoke(cli, ["serve"])

    assert result.exit_code == 0, result.output
    cmd = commands[0]
    assert cmd[1:4] == ["-m", "uvicorn", "mparser.web:create_app"]
    assert cmd[cmd.index("--host") + 1] == "0.0.0.0"
    assert cmd[cmd.index("--port") + 1] == "9555"
    assert "--ssl-certfile" not in cmd
    assert "http://0.0.0.0:9555" in result.output


def test_serve_fails_when_key_pair_cannot_load(monkeypatch, tmp_path):
    monkeypatch.setenv("SSL_ON", "1")
    monkeypatch.setenv("SSL_CERT_PATH", str(tmp_path / "missing-cert.pem"))
    monkeypatch.setenv("SSL_KEY_PATH", str(tmp_path / "missing-key.pem"))
    monkeypatch.setattr(
        serve_mod.subprocess, "run", lambda *a, **k: (_ for _ in ()).throw(AssertionError("server should not start"))
    )

    result = CliRunner().invoke(cli, ["serve"])

    assert result.exit_code == 1
    assert "Unable to load key pair" in result.output


def test_serve_passes_tls_files(monkeypatch, tmp_path):
    commands = []
    monkeypatch.setenv("SSL_ON", "1")
    monkeypatch.setenv("SSL_CERT_PATH", "/certs/cert.pem")
    monkeypatch.setenv("SSL_KEY_PATH", "/certs/key.pem")
    monkeypatch.setattr(serve_mod, "_check_key_pair", lambda cert, key: None)
    monkeypatch.setattr(serve_mod.subprocess, "run", lambda cmd, check: commands.append(cmd))

    result = CliRunner().invoke(cli, ["serve", "--port", "9443"])

    assert result.exit_code == 0, result.output
    cmd = commands[0]
    assert cmd[cmd.index("--ssl-certfile") + 1] == "/certs/cert.pem"
    assert cmd[cmd.index("--ssl-keyfile") + 1] == "/certs/key.pem"
    assert "https://localhost:9443" in result.output


def test_serve_propagates_server_exit_code(monkeypatch):
    def _fail(cmd, check):
        raise subprocess.CalledProcessError(3, cmd)

    monkeypatch.setattr(serve_mod.subprocess, "run", _fail)

    result = CliRunner().invoke(cli, ["serve"])

    assert result.exit_code == 3


def test_serve_rejects_invalid_port(monkeypatch):
    monkeypatch.setenv("LISTEN_PORT", "abc")
    monkeypatch.setattr(
        serve_mod.subprocess, "run", lambda *a, **k: (_ for _ in ()).throw(AssertionError("server should not start"))
    )

    result = CliRunner().invoke(cli, ["serve"])

    assert result.exit_code == 1
    assert "Invalid server configuration" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)


def test_config_set_and_show(isolated_config):
    runner = CliRunner()

    result = runner.invoke(cli, ["config", "set", "parser.fetch_timeout_seconds", "2.5"])
    assert result.exit_code == 0, result.output
    assert json.loads(isolated_config.read_text())["parser"]["fetch_timeout_seconds"] == 2.5

    result = runner.invoke(cli, ["config", "path"])
    assert isolated_config.name in result.output.replace("\n", "")

    result = runner.invoke(cli, ["config", "show"])
    assert "fetch_timeout_seconds" in result.output


def test_config_set_rejects_invalid_values(isolated_config):
    result = CliRunner().invoke(cli, ["config", "set", "parser.max_concurrency_fetch", "lots"])

    assert result.exit_code != 0
    assert not isolated_config.exists()


def test_config_set_rejects_unknown_section(isolated_config):
    result = CliRunner().invoke(cli, ["config", "set", "storage.path", "/tmp"])

    assert result.exit_code != 0
    assert not isolated_config.exists()


def test_config_show_effective_applies_environment(monkeypatch):
    monkeypatch.setenv("LISTEN_PORT", "8081")

    result = CliRunner().invoke(cli, ["config", "show", "--effective"])

    assert result.exit_code == 0, result.output
    assert '"port": 8081' in result.output
