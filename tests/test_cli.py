from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

from unspoken import cli
from unspoken.llm import ChatClient


@pytest.fixture(autouse=True)
def _env(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")


def _install_stub(monkeypatch, handler) -> list[dict]:
    bodies: list[dict] = []

    def _record(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return handler(request)

    def _factory(api_key, config):
        http = httpx.Client(transport=httpx.MockTransport(_record))
        return ChatClient(api_key, config, http_client=http)

    monkeypatch.setattr(cli, "ChatClient", _factory)
    return bodies


def _reply(text: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": text}}]})


def test_each_line_is_a_turn(monkeypatch) -> None:
    replies = iter(["Hello", "Fine"])
    bodies = _install_stub(monkeypatch, lambda req: _reply(next(replies)))

    res = CliRunner().invoke(cli.app, ["--system", "Be brief.", "--model", "m-1"], input="Hi\n\nHow are you?\n")
    assert res.exit_code == 0, res.output
    assert "Assistant: Hello" in res.output
    assert "Assistant: Fine" in res.output

    assert len(bodies) == 2
    assert bodies[1]["model"] == "m-1"
    assert [m["role"] for m in bodies[1]["messages"]] == ["system", "user", "assistant", "user"]


def test_error_is_reported_and_chat_continues(monkeypatch) -> None:
    responses = iter([httpx.Response(429, json={"error": {"message": "slow down"}}), _reply("ok")])
    bodies = _install_stub(monkeypatch, lambda req: next(responses))

    res = CliRunner().invoke(cli.app, [], input="first\nsecond\n")
    assert res.exit_code == 0, res.output
    assert "Error: API error 429: slow down" in res.output
    assert "Assistant: ok" in res.output
    assert [m["content"] for m in bodies[1]["messages"]] == ["first", "second"]


def test_slash_commands(monkeypatch) -> None:
    bodies = _install_stub(monkeypatch, lambda req: _reply("Hello"))

    res = CliRunner().invoke(cli.app, [], input="Hi\n/history\n/new\nAgain\n/exit\nnever sent\n")
    assert res.exit_code == 0, res.output
    assert "You: Hi" in res.output
    assert "New conversation." in res.output
    assert len(bodies) == 2
    assert bodies[1]["messages"] == [{"role": "user", "content": "Again"}]


def test_missing_api_key_exits_2(monkeypatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    res = CliRunner().invoke(cli.app, [], input="Hi\n")
    assert res.exit_code == 2
    assert "OPENAI_API_KEY" in res.output


def test_version() -> None:
    from unspoken import __version__

    res = CliRunner().invoke(cli.app, ["--version"])
    assert res.exit_code == 0
    assert __version__ in res.output


def test_mistyped_config_value_exits_2(tmp_path: Path) -> None:
    path = tmp_path / "bad.toml"
    path.write_text("url = 5\n", encoding="utf-8")
    res = CliRunner().invoke(cli.app, ["--config", str(path)], input="Hi\n")
    assert res.exit_code == 2
    assert "Failed to parse config file" in res.output


def test_unknown_slash_line_and_whitespace_are_sent_as_typed(monkeypatch) -> None:
    bodies = _install_stub(monkeypatch, lambda req: _reply("ok"))

    res = CliRunner().invoke(cli.app, [], input="/etc/hosts format?\n  indented  \n")
    assert res.exit_code == 0, res.output
    assert "Unknown command" not in res.output
    assert [m["content"] for m in bodies[1]["messages"] if m["role"] == "user"] == [
        "/etc/hosts format?",
        "  indented  ",
    ]
