from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from keybase_notify.config import TeamInfo
from keybase_notify.errors import TransportError
from keybase_notify.services import keybase as keybase_module
from keybase_notify.services.keybase import KeybaseClient, build_channel


class _FakeProcess:
    def __init__(self, returncode: int = 0, stdout: bytes = b"", stderr: bytes = b"") -> None:
        self.returncode = returncode
        self._stdout = stdout
        self._stderr = stderr

    async def communicate(self):
        return self._stdout, self._stderr


@pytest.fixture
def spawned(monkeypatch):
    """Capture CLI invocations instead of running the keybase binary."""
    calls: list[dict] = []
    replies: list[_FakeProcess] = []

    async def _fake_exec(program, *args, **kwargs):
        calls.append({"program": program, "args": args, "env": kwargs.get("env") or {}})
        return replies.pop(0) if replies else _FakeProcess()

    monkeypatch.setattr(keybase_module.asyncio, "create_subprocess_exec", _fake_exec)
    return calls, replies


def _lookup_client(handler) -> KeybaseClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return KeybaseClient("fakebob", "paper key", http_client=http_client)


def test_channel_destination() -> None:
    assert build_channel(TeamInfo(channel="funtimes")) == {
        "public": False,
        "topic_type": "chat",
        "name": "funtimes",
        "members_type": "",
        "topic_name": "",
    }


def test_team_destination() -> None:
    channel = build_channel(TeamInfo(team_name="myteam", topic_name="github"))
    assert channel["name"] == "myteam"
    assert channel["members_type"] == "team"
    assert channel["topic_name"] == "github"


def test_lookup_returns_first_username() -> None:
    seen: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"status": {"code": 0}, "them": [{"basics": {"username": "keybasebob"}}]},
        )

    client = _lookup_client(_handler)
    assert asyncio.run(client.get_keybase_username("marvinpinto")) == "keybasebob"
    assert seen[0].url.path == "/_/api/1.0/user/lookup.json"
    assert seen[0].url.params["github"] == "marvinpinto"
    assert seen[0].url.params["fields"] == "basics"


@pytest.mark.parametrize(
    "body",
    [
        {"status": {"code": 205, "name": "NOT_FOUND"}},
        {"status": {"code": 0}, "them": []},
        {"status": {"code": 0}, "them": [None]},
        {"status": {"code": 0}, "them": [{"basics": {}}]},
    ],
)
def test_lookup_without_match_is_empty(body) -> None:
    client = _lookup_client(lambda request: httpx.Response(200, json=body))
    assert asyncio.run(client.get_keybase_username("marvinpinto")) == ""


def test_lookup_skips_empty_login() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    client = _lookup_client(_handler)
    assert asyncio.run(client.get_keybase_username("")) == ""


def test_lookup_http_errors_are_raised() -> None:
    client = _lookup_client(lambda request: httpx.Response(500, text="oops"))
    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.get_keybase_username("marvinpinto"))


def test_init_passes_paper_key_through_environment(spawned) -> None:
    calls, _ = spawned
    client = KeybaseClient("fakebob", "this is a fake paper key", binary="/usr/bin/keybase")

    asyncio.run(client.init())

    assert calls[0]["program"] == "/usr/bin/keybase"
    assert calls[0]["args"] == ("oneshot", "--username", "fakebob")
    assert calls[0]["env"]["KEYBASE_PAPERKEY"] == "this is a fake paper key"
    assert "this is a fake paper key" not in calls[0]["args"]


def test_deinit_only_logs_out_after_login(spawned) -> None:
    calls, _ = spawned
    client = KeybaseClient("fakebob", "key")

    asyncio.run(client.deinit())
    assert calls == []

    async def _cycle() -> None:
        await client.init()
        await client.deinit()

    asyncio.run(_cycle())
    assert [call["args"][0] for call in calls] == ["oneshot", "logout"]


def test_send_builds_chat_api_request(spawned) -> None:
    calls, replies = spawned
    replies.append(_FakeProcess(stdout=b'{"result": {"message": "message sent", "id": 3}}'))
    client = KeybaseClient("fakebob", "key")

    asyncio.run(client.send_chat_message(TeamInfo(channel="funtimes"), "Hey there, world!"))

    args = calls[0]["args"]
    assert args[:3] == ("chat", "api", "-m")
    request = json.loads(args[3])
    assert request["method"] == "send"
    assert request["params"]["options"]["message"] == {"body": "Hey there, world!"}
    assert request["params"]["options"]["channel"]["name"] == "funtimes"


def test_send_reports_api_errors(spawned) -> None:
    _, replies = spawned
    replies.append(_FakeProcess(stdout=b'{"error": {"code": 2400, "message": "no such channel"}}'))
    client = KeybaseClient("fakebob", "key")

    with pytest.raises(TransportError, match="no such channel"):
        asyncio.run(client.send_chat_message(TeamInfo(channel="nope"), "hi"))


def test_failed_command_raises(spawned) -> None:
    _, replies = spawned
    replies.append(_FakeProcess(returncode=1, stderr=b"bad paper key"))
    client = KeybaseClient("fakebob", "key")

    with pytest.raises(TransportError, match="bad paper key"):
        asyncio.run(client.init())


def test_missing_binary_raises(monkeypatch) -> None:
    async def _missing(*args, **kwargs):
        raise FileNotFoundError(2, "No such file or directory")

    monkeypatch.setattr(keybase_module.asyncio, "create_subprocess_exec", _missing)
    client = KeybaseClient("fakebob", "key", binary="/nowhere/keybase")

    with pytest.raises(TransportError, match="Cannot run"):
        asyncio.run(client.init())
