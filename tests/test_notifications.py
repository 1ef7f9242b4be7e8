from __future__ import annotations

import json

import httpx

from services.notifications import BotNotifier, LogNotifier, build_notifier, class_change_message


def _client(status_code, seen):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(status_code, json={"ok": status_code < 300})

    return httpx.Client(transport=httpx.MockTransport(handler))


def test_bot_notifier_posts_payload():
    seen = []
    notifier = BotNotifier("https://bot.example/admin/notify", client=_client(200, seen))

    assert notifier.notify("42", class_change_message()) is True
    assert seen == [{"tg_id": "42", "text": class_change_message()}]


def test_bot_notifier_reports_failure():
    seen = []
    notifier = BotNotifier("https://bot.example/admin/notify", client=_client(502, seen))

    assert notifier.notify("42", "hi") is False
    assert len(seen) == 1


def test_bot_notifier_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    assert BotNotifier("https://bot.example/notify", client=client).notify("1", "hi") is False


def test_build_notifier():
    assert isinstance(build_notifier(None), LogNotifier)
    assert isinstance(build_notifier("https://bot.example/notify"), BotNotifier)
