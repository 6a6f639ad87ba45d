"""Tests for the messaging webhook routes"""

from dataclasses import replace
from unittest.mock import patch

import pytest
import requests
from fastapi.testclient import TestClient

from rawbot.services.webhook_service import relay_payload


WEBHOOK = "/api/webhook"

EVENT = {
    "object": "instagram",
    "entry": [
        {
            "id": "ig-999",
            "time": 1760000000,
            "messaging": [{"sender": {"id": "123"}, "message": {"mid": "m1", "text": "price?"}}],
        }
    ],
}


@pytest.fixture
def relay_client(config, store):
    from web.main import create_app

    cfg = replace(config, webhook_relay_url="http://internal.test/hooks/instagram")
    return TestClient(create_app(cfg, store=store))


def test_verification_echoes_challenge(client):
    res = client.get(
        WEBHOOK,
        params={"hub.mode": "subscribe", "hub.verify_token": "verify-me", "hub.challenge": "1158201444"},
    )
    assert res.status_code == 200
    assert res.text == "1158201444"


@pytest.mark.parametrize(
    "params",
    [
        {"hub.mode": "subscribe", "hub.verify_token": "wrong", "hub.challenge": "1"},
        {"hub.mode": "subscribe", "hub.challenge": "1"},
        {"hub.mode": "unsubscribe", "hub.verify_token": "verify-me", "hub.challenge": "1"},
        {},
    ],
)
def test_verification_mismatch_is_forbidden(client, params):
    res = client.get(WEBHOOK, params=params)
    assert res.status_code == 403


def test_event_is_acknowledged(client):
    with patch("rawbot.services.webhook_service.requests.post") as mock_post:
        res = client.post(WEBHOOK, json=EVENT)

    assert res.status_code == 200
    assert res.text == "EVENT_RECEIVED"
    mock_post.assert_not_called()


def test_non_json_body_is_acknowledged(client):
    res = client.post(WEBHOOK, content=b"not json", headers={"content-type": "text/plain"})
    assert res.status_code == 200
    assert res.text == "EVENT_RECEIVED"


def test_event_is_relayed_unmodified(relay_client):
    body = b'{"object": "instagram", "entry": []}'
    with patch("rawbot.services.webhook_service.requests.post") as mock_post:
        res = relay_client.post(WEBHOOK, content=body, headers={"content-type": "application/json"})

    assert res.status_code == 200
    assert res.text == "EVENT_RECEIVED"
    mock_post.assert_called_once()
    assert mock_post.call_args.args[0] == "http://internal.test/hooks/instagram"
    assert mock_post.call_args.kwargs["data"] == body


@pytest.mark.parametrize(
    "failure",
    [requests.ConnectionError("refused"), requests.Timeout("slow"), RuntimeError("unexpected")],
)
def test_relay_failure_never_affects_ack(relay_client, failure):
    with patch("rawbot.services.webhook_service.requests.post", side_effect=failure):
        res = relay_client.post(WEBHOOK, json=EVENT)

    assert res.status_code == 200
    assert res.text == "EVENT_RECEIVED"


@pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE", "OPTIONS"])
def test_other_methods_not_allowed(client, method):
    res = client.request(method, WEBHOOK)
    assert res.status_code == 405
    assert res.text == "Method Not Allowed"


def test_head_not_allowed(client):
    res = client.request("HEAD", WEBHOOK)
    assert res.status_code == 405


def test_relay_payload_swallows_errors():
    with patch("rawbot.services.webhook_service.requests.post", side_effect=requests.ConnectionError()):
        assert relay_payload("http://internal.test/hooks", b"{}") is None
