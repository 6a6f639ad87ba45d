"""Tests for the Instagram OAuth callback route"""

import json
from unittest.mock import patch

import pytest

from conftest import graph_response


CALLBACK = "/api/instagram/oauth/callback"


def _chain(pages, long_lived=None):
    return [
        graph_response({"access_token": "short-token"}),
        graph_response({"data": pages}),
        graph_response({"username": "ward.flowers"}),
        graph_response(long_lived or {"access_token": "long-token"}),
    ]


LINKED_PAGE = {
    "id": "page-9",
    "access_token": "page-token-9",
    "instagram_business_account": {"id": "ig-999"},
}


@pytest.mark.parametrize(
    "params",
    [{}, {"code": "abc"}, {"state": "bot-1"}, {"code": "", "state": "bot-1"}],
)
def test_missing_params_return_400_without_side_effects(client, store, bot, params):
    with patch("rawbot.meta.service.requests.get") as mock_get:
        res = client.get(CALLBACK, params=params, follow_redirects=False)

    assert res.status_code == 400
    assert res.text == "Missing code or state"
    mock_get.assert_not_called()
    assert store.get("bot-1") == bot


def test_successful_link_redirects_and_persists(client, store, bot, config):
    with patch("rawbot.meta.service.requests.get", side_effect=_chain([LINKED_PAGE])):
        res = client.get(CALLBACK, params={"code": "abc", "state": "bot-1"}, follow_redirects=False)

    assert res.status_code == 302
    assert res.headers["location"] == "https://rawbot.test/?success=true"

    linked = store.get("bot-1")
    assert linked.instagram_connected is True
    assert linked.instagram_access_token == "long-token"
    assert linked.instagram_business_id == "ig-999"
    assert linked.instagram_page_id == "page-9"
    assert linked.instagram_username == "ward.flowers"
    assert linked.connected_at

    # unrelated fields survive the merge
    assert linked.store_name == "Ward Flowers"
    assert linked.license_key == "RWB-1234-ABCD"
    assert linked.knowledge_base == "Opening hours: 9-5"

    raw = json.loads((config.data_dir / "bots.json").read_text(encoding="utf-8"))
    document = raw["bots"]["bot-1"]
    assert document["longLivedToken"] == "long-token"
    assert document["instagramTokenLongLived"] is True


def test_empty_pages_returns_404_and_no_write(client, store, bot):
    with patch("rawbot.meta.service.requests.get", side_effect=_chain([])) as mock_get:
        res = client.get(CALLBACK, params={"code": "abc", "state": "bot-1"}, follow_redirects=False)

    assert res.status_code == 404
    assert "No pages found" in res.text
    assert mock_get.call_count == 2
    assert store.get("bot-1").instagram_connected is False


def test_pages_without_instagram_return_404(client, store, bot):
    pages = [{"id": "page-1", "access_token": "t1"}]
    with patch("rawbot.meta.service.requests.get", side_effect=_chain(pages)):
        res = client.get(CALLBACK, params={"code": "abc", "state": "bot-1"}, follow_redirects=False)

    assert res.status_code == 404
    assert "No Instagram Business Account" in res.text
    assert store.get("bot-1").instagram_connected is False


def test_token_error_returns_500_with_detail(client, store, bot):
    error = graph_response({"error": {"message": "This authorization code has expired.", "code": 100}})
    with patch("rawbot.meta.service.requests.get", return_value=error) as mock_get:
        res = client.get(CALLBACK, params={"code": "old", "state": "bot-1"}, follow_redirects=False)

    assert res.status_code == 500
    assert res.text.startswith("Error exchanging token: This authorization code has expired.")
    assert mock_get.call_count == 1
    assert store.get("bot-1").instagram_connected is False


def test_long_lived_failure_still_links_with_page_token(client, store, bot):
    chain = _chain([LINKED_PAGE], long_lived={"error": {"message": "nope"}})
    with patch("rawbot.meta.service.requests.get", side_effect=chain):
        res = client.get(CALLBACK, params={"code": "abc", "state": "bot-1"}, follow_redirects=False)

    assert res.status_code == 302
    linked = store.get("bot-1")
    assert linked.instagram_access_token == "page-token-9"
    assert linked.model_extra["instagramTokenLongLived"] is False


def test_unknown_bot_returns_internal_error(client, store, bot):
    with patch("rawbot.meta.service.requests.get", side_effect=_chain([LINKED_PAGE])):
        res = client.get(CALLBACK, params={"code": "abc", "state": "ghost"}, follow_redirects=False)

    assert res.status_code == 500
    assert res.text == "Internal Error: Bot ghost not found"
