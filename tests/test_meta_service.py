"""Tests for the Meta OAuth token exchange chain"""

from unittest.mock import patch

import pytest
import requests

from rawbot.meta import service as meta_service
from rawbot.utils.exceptions import GraphAPIError, NoLinkedAccountError, NoPagesFoundError

from conftest import graph_response


LINKED_PAGE = {
    "id": "page-2",
    "name": "Ward Flowers",
    "access_token": "page-token-2",
    "instagram_business_account": {"id": "ig-777"},
}


class TestSelectLinkedPage:
    def test_empty_listing(self):
        with pytest.raises(NoPagesFoundError, match="No pages found"):
            meta_service.select_linked_page([])

    def test_no_page_has_instagram(self):
        pages = [{"id": "p1", "access_token": "t1"}, {"id": "p2", "access_token": "t2"}]
        with pytest.raises(NoLinkedAccountError):
            meta_service.select_linked_page(pages)

    def test_first_match_wins(self):
        second = {**LINKED_PAGE, "id": "page-3", "instagram_business_account": {"id": "ig-888"}}
        pages = [{"id": "page-1", "access_token": "t1"}, LINKED_PAGE, second]

        assert meta_service.select_linked_page(pages)["id"] == "page-2"


class TestFormatGraphError:
    def test_message_and_codes(self):
        text = meta_service.format_graph_error(
            {"message": "Invalid verification code format.", "code": 100, "error_subcode": 36009}
        )
        assert text.startswith("Invalid verification code format.")
        assert "code=100" in text
        assert "subcode=36009" in text

    def test_expired_token_hint(self):
        text = meta_service.format_graph_error({"message": "Session has expired", "code": 190})
        assert "Hint:" in text

    def test_non_dict(self):
        assert meta_service.format_graph_error("boom") == "boom"


class TestRunTokenExchange:
    def test_full_chain(self, config):
        responses = [
            graph_response({"access_token": "short-token"}),
            graph_response({"data": [{"id": "page-1", "access_token": "t1"}, LINKED_PAGE]}),
            graph_response({"username": "ward.flowers", "id": "ig-777"}),
            graph_response({"access_token": "long-token", "expires_in": 5184000}),
        ]
        with patch("rawbot.meta.service.requests.get", side_effect=responses) as mock_get:
            result = meta_service.run_token_exchange(config, "auth-code")

        assert result.page_id == "page-2"
        assert result.instagram_business_id == "ig-777"
        assert result.instagram_username == "ward.flowers"
        assert result.access_token == "long-token"
        assert result.token_is_long_lived is True

        calls = mock_get.call_args_list
        assert len(calls) == 4
        first_params = calls[0].kwargs["params"]
        assert calls[0].args[0] == "https://graph.facebook.com/v21.0/oauth/access_token"
        assert first_params["redirect_uri"] == "https://rawbot.test/api/instagram/oauth/callback"
        assert first_params["code"] == "auth-code"
        assert first_params["client_id"] == "app-123"
        assert calls[1].kwargs["params"]["access_token"] == "short-token"
        assert calls[2].args[0].endswith("/ig-777")
        assert calls[2].kwargs["params"]["access_token"] == "page-token-2"
        assert calls[3].kwargs["params"]["fb_exchange_token"] == "page-token-2"

    def test_code_error_stops_chain(self, config):
        error = {"error": {"message": "Invalid verification code format.", "code": 100}}
        with patch("rawbot.meta.service.requests.get", return_value=graph_response(error)) as mock_get:
            with pytest.raises(GraphAPIError, match="Invalid verification code format"):
                meta_service.run_token_exchange(config, "bad-code")

        assert mock_get.call_count == 1

    def test_pages_error_stops_chain(self, config):
        responses = [
            graph_response({"access_token": "short-token"}),
            graph_response({"error": {"message": "Missing pages_show_list permission", "code": 200}}),
        ]
        with patch("rawbot.meta.service.requests.get", side_effect=responses) as mock_get:
            with pytest.raises(GraphAPIError):
                meta_service.run_token_exchange(config, "auth-code")

        assert mock_get.call_count == 2

    def test_long_lived_failure_falls_back_to_page_token(self, config):
        responses = [
            graph_response({"access_token": "short-token"}),
            graph_response({"data": [LINKED_PAGE]}),
            graph_response({"username": "ward.flowers"}),
            graph_response({"error": {"message": "Unsupported request", "code": 100}}),
        ]
        with patch("rawbot.meta.service.requests.get", side_effect=responses):
            result = meta_service.run_token_exchange(config, "auth-code")

        assert result.access_token == "page-token-2"
        assert result.token_is_long_lived is False

    def test_long_lived_transport_error_is_not_fatal(self, config):
        responses = [
            graph_response({"access_token": "short-token"}),
            graph_response({"data": [LINKED_PAGE]}),
            graph_response({"username": "ward.flowers"}),
            requests.ConnectionError("connection reset"),
        ]
        with patch("rawbot.meta.service.requests.get", side_effect=responses):
            result = meta_service.run_token_exchange(config, "auth-code")

        assert result.access_token == "page-token-2"
        assert result.token_is_long_lived is False
