"""Tests for the Shopify Admin GraphQL transport."""

from __future__ import annotations

import http.client
import io
import json
import urllib.error
from unittest.mock import MagicMock, patch

import pytest

from seosync.errors import TransportError
from seosync.integrations.shopify import AuthSession, ShopifyConfig, ShopifyGraphQLClient


def _mock_response(payload: object) -> MagicMock:
    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
    mock_response = MagicMock()
    mock_response.read.return_value = body
    mock_response.__enter__ = lambda s: s
    mock_response.__exit__ = MagicMock(return_value=False)
    return mock_response


_SESSION = AuthSession(shop="test-store.myshopify.com", access_token="shpat_abc")


# ── ShopifyConfig ────────────────────────────────────────────────────────


class TestShopifyConfig:
    def test_is_configured_when_both_set(self):
        cfg = ShopifyConfig(shop="test-store", access_token="shpat_abc")
        assert cfg.is_configured is True

    def test_not_configured_when_token_missing(self):
        assert ShopifyConfig(shop="test-store").is_configured is False

    def test_not_configured_default(self):
        assert ShopifyConfig().is_configured is False

    def test_session(self):
        session = ShopifyConfig(shop="s", access_token="t").session()
        assert session == AuthSession(shop="s", access_token="t")


class TestShopDomain:
    @pytest.mark.parametrize(
        ("shop", "expected"),
        [
            ("test-store", "test-store.myshopify.com"),
            ("test-store.myshopify.com", "test-store.myshopify.com"),
            ("https://test-store.myshopify.com/", "test-store.myshopify.com"),
            ("shop.example.com", "shop.example.com"),
        ],
    )
    def test_shop_domain(self, shop, expected):
        assert AuthSession(shop=shop, access_token="t").shop_domain == expected


# ── ShopifyGraphQLClient ─────────────────────────────────────────────────


class TestExecute:
    def test_request_format(self):
        client = ShopifyGraphQLClient(api_version="2025-01")
        response = _mock_response({"data": {"products": {"edges": []}}})

        with patch("urllib.request.urlopen", return_value=response) as mock_urlopen:
            result = client.execute(_SESSION, "query { shop { name } }", {"first": 5})

        assert result == {"data": {"products": {"edges": []}}}
        req = mock_urlopen.call_args[0][0]
        assert req.full_url == "https://test-store.myshopify.com/admin/api/2025-01/graphql.json"
        assert req.method == "POST"
        assert req.get_header("X-shopify-access-token") == "shpat_abc"
        assert req.get_header("Content-type") == "application/json"
        body = json.loads(req.data)
        assert body == {"query": "query { shop { name } }", "variables": {"first": 5}}
        assert mock_urlopen.call_args.kwargs["timeout"] == 30.0

    def test_variables_default_to_empty(self):
        client = ShopifyGraphQLClient()
        with patch("urllib.request.urlopen", return_value=_mock_response({"data": {}})) as m:
            client.execute(_SESSION, "query { shop { name } }")
        assert json.loads(m.call_args[0][0].data)["variables"] == {}

    def test_graphql_errors_returned_untouched(self):
        client = ShopifyGraphQLClient()
        payload = {"errors": [{"message": "Throttled"}]}
        with patch("urllib.request.urlopen", return_value=_mock_response(payload)):
            assert client.execute(_SESSION, "query { x }") == payload

    def test_from_config(self):
        client = ShopifyGraphQLClient.from_config(
            ShopifyConfig(shop="s", access_token="t", api_version="2024-10", timeout=5)
        )
        assert client.api_version == "2024-10"
        assert client.timeout == 5


class TestTransportErrors:
    def test_http_error(self):
        client = ShopifyGraphQLClient()
        error = urllib.error.HTTPError(
            "https://x", 401, "Unauthorized", hdrs=None, fp=io.BytesIO(b"")
        )
        with patch("urllib.request.urlopen", side_effect=error):
            with pytest.raises(TransportError, match="HTTP 401") as excinfo:
                client.execute(_SESSION, "query { x }")
        assert excinfo.value.status == 401

    def test_url_error(self):
        client = ShopifyGraphQLClient()
        with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("no route")):
            with pytest.raises(TransportError, match="Could not reach"):
                client.execute(_SESSION, "query { x }")

    def test_timeout(self):
        client = ShopifyGraphQLClient(timeout=2)
        with patch("urllib.request.urlopen", side_effect=TimeoutError()):
            with pytest.raises(TransportError, match="Timed out after 2s"):
                client.execute(_SESSION, "query { x }")

    def test_invalid_json(self):
        client = ShopifyGraphQLClient()
        with patch("urllib.request.urlopen", return_value=_mock_response(b"<html>")):
            with pytest.raises(TransportError, match="not valid JSON"):
                client.execute(_SESSION, "query { x }")

    def test_non_object_json(self):
        client = ShopifyGraphQLClient()
        with patch("urllib.request.urlopen", return_value=_mock_response([1, 2])):
            with pytest.raises(TransportError, match="not a JSON object"):
                client.execute(_SESSION, "query { x }")

    def test_body_not_utf8(self):
        client = ShopifyGraphQLClient()
        with patch("urllib.request.urlopen", return_value=_mock_response(b"\xff\xfe{not utf8")):
            with pytest.raises(TransportError, match="not valid JSON"):
                client.execute(_SESSION, "query { x }")

    def test_connection_reset_during_read(self):
        client = ShopifyGraphQLClient()
        response = _mock_response({"data": {}})
        response.read.side_effect = ConnectionResetError("reset by peer")
        with patch("urllib.request.urlopen", return_value=response):
            with pytest.raises(TransportError, match="reset by peer"):
                client.execute(_SESSION, "query { x }")

    def test_incomplete_read(self):
        client = ShopifyGraphQLClient()
        response = _mock_response({"data": {}})
        response.read.side_effect = http.client.IncompleteRead(b"{", 10)
        with patch("urllib.request.urlopen", return_value=response):
            with pytest.raises(TransportError, match="Connection to"):
                client.execute(_SESSION, "query { x }")
