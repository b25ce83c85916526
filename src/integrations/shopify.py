"""Shopify Admin GraphQL integration: config, session and transport.

The sync layer talks to the remote store only through
:meth:`ShopifyGraphQLClient.execute`; everything above it is validation
and orchestration.
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.request
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict

from seosync.errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2025-01"


class ShopifyConfig(BaseModel):
    """Connection settings for one Shopify store."""

    shop: str = ""
    access_token: str = ""
    api_version: str = DEFAULT_API_VERSION
    timeout: float = 30.0

    @property
    def is_configured(self) -> bool:
        return bool(self.shop and self.access_token)

    def session(self) -> AuthSession:
        """Build the authenticated session handle for this store."""
        return AuthSession(shop=self.shop, access_token=self.access_token)


class AuthSession(BaseModel):
    """Authenticated handle for one store.

    Obtained and renewed outside seosync; passed through unchanged to the
    transport, which is the only code that reads it.
    """

    model_config = ConfigDict(frozen=True)

    shop: str
    access_token: str

    @property
    def shop_domain(self) -> str:
        shop = self.shop.strip().removeprefix("https://").removeprefix("http://")
        shop = shop.rstrip("/")
        if "." not in shop:
            shop = f"{shop}.myshopify.com"
        return shop


class GraphAPI(Protocol):
    """Anything that can run a GraphQL document against the store."""

    def execute(
        self,
        session: AuthSession,
        document: str,
        variables: dict[str, Any] | None = None,
    ) -> dict[str, Any]: ...


class ShopifyGraphQLClient:
    """Client for the Shopify Admin GraphQL API.

    Posts JSON documents via urllib. Transport failures raise
    :class:`TransportError`; GraphQL-level ``errors`` are returned in the
    response body for the caller to interpret.
    """

    def __init__(self, api_version: str = DEFAULT_API_VERSION, timeout: float = 30.0) -> None:
        self.api_version = api_version
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: ShopifyConfig) -> ShopifyGraphQLClient:
        return cls(api_version=config.api_version, timeout=config.timeout)

    def endpoint(self, session: AuthSession) -> str:
        return f"https://{session.shop_domain}/admin/api/{self.api_version}/graphql.json"

    def execute(
        self,
        session: AuthSession,
        document: str,
        variables: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Run a query or mutation and return the decoded JSON body.

        Args:
            session: Store and access token to authenticate with.
            document: GraphQL query or mutation text.
            variables: Values for the document's variables.

        Returns:
            The parsed response, including ``data`` and any ``errors``.

        Raises:
            TransportError: On HTTP/network failure, timeout, or a body
                that is not a JSON object.
        """
        url = self.endpoint(session)
        body = json.dumps({"query": document, "variables": variables or {}}).encode("utf-8")
        req = urllib.request.Request(
            url,
            data=body,
            method="POST",
            headers={
                "X-Shopify-Access-Token": session.access_token,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

        logger.debug("POST %s", url)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as exc:
            raise TransportError(f"HTTP {exc.code} from {url}: {exc.reason}", status=exc.code) from exc
        except urllib.error.URLError as exc:
            raise TransportError(f"Could not reach {url}: {exc.reason}") from exc
        except TimeoutError as exc:
            raise TransportError(f"Timed out after {self.timeout}s waiting for {url}") from exc
        except (OSError, http.client.HTTPException) as exc:
            raise TransportError(f"Connection to {url} failed: {exc}") from exc

        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise TransportError(f"Response from {url} is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise TransportError(f"Response from {url} is not a JSON object")
        return payload
