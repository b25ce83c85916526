"""Shared fixtures: an in-memory stand-in for the Shopify Admin GraphQL API."""

from __future__ import annotations

import copy
from typing import Any

import pytest

from seosync import queries
from seosync.integrations.shopify import AuthSession


def make_product(
    gid: str,
    title: str = "",
    seo_title: str | None = None,
    seo_description: str | None = None,
    image_url: str | None = None,
) -> dict[str, Any]:
    """Build a product node the way the Admin API returns it."""
    images = [{"node": {"url": image_url}}] if image_url else []
    return {
        "id": gid,
        "title": title,
        "handle": title.lower().replace(" ", "-"),
        "description": f"{title} description",
        "seo": {"title": seo_title, "description": seo_description},
        "images": {"edges": images},
    }


def _metafield(value: str | None) -> dict[str, str] | None:
    return {"value": value} if value is not None else None


def make_page(
    gid: str,
    title: str = "",
    seo_title: str | None = None,
    seo_description: str | None = None,
    body: str = "<p>body</p>",
) -> dict[str, Any]:
    return {
        "id": gid,
        "title": title,
        "handle": title.lower().replace(" ", "-"),
        "body": body,
        "seoTitle": _metafield(seo_title),
        "seoDescription": _metafield(seo_description),
    }


def make_article(
    gid: str,
    title: str = "",
    seo_title: str | None = None,
    seo_description: str | None = None,
    summary: str | None = "excerpt",
) -> dict[str, Any]:
    return {
        "id": gid,
        "title": title,
        "handle": title.lower().replace(" ", "-"),
        "summary": summary,
        "seoTitle": _metafield(seo_title),
        "seoDescription": _metafield(seo_description),
    }


def _connection(nodes: list[dict[str, Any]], first: int, after: str | None) -> dict[str, Any]:
    start = int(after) if after else 0
    chunk = nodes[start : start + first]
    end = start + len(chunk)
    return {
        "edges": [{"node": copy.deepcopy(n)} for n in chunk],
        "pageInfo": {"hasNextPage": end < len(nodes), "endCursor": str(end) if chunk else None},
    }


class FakeGraphAPI:
    """Minimal store double implementing ``execute``.

    Keeps products, pages, blogs and per-blog articles in memory, applies
    SEO mutations to them, and records every call. ``overrides`` maps a
    document to a canned response or an exception to raise.
    """

    def __init__(
        self,
        products: list[dict[str, Any]] | None = None,
        pages: list[dict[str, Any]] | None = None,
        blogs: list[dict[str, Any]] | None = None,
        articles: dict[str, list[dict[str, Any]]] | None = None,
        themes: list[dict[str, Any]] | None = None,
    ) -> None:
        self.products = products or []
        self.pages = pages or []
        self.blogs = blogs or []
        self.articles = articles or {}
        self.themes = themes or []
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.overrides: dict[str, Any] = {}

    def calls_for(self, document: str) -> list[dict[str, Any]]:
        return [variables for doc, variables in self.calls if doc == document]

    def execute(
        self,
        session: AuthSession,
        document: str,
        variables: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        variables = variables or {}
        self.calls.append((document, variables))
        if document in self.overrides:
            response = self.overrides[document]
            if isinstance(response, Exception):
                raise response
            return response

        handlers = {
            queries.QUERY_PRODUCTS: self._products,
            queries.QUERY_PAGES: self._pages,
            queries.QUERY_BLOGS: self._blogs,
            queries.QUERY_ARTICLES: self._articles,
            queries.QUERY_THEMES: self._themes,
            queries.MUTATION_PRODUCT_SEO: self._update_product,
            queries.MUTATION_PAGE_SEO: self._update_page,
            queries.MUTATION_ARTICLE_SEO: self._update_article,
        }
        return handlers[document](variables)

    # ── reads ────────────────────────────────────────────────────────────

    def _products(self, v: dict[str, Any]) -> dict[str, Any]:
        return {"data": {"products": _connection(self.products, v["first"], v.get("after"))}}

    def _pages(self, v: dict[str, Any]) -> dict[str, Any]:
        return {"data": {"pages": _connection(self.pages, v["first"], v.get("after"))}}

    def _blogs(self, v: dict[str, Any]) -> dict[str, Any]:
        return {"data": {"blogs": _connection(self.blogs, v["first"], v.get("after"))}}

    def _articles(self, v: dict[str, Any]) -> dict[str, Any]:
        if v["blogId"] not in self.articles:
            return {"data": {"blog": None}}
        nodes = self.articles[v["blogId"]]
        return {"data": {"blog": {"articles": _connection(nodes, v["first"], v.get("after"))}}}

    def _themes(self, v: dict[str, Any]) -> dict[str, Any]:
        return {"data": {"themes": _connection(self.themes, v["first"], None)}}

    # ── mutations ────────────────────────────────────────────────────────

    @staticmethod
    def _find(nodes: list[dict[str, Any]], gid: str) -> dict[str, Any] | None:
        return next((n for n in nodes if n["id"] == gid), None)

    def _update_product(self, v: dict[str, Any]) -> dict[str, Any]:
        product_input = v["product"]
        node = self._find(self.products, product_input["id"])
        if node is None:
            return _user_errors("productUpdate", "product", "Product does not exist")
        node["seo"] = dict(product_input["seo"])
        payload = {"id": node["id"], "seo": dict(node["seo"])}
        return {"data": {"productUpdate": {"product": payload, "userErrors": []}}}

    def _update_metafields(
        self, nodes: list[dict[str, Any]], v: dict[str, Any], field: str, key: str
    ) -> dict[str, Any]:
        node = self._find(nodes, v["id"])
        if node is None:
            return _user_errors(field, key, f"{key.capitalize()} does not exist")
        for metafield in v[key]["metafields"]:
            alias = "seoTitle" if metafield["key"] == "title_tag" else "seoDescription"
            node[alias] = {"value": metafield["value"]}
        payload = {
            "id": node["id"],
            "seoTitle": node["seoTitle"],
            "seoDescription": node["seoDescription"],
        }
        return {"data": {field: {key: payload, "userErrors": []}}}

    def _update_page(self, v: dict[str, Any]) -> dict[str, Any]:
        return self._update_metafields(self.pages, v, "pageUpdate", "page")

    def _update_article(self, v: dict[str, Any]) -> dict[str, Any]:
        every_article = [a for nodes in self.articles.values() for a in nodes]
        return self._update_metafields(every_article, v, "articleUpdate", "article")


def _user_errors(field: str, key: str, message: str) -> dict[str, Any]:
    return {"data": {field: {key: None, "userErrors": [{"field": ["id"], "message": message}]}}}


@pytest.fixture
def session() -> AuthSession:
    return AuthSession(shop="test-store.myshopify.com", access_token="shpat_test")


@pytest.fixture
def store() -> FakeGraphAPI:
    """A small store: two products, one page, two blogs with articles."""
    return FakeGraphAPI(
        products=[
            make_product("gid://shopify/Product/1", "Shoe", image_url="https://cdn.example/shoe.png"),
            make_product("gid://shopify/Product/2", "Sock", seo_title="Socks", seo_description="Warm"),
        ],
        pages=[make_page("gid://shopify/Page/10", "About", seo_title="About us")],
        blogs=[
            {"id": "gid://shopify/Blog/100", "title": "News", "handle": "news"},
            {"id": "gid://shopify/Blog/200", "title": "Guides", "handle": "guides"},
        ],
        articles={
            "gid://shopify/Blog/100": [make_article("gid://shopify/Article/1000", "Launch")],
            "gid://shopify/Blog/200": [
                make_article("gid://shopify/Article/2000", "Sizing"),
                make_article("gid://shopify/Article/2001", "Care"),
            ],
        },
        themes=[
            {
                "id": "gid://shopify/OnlineStoreTheme/1",
                "name": "Dawn",
                "role": "MAIN",
                "previewUrl": "https://test-store.myshopify.com/?preview_theme_id=1",
                "createdAt": "2025-01-01T00:00:00Z",
            }
        ],
    )
