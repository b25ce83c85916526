"""Read side of the sync layer: fetch and normalize content entities.

Each entity type maps to exactly one read query through ``READ_QUERIES``.
Adding a content type means adding a table row, not a branch.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from seosync import queries
from seosync.errors import (
    NotFoundError,
    RemoteQueryError,
    TransportError,
    ValidationError,
)
from seosync.integrations.shopify import AuthSession, GraphAPI
from seosync.models import Blog, ContentEntity, EntityPage, EntityType, SEOFields, Theme

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 250


def _metafield_value(node: dict[str, Any], alias: str) -> str | None:
    field = node.get(alias)
    if isinstance(field, dict):
        return field.get("value")
    return None


def extract_seo(node: dict[str, Any]) -> SEOFields:
    """Read SEO fields from a node.

    Products expose a ``seo`` object; pages and articles expose the
    ``seoTitle``/``seoDescription`` metafield aliases.
    """
    seo = node.get("seo")
    if isinstance(seo, dict):
        return SEOFields(title=seo.get("title"), description=seo.get("description"))
    return SEOFields(
        title=_metafield_value(node, "seoTitle"),
        description=_metafield_value(node, "seoDescription"),
    )


def _first_image_url(node: dict[str, Any]) -> str | None:
    images = node.get("images")
    edges = images.get("edges") if isinstance(images, dict) else None
    if not edges:
        return None
    first = edges[0].get("node") if isinstance(edges[0], dict) else None
    return first.get("url") if isinstance(first, dict) else None


def _product(node: dict[str, Any]) -> ContentEntity:
    return ContentEntity(
        id=node["id"],
        entity_type=EntityType.PRODUCT,
        title=node.get("title") or "",
        handle=node.get("handle") or "",
        seo=extract_seo(node),
        description=node.get("description"),
        image_url=_first_image_url(node),
    )


def _page(node: dict[str, Any]) -> ContentEntity:
    return ContentEntity(
        id=node["id"],
        entity_type=EntityType.PAGE,
        title=node.get("title") or "",
        handle=node.get("handle") or "",
        seo=extract_seo(node),
        body=node.get("body"),
    )


def _article(node: dict[str, Any]) -> ContentEntity:
    return ContentEntity(
        id=node["id"],
        entity_type=EntityType.ARTICLE,
        title=node.get("title") or "",
        handle=node.get("handle") or "",
        seo=extract_seo(node),
        excerpt=node.get("summary"),
    )


@dataclass(frozen=True)
class ReadQuery:
    """How to read one entity type.

    ``connection_path`` leads from ``data`` to the connection object.
    When ``scope_variable`` is set, the fetch needs a scope id and a null
    first path segment means the scoped container does not exist.
    """

    document: str
    connection_path: tuple[str, ...]
    normalize: Callable[[dict[str, Any]], ContentEntity]
    scope_variable: str | None = None


READ_QUERIES: dict[EntityType, ReadQuery] = {
    EntityType.PRODUCT: ReadQuery(queries.QUERY_PRODUCTS, ("products",), _product),
    EntityType.PAGE: ReadQuery(queries.QUERY_PAGES, ("pages",), _page),
    EntityType.ARTICLE: ReadQuery(
        queries.QUERY_ARTICLES, ("blog", "articles"), _article, scope_variable="blogId"
    ),
}


class EntityRepository:
    """Fetches one content type at a time from the remote store.

    Read-only; holds no state beyond the transport and session it was
    given.
    """

    def __init__(self, api: GraphAPI, session: AuthSession) -> None:
        self._api = api
        self._session = session

    def fetch(
        self,
        entity_type: EntityType | str,
        scope: str | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> list[ContentEntity]:
        """Fetch the first page of entities of one type.

        Args:
            entity_type: Content type to read.
            scope: Blog id, required for articles and rejected otherwise.
            page_size: Maximum number of entities to return.

        Returns:
            Entities in remote order.

        Raises:
            ValidationError: Bad type, scope or page size.
            NotFoundError: The scoped blog does not exist.
            RemoteQueryError: Transport failure or malformed response.
        """
        return list(self.fetch_page(entity_type, scope=scope, page_size=page_size).items)

    def fetch_page(
        self,
        entity_type: EntityType | str,
        scope: str | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        cursor: str | None = None,
    ) -> EntityPage:
        """Fetch one page of entities starting after ``cursor``."""
        entity_type = _coerce_type(entity_type)
        query = READ_QUERIES[entity_type]
        _check_page_size(page_size)

        variables: dict[str, Any] = {"first": page_size, "after": cursor}
        if query.scope_variable:
            if not scope:
                raise ValidationError(f"Fetching {entity_type} requires a scope id")
            variables[query.scope_variable] = scope
        elif scope:
            raise ValidationError(f"{entity_type} does not accept a scope")

        data = self._query(query.document, variables, what=str(entity_type))
        connection = _walk(data, query.connection_path, scoped=bool(query.scope_variable), scope=scope)
        nodes, has_next, end_cursor = _unpack_connection(connection, query.connection_path)
        try:
            items = [query.normalize(node) for node in nodes]
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise RemoteQueryError(f"Malformed {entity_type} node in response: {exc}") from exc
        return EntityPage(items=items, has_next_page=has_next, end_cursor=end_cursor)

    def fetch_all(
        self,
        entity_type: EntityType | str,
        scope: str | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int | None = None,
    ) -> list[ContentEntity]:
        """Follow cursors until the remote reports no more pages.

        ``max_pages`` caps the number of requests; ``None`` means no cap.
        """
        if max_pages is not None and max_pages < 1:
            raise ValidationError("max_pages must be at least 1")
        items: list[ContentEntity] = []
        cursor: str | None = None
        pages = 0
        while True:
            page = self.fetch_page(entity_type, scope=scope, page_size=page_size, cursor=cursor)
            items.extend(page.items)
            pages += 1
            if not page.has_next_page or not page.end_cursor:
                break
            if max_pages is not None and pages >= max_pages:
                logger.info("Stopped %s fetch after %d pages", entity_type, pages)
                break
            cursor = page.end_cursor
        return items

    def fetch_blogs(self, page_size: int = DEFAULT_PAGE_SIZE, follow_cursors: bool = False) -> list[Blog]:
        """Fetch blogs in remote order."""
        _check_page_size(page_size)
        blogs: list[Blog] = []
        cursor: str | None = None
        while True:
            data = self._query(queries.QUERY_BLOGS, {"first": page_size, "after": cursor}, what="blogs")
            connection = _walk(data, ("blogs",))
            nodes, has_next, cursor = _unpack_connection(connection, ("blogs",))
            try:
                blogs.extend(
                    Blog(id=n["id"], title=n.get("title") or "", handle=n.get("handle") or "")
                    for n in nodes
                )
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                raise RemoteQueryError(f"Malformed blog node in response: {exc}") from exc
            if not (follow_cursors and has_next and cursor):
                return blogs

    def fetch_themes(self, first: int = DEFAULT_PAGE_SIZE) -> list[Theme]:
        """Fetch the store's themes."""
        _check_page_size(first)
        data = self._query(queries.QUERY_THEMES, {"first": first}, what="themes")
        nodes, _, _ = _unpack_connection(_walk(data, ("themes",)), ("themes",))
        try:
            return [
                Theme(
                    id=n["id"],
                    name=n.get("name") or "",
                    role=n.get("role") or "",
                    preview_url=n.get("previewUrl"),
                    created_at=n.get("createdAt"),
                )
                for n in nodes
            ]
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise RemoteQueryError(f"Malformed theme node in response: {exc}") from exc

    def _query(self, document: str, variables: dict[str, Any], what: str) -> dict[str, Any]:
        logger.debug("Fetching %s with %s", what, variables)
        try:
            response = self._api.execute(self._session, document, variables)
        except TransportError as exc:
            raise RemoteQueryError(f"Could not fetch {what}: {exc}") from exc

        errors = response.get("errors")
        if errors:
            raise RemoteQueryError(f"Could not fetch {what}: {_error_message(errors)}")
        data = response.get("data")
        if not isinstance(data, dict):
            raise RemoteQueryError(f"Response for {what} has no data")
        return data


def _coerce_type(entity_type: EntityType | str) -> EntityType:
    try:
        return EntityType(entity_type.lower())
    except ValueError:
        raise ValidationError(f"Unknown entity type: {entity_type!r}") from None


def _check_page_size(page_size: int) -> None:
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise ValidationError(f"page_size must be between 1 and {MAX_PAGE_SIZE}, got {page_size}")


def _error_message(errors: Any) -> str:
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        return str(errors[0].get("message", errors[0]))
    return str(errors)


def _walk(
    data: dict[str, Any],
    path: tuple[str, ...],
    scoped: bool = False,
    scope: str | None = None,
) -> dict[str, Any]:
    current: Any = data
    for depth, key in enumerate(path):
        value = current.get(key) if isinstance(current, dict) else None
        if value is None:
            if scoped and depth == 0:
                raise NotFoundError(f"{key.capitalize()} not found: {scope}")
            raise RemoteQueryError(f"Response is missing '{'.'.join(path[: depth + 1])}'")
        current = value
    if not isinstance(current, dict):
        raise RemoteQueryError(f"Response field '{'.'.join(path)}' is not an object")
    return current


def _unpack_connection(
    connection: dict[str, Any], path: tuple[str, ...]
) -> tuple[list[dict[str, Any]], bool, str | None]:
    try:
        nodes = [edge["node"] for edge in connection["edges"]]
    except (KeyError, TypeError) as exc:
        raise RemoteQueryError(f"Malformed connection at '{'.'.join(path)}'") from exc
    page_info = connection.get("pageInfo") or {}
    if not isinstance(page_info, dict):
        raise RemoteQueryError(f"Malformed pageInfo at '{'.'.join(path)}'")
    end_cursor = page_info.get("endCursor")
    if end_cursor is not None and not isinstance(end_cursor, str):
        raise RemoteQueryError(f"Malformed pageInfo at '{'.'.join(path)}'")
    return nodes, bool(page_info.get("hasNextPage")), end_cursor
