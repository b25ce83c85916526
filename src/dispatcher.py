"""Write side of the sync layer: route SEO updates to the right mutation.

``SEO_MUTATIONS`` maps each entity type to its mutation document, the
response field that carries the payload, and how to shape the input.
The dispatcher itself never branches on entity type.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from seosync import queries
from seosync.errors import RemoteMutationError, TransportError, ValidationError
from seosync.integrations.shopify import AuthSession, GraphAPI
from seosync.models import ContentEntity, EntityType, SEOUpdateRequest
from seosync.repository import extract_seo

logger = logging.getLogger(__name__)

# gid://<app>/<Type>/<rest>; ids without a type segment are opaque.
_GID_RE = re.compile(r"^gid://[^/]+/(?P<type>[A-Za-z]+)/.+$")

DEFAULT_TITLE_MAX_LENGTH = 70
DEFAULT_DESCRIPTION_MAX_LENGTH = 320


def _seo_metafields(title: str, description: str) -> list[dict[str, str]]:
    return [
        {"namespace": "global", "key": "title_tag", "type": "single_line_text_field", "value": title},
        {
            "namespace": "global",
            "key": "description_tag",
            "type": "multi_line_text_field",
            "value": description,
        },
    ]


def _product_variables(entity_id: str, title: str, description: str) -> dict[str, Any]:
    return {"product": {"id": entity_id, "seo": {"title": title, "description": description}}}


def _page_variables(entity_id: str, title: str, description: str) -> dict[str, Any]:
    return {"id": entity_id, "page": {"metafields": _seo_metafields(title, description)}}


def _article_variables(entity_id: str, title: str, description: str) -> dict[str, Any]:
    return {"id": entity_id, "article": {"metafields": _seo_metafields(title, description)}}


@dataclass(frozen=True)
class SEOMutation:
    """How to write SEO fields for one entity type.

    The updated entity is read from ``data[mutation_field][payload_field]``
    and its id from ``id_field`` within that payload.
    """

    document: str
    mutation_field: str
    payload_field: str
    build_variables: Callable[[str, str, str], dict[str, Any]]
    id_field: str = "id"


SEO_MUTATIONS: dict[EntityType, SEOMutation] = {
    EntityType.PRODUCT: SEOMutation(
        queries.MUTATION_PRODUCT_SEO, "productUpdate", "product", _product_variables
    ),
    EntityType.PAGE: SEOMutation(queries.MUTATION_PAGE_SEO, "pageUpdate", "page", _page_variables),
    EntityType.ARTICLE: SEOMutation(
        queries.MUTATION_ARTICLE_SEO, "articleUpdate", "article", _article_variables
    ),
}


def _normalize_errors(errors: Any) -> list[dict[str, Any]]:
    """Coerce a GraphQL error array into a list of dicts with a ``message``."""
    if not errors:
        return []
    if not isinstance(errors, list):
        errors = [errors]
    return [e if isinstance(e, dict) else {"message": str(e)} for e in errors]


def id_matches_type(entity_id: str, entity_type: EntityType) -> bool:
    """Check that a global id belongs to the claimed type's namespace.

    ``gid://shopify/Product/1`` matches only ``EntityType.PRODUCT``; ids
    without a type segment (``gid://1``, plain numbers) match any type.
    """
    match = _GID_RE.match(entity_id)
    if match is None:
        return True
    return match.group("type") == entity_type.gid_type


class SEOUpdateDispatcher:
    """Validates and delivers SEO updates, one remote mutation per call.

    No retries: a transient failure surfaces as :class:`RemoteMutationError`.
    Length limits are only checked when ``enforce_length_limits`` is set;
    otherwise the remote API is the sole judge.
    """

    def __init__(
        self,
        api: GraphAPI,
        session: AuthSession,
        *,
        enforce_length_limits: bool = False,
        title_max_length: int = DEFAULT_TITLE_MAX_LENGTH,
        description_max_length: int = DEFAULT_DESCRIPTION_MAX_LENGTH,
    ) -> None:
        self._api = api
        self._session = session
        self.enforce_length_limits = enforce_length_limits
        self.title_max_length = title_max_length
        self.description_max_length = description_max_length

    def validate(self, request: SEOUpdateRequest) -> None:
        """Raise :class:`ValidationError` if the request must not be sent."""
        entity_id = request.entity_id.strip()
        if not entity_id:
            raise ValidationError("entity_id must not be empty")
        if not id_matches_type(entity_id, request.entity_type):
            raise ValidationError(
                f"{request.entity_id} is not a {request.entity_type.gid_type} id"
            )
        if self.enforce_length_limits:
            if len(request.title) > self.title_max_length:
                raise ValidationError(
                    f"SEO title is {len(request.title)} characters; "
                    f"limit is {self.title_max_length}"
                )
            if len(request.description) > self.description_max_length:
                raise ValidationError(
                    f"SEO description is {len(request.description)} characters; "
                    f"limit is {self.description_max_length}"
                )

    def update(self, request: SEOUpdateRequest) -> ContentEntity:
        """Apply an SEO update and return the entity's new id and SEO fields.

        Args:
            request: Target entity and the new title/description.

        Returns:
            A ContentEntity carrying only ``id``, ``entity_type`` and ``seo``.
            Re-fetch through EntityRepository for the full record.

        Raises:
            ValidationError: Rejected locally; nothing was sent.
            RemoteMutationError: Delivery failed or the remote reported
                user errors (the first error's message is surfaced).
        """
        self.validate(request)
        mutation = SEO_MUTATIONS[request.entity_type]
        entity_id = request.entity_id.strip()
        variables = mutation.build_variables(entity_id, request.title, request.description)

        logger.debug("Running %s for %s", mutation.mutation_field, entity_id)
        try:
            response = self._api.execute(self._session, mutation.document, variables)
        except TransportError as exc:
            raise RemoteMutationError(f"Could not update {entity_id}: {exc}") from exc

        top_errors = _normalize_errors(response.get("errors"))
        if top_errors:
            first = top_errors[0]
            raise RemoteMutationError(first.get("message") or str(first), errors=top_errors)

        data = response.get("data")
        result = data.get(mutation.mutation_field) if isinstance(data, dict) else None
        if not isinstance(result, dict):
            raise RemoteMutationError(f"Response has no {mutation.mutation_field} result")

        user_errors = _normalize_errors(result.get("userErrors"))
        if user_errors:
            first = user_errors[0]
            for extra in user_errors[1:]:
                logger.warning(
                    "Additional error updating %s: %s", entity_id, extra.get("message")
                )
            raise RemoteMutationError(
                first.get("message") or "Unknown error",
                field=first.get("field"),
                errors=user_errors,
            )

        payload = result.get(mutation.payload_field)
        if not isinstance(payload, dict) or not payload.get(mutation.id_field):
            raise RemoteMutationError(
                f"Response has no {mutation.payload_field} for {entity_id}"
            )

        try:
            updated = ContentEntity(
                id=payload[mutation.id_field],
                entity_type=request.entity_type,
                seo=extract_seo(payload),
            )
        except ValueError as exc:
            raise RemoteMutationError(f"Malformed {mutation.payload_field} for {entity_id}: {exc}") from exc
        logger.info("Updated SEO for %s %s", request.entity_type, updated.id)
        return updated
