"""Content domain models: pure Pydantic v2 data types.

These models describe storefront content as the sync layer sees it:
entities that carry SEO metadata (products, pages, articles), the blogs
that own articles, the transient update request, and the read-only
snapshot assembled for one render cycle.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class EntityType(StrEnum):
    """Content types whose SEO metadata can be edited."""

    PRODUCT = "product"
    PAGE = "page"
    ARTICLE = "article"

    @property
    def gid_type(self) -> str:
        """Type segment used in global ids (``gid://shopify/Product/1``)."""
        return self.value.capitalize()


class SEOFields(BaseModel):
    """SEO title and meta description. ``None`` means unset remotely."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    description: str | None = None


class ContentEntity(BaseModel):
    """A product, page or article normalized to a common shape.

    The type-specific payload lives in the optional fields: ``image_url``
    and ``description`` for products, ``body`` for pages, ``excerpt`` for
    articles.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    entity_type: EntityType | None = None
    title: str = ""
    handle: str = ""
    seo: SEOFields = Field(default_factory=SEOFields)
    image_url: str | None = None
    description: str | None = None
    body: str | None = None
    excerpt: str | None = None


class Blog(BaseModel):
    """A blog: container for zero or more articles."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    handle: str = ""


class Theme(BaseModel):
    """An online-store theme (listed for reference, never edited)."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    role: str = ""
    preview_url: str | None = None
    created_at: str | None = None


class EntityPage(BaseModel):
    """One page of a remote connection."""

    model_config = ConfigDict(frozen=True)

    items: list[ContentEntity] = Field(default_factory=list)
    has_next_page: bool = False
    end_cursor: str | None = None


class SEOUpdateRequest(BaseModel):
    """A single save action. Built per request, never persisted."""

    model_config = ConfigDict(frozen=True)

    entity_type: EntityType
    entity_id: str
    title: str
    description: str


class SyncSnapshot(BaseModel):
    """Everything one editor view needs, fetched in a single build.

    ``articles`` always belong to exactly one blog, ``selected_blog_id``,
    which is ``None`` only when the store has no blogs.
    """

    model_config = ConfigDict(frozen=True)

    products: tuple[ContentEntity, ...] = ()
    pages: tuple[ContentEntity, ...] = ()
    blogs: tuple[Blog, ...] = ()
    articles: tuple[ContentEntity, ...] = ()
    selected_blog_id: str | None = None

    def entities(self, entity_type: EntityType) -> tuple[ContentEntity, ...]:
        """Return the entity list for one content type."""
        if entity_type is EntityType.PRODUCT:
            return self.products
        if entity_type is EntityType.PAGE:
            return self.pages
        return self.articles

    def find(self, entity_id: str) -> ContentEntity | None:
        """Look up an entity of any type by id."""
        for entity in (*self.products, *self.pages, *self.articles):
            if entity.id == entity_id:
                return entity
        return None
