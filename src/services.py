"""Front-end facing API: fetch entities, load snapshots, update SEO.

Front ends (the CLI, a web handler) talk to :class:`SEOSyncService` only.
Each call is independent; nothing is cached between calls.
"""

from __future__ import annotations

from seosync.config import SEOSyncConfig
from seosync.coordinator import SyncCoordinator
from seosync.dispatcher import SEOUpdateDispatcher
from seosync.errors import ValidationError
from seosync.integrations.shopify import AuthSession, GraphAPI, ShopifyGraphQLClient
from seosync.models import Blog, ContentEntity, EntityType, SEOUpdateRequest, SyncSnapshot, Theme
from seosync.repository import EntityRepository


class SEOSyncService:
    """Wires the repository, dispatcher and coordinator to one session."""

    def __init__(
        self,
        api: GraphAPI,
        session: AuthSession,
        config: SEOSyncConfig | None = None,
    ) -> None:
        self.config = config or SEOSyncConfig()
        sync = self.config.sync
        seo = self.config.seo
        self.repository = EntityRepository(api, session)
        self.dispatcher = SEOUpdateDispatcher(
            api,
            session,
            enforce_length_limits=seo.enforce_length_limits,
            title_max_length=seo.title_max_length,
            description_max_length=seo.description_max_length,
        )
        self.coordinator = SyncCoordinator(
            self.repository,
            page_size=sync.page_size,
            follow_cursors=sync.follow_cursors,
            max_pages=sync.max_pages,
            concurrent=sync.concurrent_fetch,
        )

    @classmethod
    def from_config(cls, config: SEOSyncConfig) -> SEOSyncService:
        """Build a service that talks to the store named in ``config``.

        Raises:
            ValidationError: The shop or access token is missing.
        """
        shopify = config.to_shopify_config()
        if not shopify.is_configured:
            raise ValidationError(
                "Shopify is not configured: set SHOPIFY_SHOP and SHOPIFY_ACCESS_TOKEN "
                "or the [shopify] section of .seosync.toml"
            )
        return cls(ShopifyGraphQLClient.from_config(shopify), config.to_session(), config)

    def fetch_entities(self, entity_type: EntityType | str, scope: str | None = None) -> list[ContentEntity]:
        """Fetch one content type, honoring the configured pagination mode."""
        sync = self.config.sync
        if sync.follow_cursors:
            return self.repository.fetch_all(
                entity_type, scope=scope, page_size=sync.page_size, max_pages=sync.max_pages
            )
        return self.repository.fetch(entity_type, scope=scope, page_size=sync.page_size)

    def fetch_blogs(self) -> list[Blog]:
        sync = self.config.sync
        return self.repository.fetch_blogs(page_size=sync.page_size, follow_cursors=sync.follow_cursors)

    def fetch_themes(self) -> list[Theme]:
        return self.repository.fetch_themes()

    def load_snapshot(self, selected_blog_id: str | None = None) -> SyncSnapshot:
        return self.coordinator.load_snapshot(selected_blog_id)

    def update_seo(self, request: SEOUpdateRequest) -> ContentEntity:
        return self.dispatcher.update(request)
