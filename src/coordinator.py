"""Assemble the multi-type snapshot an editor view renders from."""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from seosync.models import Blog, ContentEntity, EntityType, SyncSnapshot
from seosync.repository import DEFAULT_PAGE_SIZE, EntityRepository

logger = logging.getLogger(__name__)


class SyncCoordinator:
    """Builds a fresh :class:`SyncSnapshot` on every call.

    Products, pages and blogs are fetched first (concurrently unless
    ``concurrent`` is false), then the articles of one blog. Any fetch
    failure aborts the build; no partial snapshot is returned.
    """

    def __init__(
        self,
        repository: EntityRepository,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        follow_cursors: bool = False,
        max_pages: int | None = None,
        concurrent: bool = True,
    ) -> None:
        self._repository = repository
        self.page_size = page_size
        self.follow_cursors = follow_cursors
        self.max_pages = max_pages
        self.concurrent = concurrent

    def load_snapshot(self, selected_blog_id: str | None = None) -> SyncSnapshot:
        """Fetch everything one editor view needs.

        Args:
            selected_blog_id: Blog whose articles to include. Unknown or
                missing ids fall back to the first blog.

        Returns:
            The assembled snapshot. A store with no blogs yields an empty
            article list, not an error.

        Raises:
            RemoteQueryError: Any underlying fetch failed.
            NotFoundError: The chosen blog vanished between the blog and
                article fetches.
        """
        products, pages, blogs = self._fetch_independent()
        blog = _choose_blog(blogs, selected_blog_id)
        articles: list[ContentEntity] = []
        if blog is not None:
            if selected_blog_id and blog.id != selected_blog_id:
                logger.info("Blog %s not found, showing %s instead", selected_blog_id, blog.id)
            articles = self._entities(EntityType.ARTICLE, blog.id)

        snapshot = SyncSnapshot(
            products=products,
            pages=pages,
            blogs=blogs,
            articles=articles,
            selected_blog_id=blog.id if blog else None,
        )
        logger.info(
            "Loaded snapshot: %d products, %d pages, %d blogs, %d articles",
            len(products), len(pages), len(blogs), len(articles),
        )
        return snapshot

    def _fetch_independent(self) -> tuple[list[ContentEntity], list[ContentEntity], list[Blog]]:
        tasks: list[Callable[[], Any]] = [
            lambda: self._entities(EntityType.PRODUCT),
            lambda: self._entities(EntityType.PAGE),
            lambda: self._repository.fetch_blogs(
                page_size=self.page_size, follow_cursors=self.follow_cursors
            ),
        ]
        if not self.concurrent:
            products, pages, blogs = (task() for task in tasks)
            return products, pages, blogs

        with ThreadPoolExecutor(max_workers=len(tasks)) as pool:
            futures = [pool.submit(task) for task in tasks]
            # result() re-raises the first failure in submission order
            products, pages, blogs = (future.result() for future in futures)
        return products, pages, blogs

    def _entities(self, entity_type: EntityType, scope: str | None = None) -> list[ContentEntity]:
        if self.follow_cursors:
            return self._repository.fetch_all(
                entity_type, scope=scope, page_size=self.page_size, max_pages=self.max_pages
            )
        return self._repository.fetch(entity_type, scope=scope, page_size=self.page_size)


def _choose_blog(blogs: list[Blog], selected_blog_id: str | None) -> Blog | None:
    if not blogs:
        return None
    if selected_blog_id:
        for blog in blogs:
            if blog.id == selected_blog_id:
                return blog
    return blogs[0]
