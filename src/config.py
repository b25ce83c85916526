"""Unified configuration loaded from .seosync.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from seosync.errors import ValidationError
from seosync.integrations.shopify import DEFAULT_API_VERSION, AuthSession, ShopifyConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".seosync.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "seosync" / "config.toml"


class ShopifySectionConfig(BaseModel):
    """[shopify] section."""

    shop: str = ""
    access_token: str = ""
    api_version: str = DEFAULT_API_VERSION
    timeout: float = 30.0


class SyncSectionConfig(BaseModel):
    """[sync] section."""

    page_size: int = Field(default=10, ge=1, le=250)
    follow_cursors: bool = False
    max_pages: int | None = None
    concurrent_fetch: bool = True


class SEOSectionConfig(BaseModel):
    """[seo] section: optional local length limits."""

    enforce_length_limits: bool = False
    title_max_length: int = 70
    description_max_length: int = 320


class SEOSyncConfig(BaseModel):
    """Top-level configuration model."""

    shopify: ShopifySectionConfig = Field(default_factory=ShopifySectionConfig)
    sync: SyncSectionConfig = Field(default_factory=SyncSectionConfig)
    seo: SEOSectionConfig = Field(default_factory=SEOSectionConfig)

    def to_shopify_config(self) -> ShopifyConfig:
        """Convert to ShopifyConfig for the transport layer."""
        return ShopifyConfig(
            shop=self.shopify.shop,
            access_token=self.shopify.access_token,
            api_version=self.shopify.api_version,
            timeout=self.shopify.timeout,
        )

    def to_session(self) -> AuthSession:
        return self.to_shopify_config().session()


def load_config(path: str | Path | None = None) -> SEOSyncConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .seosync.toml in CWD
    3. ~/.config/seosync/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged SEOSyncConfig.
    """
    data: dict[str, object] = {}
    source: Path | None = None

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
            source = toml_path
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                source = candidate
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            source = GLOBAL_CONFIG_PATH
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = _validate(data, source=str(source)) if data else SEOSyncConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: SEOSyncConfig, **cli_kwargs: object) -> SEOSyncConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).

    Args:
        config: Base config.
        **cli_kwargs: CLI flag values, e.g. ``shop``, ``token``,
            ``page_size``, ``follow_cursors``.

    Returns:
        Updated config with CLI overrides applied.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "shop": ("shopify", "shop"),
        "token": ("shopify", "access_token"),
        "api_version": ("shopify", "api_version"),
        "page_size": ("sync", "page_size"),
        "follow_cursors": ("sync", "follow_cursors"),
        "max_pages": ("sync", "max_pages"),
        "enforce_length_limits": ("seo", "enforce_length_limits"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return _validate(data, source="command-line options")


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: SEOSyncConfig) -> SEOSyncConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "SHOPIFY_SHOP": ("shopify", "shop"),
        "SHOPIFY_ACCESS_TOKEN": ("shopify", "access_token"),
        "SHOPIFY_API_VERSION": ("shopify", "api_version"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    page_size_raw = os.environ.get("SEOSYNC_PAGE_SIZE")
    if page_size_raw is not None:
        try:
            data["sync"]["page_size"] = int(page_size_raw)
        except ValueError:
            raise ValidationError(f"SEOSYNC_PAGE_SIZE must be an integer, got {page_size_raw!r}") from None
    follow_raw = os.environ.get("SEOSYNC_FOLLOW_CURSORS")
    if follow_raw is not None:
        data["sync"]["follow_cursors"] = follow_raw.lower() in ("true", "1", "yes")

    return _validate(data, source="environment")


def _validate(data: dict[str, object], source: str) -> SEOSyncConfig:
    """Build the config model, reporting bad values as ValidationError."""
    try:
        return SEOSyncConfig.model_validate(data)
    except PydanticValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ValidationError(f"Invalid configuration in {source}: {problems}") from exc
