"""
Configuration Management

Loads environment variables and provides settings for the store sync pipeline.
Uses python-dotenv for local development and environment variables for production.

Settings are built once per process with ``Settings.from_env()`` and passed
explicitly to every pipeline stage.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from etl.load import artifact_stem

TRUTHY = {"1", "true", "yes", "on"}


def _as_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in TRUTHY


def parse_countries(raw: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-separated country list into upper-case codes.

    Blank entries are dropped, so ``""`` means "all countries".
    """
    if not raw:
        return ()
    return tuple(code.strip().upper() for code in raw.split(",") if code.strip())


@dataclass(frozen=True)
class Destination:
    """A shop that receives its own partition of the store list."""

    key: str
    countries: Tuple[str, ...] = ()
    currency: str = "EUR"
    language: str = "en"
    domain: str = ""
    output_file: str = ""

    def __post_init__(self):
        # upper-case codes, blanks dropped
        object.__setattr__(
            self, "countries", tuple(c.strip().upper() for c in self.countries if c.strip())
        )

    @property
    def serves_all_countries(self) -> bool:
        return not self.countries


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Ensures no hardcoded credentials in code.
    """

    # Google Sheets Configuration
    GOOGLE_SHEET_ID: str
    GOOGLE_SHEET_NAME: str = "Sheet1"
    GOOGLE_API_KEY: Optional[str] = None
    GOOGLE_CREDENTIALS_PATH: Optional[str] = None
    SHEET_RANGE: str = "A1:Z1000"
    REQUEST_TIMEOUT: float = 30.0
    ALLOW_DUPLICATE_HEADERS: bool = False

    # Output Configuration
    OUTPUT_DIR: str = "."
    OUTPUT_PREFIX: str = "stores"
    SHOPS: Tuple[Destination, ...] = ()

    # Reporting
    CLIENT_NAME: Optional[str] = None
    GITHUB_USERNAME: Optional[str] = None
    GITHUB_REPO: Optional[str] = None
    GITHUB_BRANCH: str = "main"

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/store_sync.log"

    def __post_init__(self):
        """Validate required settings on initialization."""
        self._validate_settings()

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        env_file: Optional[str] = None,
        **overrides,
    ) -> "Settings":
        """
        Build settings from the process environment.

        Args:
            environ: Mapping to read instead of ``os.environ`` (no .env loading)
            env_file: Explicit .env file to load before reading ``os.environ``
            **overrides: Field values that take precedence over the environment

        Returns:
            Validated, immutable Settings

        Raises:
            ValueError: If required settings are missing or malformed
        """
        if environ is None:
            # Load .env file for local development
            load_dotenv(env_file)
            environ = os.environ

        def get(name: str, default: Optional[str] = None) -> Optional[str]:
            value = environ.get(name)
            return default if value is None or value == "" else value

        try:
            timeout = float(get("REQUEST_TIMEOUT", "30"))
        except ValueError:
            raise ValueError(
                f"REQUEST_TIMEOUT must be a number, got {environ.get('REQUEST_TIMEOUT')!r}"
            )

        prefix = get("OUTPUT_PREFIX", "stores")
        # IS_MULTI_SHOP=false keeps single-shop output even when a shop is declared
        shops = ()
        if _as_bool(environ.get("IS_MULTI_SHOP"), default=True):
            shops = _load_destinations(environ, prefix)
        values = dict(
            GOOGLE_SHEET_ID=get("GOOGLE_SHEET_ID", ""),
            GOOGLE_SHEET_NAME=get("GOOGLE_SHEET_NAME", "Sheet1"),
            GOOGLE_API_KEY=get("GOOGLE_API_KEY"),
            GOOGLE_CREDENTIALS_PATH=get("GOOGLE_CREDENTIALS_PATH"),
            # An explicitly empty SHEET_RANGE means "whole tab"
            SHEET_RANGE=environ.get("SHEET_RANGE", "A1:Z1000").strip(),
            REQUEST_TIMEOUT=timeout,
            ALLOW_DUPLICATE_HEADERS=_as_bool(environ.get("ALLOW_DUPLICATE_HEADERS")),
            OUTPUT_DIR=get("OUTPUT_DIR", "."),
            OUTPUT_PREFIX=prefix,
            SHOPS=shops,
            CLIENT_NAME=get("CLIENT_NAME"),
            GITHUB_USERNAME=get("GITHUB_USERNAME"),
            GITHUB_REPO=get("GITHUB_REPO"),
            GITHUB_BRANCH=get("GITHUB_BRANCH", "main"),
            LOG_LEVEL=get("LOG_LEVEL", "INFO").upper(),
            LOG_FILE=get("LOG_FILE", "logs/store_sync.log"),
        )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def is_multi_shop(self) -> bool:
        return bool(self.SHOPS)

    def output_name(self, shop: Destination) -> str:
        return shop.output_file or f"{self.OUTPUT_PREFIX}-{shop.key}.json"

    @property
    def combined_name(self) -> str:
        """Artifact name of the unfiltered store list."""
        return f"{self.OUTPUT_PREFIX}-all" if self.SHOPS else self.OUTPUT_PREFIX

    def _validate_settings(self) -> None:
        """
        Validate that all required settings are provided.

        Raises:
            ValueError: If required settings are missing
        """
        missing_fields = []
        if not self.GOOGLE_SHEET_ID:
            missing_fields.append("GOOGLE_SHEET_ID")
        if not self.GOOGLE_API_KEY and not self.GOOGLE_CREDENTIALS_PATH:
            missing_fields.append("GOOGLE_API_KEY (or GOOGLE_CREDENTIALS_PATH)")

        if missing_fields:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing_fields)}. "
                f"Please check your .env file."
            )

        if self.REQUEST_TIMEOUT <= 0:
            raise ValueError("REQUEST_TIMEOUT must be greater than zero")

        keys = [shop.key for shop in self.SHOPS]
        duplicates = sorted({key for key in keys if keys.count(key) > 1})
        if duplicates:
            raise ValueError(f"Duplicate shop keys: {', '.join(duplicates)}")

        stems = [artifact_stem(self.output_name(shop)) for shop in self.SHOPS]
        stems.append(artifact_stem(self.combined_name))
        clashes = sorted({stem for stem in stems if stems.count(stem) > 1})
        if clashes:
            raise ValueError(
                f"Shops would overwrite each other's artifacts: {', '.join(clashes)}. "
                f"Change SHOP_<i>_KEY or SHOP_<i>_OUTPUT_FILE."
            )

    def __repr__(self) -> str:
        """Return string representation (excluding sensitive data)."""
        return (
            f"Settings("
            f"GOOGLE_SHEET_ID={self.GOOGLE_SHEET_ID}, "
            f"GOOGLE_SHEET_NAME={self.GOOGLE_SHEET_NAME}, "
            f"SHEET_RANGE={self.SHEET_RANGE or '<whole tab>'}, "
            f"OUTPUT_DIR={self.OUTPUT_DIR}, "
            f"SHOPS={[shop.key for shop in self.SHOPS]}"
            f")"
        )


def _load_destinations(environ: Mapping[str, str], prefix: str) -> Tuple[Destination, ...]:
    """
    Read ``SHOP_COUNT`` and the ``SHOP_<i>_*`` variables.

    Raises:
        ValueError: If SHOP_COUNT is malformed or a shop has no key
    """
    raw_count = (environ.get("SHOP_COUNT") or "0").strip()
    try:
        count = int(raw_count)
    except ValueError:
        raise ValueError(f"SHOP_COUNT must be an integer, got {raw_count!r}")

    destinations = []
    for i in range(count):
        key = (environ.get(f"SHOP_{i}_KEY") or "").strip()
        if not key:
            raise ValueError(f"Missing required environment variable: SHOP_{i}_KEY")
        destinations.append(
            Destination(
                key=key,
                countries=parse_countries(environ.get(f"SHOP_{i}_COUNTRIES")),
                currency=(environ.get(f"SHOP_{i}_CURRENCY") or "EUR").strip(),
                language=(environ.get(f"SHOP_{i}_LANGUAGE") or "en").strip(),
                domain=(environ.get(f"SHOP_{i}_DOMAIN") or "").strip(),
                output_file=(environ.get(f"SHOP_{i}_OUTPUT_FILE") or f"{prefix}-{key}.json").strip(),
            )
        )
    return tuple(destinations)
