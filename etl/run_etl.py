"""
Store Sync Pipeline Orchestrator

Coordinates the complete sync workflow:
- Fetch the store list from Google Sheets
- Normalize rows into records
- Partition records per shop
- Write JSON, minified JSON and CSV artifacts
"""

import argparse
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from config.settings import Settings
from etl.extract import GoogleSheetsFetcher
from etl.load import FileSink, artifact_stem, write_artifacts
from etl.partition import partition
from etl.transform import normalize_rows

logger = logging.getLogger(__name__)

CDN_BASE_URL = "https://cdn.jsdelivr.net/gh"


def cdn_url(settings: Settings, filename: str) -> Optional[str]:
    """jsDelivr URL for an artifact pushed to the configured GitHub repo."""
    if not (settings.GITHUB_USERNAME and settings.GITHUB_REPO):
        return None
    return (
        f"{CDN_BASE_URL}/{settings.GITHUB_USERNAME}/{settings.GITHUB_REPO}"
        f"@{settings.GITHUB_BRANCH}/{filename}"
    )


class SyncOrchestrator:
    """
    Orchestrates the complete sync pipeline.

    Workflow:
    1. Fetch raw rows from Google Sheets
    2. Normalize rows into records
    3. Write one artifact triplet per shop (multi-shop only)
    4. Write the artifact triplet for the unfiltered store list
    """

    def __init__(
        self,
        settings: Settings,
        fetcher: Optional[GoogleSheetsFetcher] = None,
        sink: Optional[FileSink] = None,
    ):
        """
        Initialize sync orchestrator.

        Args:
            settings: Configuration object with sheet and output settings
            fetcher: Sheet fetcher (built from settings when omitted)
            sink: Artifact sink (writes to OUTPUT_DIR when omitted)
        """
        self.settings = settings
        self._fetcher = fetcher
        self.sink = sink or FileSink(settings.OUTPUT_DIR)
        self.start_time: datetime = None
        self.end_time: datetime = None
        self.metrics: Dict[str, Any] = {
            "total_rows": 0,
            "shop_rows": {},
            "artifacts": [],
        }

    @property
    def fetcher(self) -> GoogleSheetsFetcher:
        if self._fetcher is None:
            self._fetcher = GoogleSheetsFetcher(
                api_key=self.settings.GOOGLE_API_KEY,
                credentials_path=self.settings.GOOGLE_CREDENTIALS_PATH,
                timeout=self.settings.REQUEST_TIMEOUT,
            )
        return self._fetcher

    def run(self) -> bool:
        """
        Execute the complete sync pipeline.

        Returns:
            True if successful, False otherwise
        """
        self.start_time = datetime.now(timezone.utc)

        try:
            logger.info("=" * 60)
            logger.info("Starting Store Locator Sync")
            if self.settings.CLIENT_NAME:
                logger.info(f"Client: {self.settings.CLIENT_NAME}")
            logger.info("=" * 60)

            self._execute_pipeline()
            self.end_time = datetime.now(timezone.utc)

            logger.info("=" * 60)
            logger.info("Store Locator Sync Completed Successfully")
            logger.info("=" * 60)
            self._log_summary()

            return True

        except Exception as e:
            self.end_time = datetime.now(timezone.utc)
            logger.error(f"Store Locator Sync failed: {e}", exc_info=True)
            if self.metrics["artifacts"]:
                logger.warning(
                    f"{len(self.metrics['artifacts'])} artifacts were written before the failure"
                )
            return False

    def check_connection(self) -> bool:
        """Read a single cell to verify credentials and sheet access."""
        logger.info("Testing Google Sheets connection...")
        ok = self.fetcher.check_connection(
            self.settings.GOOGLE_SHEET_ID, self.settings.GOOGLE_SHEET_NAME
        )
        logger.info("Configuration:")
        logger.info(f"  Client: {self.settings.CLIENT_NAME}")
        logger.info(f"  GitHub: {self.settings.GITHUB_USERNAME}/{self.settings.GITHUB_REPO}")
        logger.info(f"  Sheet ID: {self.settings.GOOGLE_SHEET_ID}")
        return ok

    def _execute_pipeline(self) -> None:
        """
        Execute the main pipeline.

        Steps:
        1. Fetch raw rows
        2. Normalize into records
        3. Partition and write per-shop artifacts
        4. Write the combined artifacts
        """
        logger.info("Executing sync pipeline steps...")

        # FETCH
        logger.info("Step 1: Fetching data from Google Sheets...")
        rows = self.fetcher.fetch(
            sheet_id=self.settings.GOOGLE_SHEET_ID,
            sheet_name=self.settings.GOOGLE_SHEET_NAME,
            cell_range=self.settings.SHEET_RANGE,
        )

        # NORMALIZE
        logger.info("Step 2: Normalizing rows...")
        record_set = normalize_rows(
            rows, allow_duplicate_headers=self.settings.ALLOW_DUPLICATE_HEADERS
        )
        self.metrics["total_rows"] = len(record_set)

        # PARTITION & WRITE PER SHOP
        if self.settings.is_multi_shop:
            logger.info(f"Step 3: Partitioning records for {len(self.settings.SHOPS)} shops...")
            partitions = partition(record_set, self.settings.SHOPS)
            for shop in self.settings.SHOPS:
                subset = partitions[shop.key]
                self.metrics["shop_rows"][shop.key] = len(subset)
                if shop.domain:
                    logger.info(f"Processing {shop.key.upper()} ({shop.domain})")
                self._write(self.settings.output_name(shop), subset)
        else:
            logger.info("Step 3: Single shop configured, skipping partitioning")

        # WRITE COMBINED
        logger.info("Step 4: Writing combined store list...")
        self._write(self.settings.combined_name, record_set)

        logger.info("Pipeline execution completed")

    def _write(self, name: str, record_set) -> None:
        paths = write_artifacts(self.sink, name, record_set)
        self.metrics["artifacts"].extend(str(path) for path in paths)

    def cdn_urls(self) -> List[tuple]:
        """
        ``(label, url)`` for every minified JSON artifact, or ``[]`` without a GitHub repo.

        Single-shop runs also list the CSV artifact.
        """
        names = [(shop.key, self.settings.output_name(shop)) for shop in self.settings.SHOPS]
        names.append(("all", self.settings.combined_name))

        files = [(label, f"{artifact_stem(name)}.min.json") for label, name in names]
        if not self.settings.is_multi_shop:
            files.append(("csv", f"{artifact_stem(self.settings.combined_name)}.csv"))

        urls = []
        for label, filename in files:
            url = cdn_url(self.settings, filename)
            if url:
                urls.append((label, url))
        return urls

    def _log_summary(self) -> None:
        """Log sync execution summary with all metrics."""
        duration = (self.end_time - self.start_time).total_seconds()
        logger.info(f"Duration: {duration:.2f} seconds")
        logger.info(f"Total stores fetched: {self.metrics['total_rows']}")
        for key, count in self.metrics["shop_rows"].items():
            logger.info(f"  {key}: {count} stores")
        logger.info(f"Artifacts written: {len(self.metrics['artifacts'])}")
        for path in self.metrics["artifacts"]:
            logger.debug(f"  {path}")

        urls = self.cdn_urls()
        if urls:
            logger.info("CDN URLs (after GitHub push):")
            for label, url in urls:
                logger.info(f"  {label}: {url}")


def setup_logging(log_file: str = "logs/store_sync.log", level: str = "INFO") -> None:
    """
    Configure logging for the sync pipeline.

    Args:
        log_file: Path to log file
        level: Console log level
    """
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # File handler
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    console_handler.setFormatter(formatter)

    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="store-sync",
        description="Sync a Google Sheets store list into JSON and CSV artifacts.",
    )
    parser.add_argument("--env-file", help="Load configuration from this .env file")
    parser.add_argument("--output-dir", help="Directory for generated artifacts (overrides OUTPUT_DIR)")
    parser.add_argument("--log-level", help="Console log level (overrides LOG_LEVEL)")
    parser.add_argument(
        "--check-connection",
        action="store_true",
        help="Only verify that the sheet can be read, then exit",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the sync pipeline."""
    args = build_parser().parse_args(argv)

    try:
        settings = Settings.from_env(
            env_file=args.env_file,
            OUTPUT_DIR=args.output_dir,
            LOG_LEVEL=args.log_level.upper() if args.log_level else None,
        )
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        setup_logging(settings.LOG_FILE, settings.LOG_LEVEL)
    except OSError as e:
        print(f"Configuration error: cannot open log file {settings.LOG_FILE}: {e}", file=sys.stderr)
        sys.exit(1)
    logger.debug(f"Loaded {settings!r}")

    try:
        orchestrator = SyncOrchestrator(settings)
        if args.check_connection:
            success = orchestrator.check_connection()
        else:
            success = orchestrator.run()
        sys.exit(0 if success else 1)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
