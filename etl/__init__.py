"""
Store Locator Sync Package

Syncs a Google Sheets store list into static JSON and CSV artifacts.

Modules:
- extract: Raw cell fetch from Google Sheets
- transform: Row normalization into records
- partition: Per-shop country filtering
- serialize: JSON, minified JSON and CSV rendering
- load: Artifact writes
- run_etl: Pipeline orchestration
"""

__version__ = "1.0.0"
__author__ = "Data Engineering Team"
