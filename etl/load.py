"""
Artifact Loading

Writes serialized record sets to the output directory.
Each artifact is overwritten in full on every run.
"""

import logging
from pathlib import Path
from typing import List, Union

from etl.errors import WriteError
from etl.records import RecordSet
from etl.serialize import serialize_all

logger = logging.getLogger(__name__)


class FileSink:
    """
    Persists artifacts as local files.

    Single writer only: files are replaced in place, without atomic renames.
    """

    def __init__(self, output_dir: Union[str, Path] = "."):
        self.output_dir = Path(output_dir)

    def write(self, name: str, content: str) -> Path:
        """
        Write ``content`` to ``name`` inside the output directory.

        Args:
            name: Artifact file name
            content: Serialized text

        Returns:
            Path of the written file

        Raises:
            WriteError: If the directory or file cannot be written
        """
        path = self.output_dir / name
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise WriteError(str(path), str(e)) from e

        logger.debug(f"Wrote {len(content)} characters to {path}")
        return path


def artifact_stem(name: str) -> str:
    """Strip a trailing ``.json`` so ``stores-dk.json`` yields ``stores-dk``."""
    return name[: -len(".json")] if name.endswith(".json") else name


def write_artifacts(sink: FileSink, name: str, record_set: RecordSet) -> List[Path]:
    """
    Write the pretty JSON, compact JSON and CSV renderings of a record set.

    Args:
        sink: Destination for the files
        name: Artifact base name, with or without ``.json``
        record_set: Records to serialize

    Returns:
        Paths written, in write order

    Raises:
        WriteError: If any artifact fails; earlier artifacts stay on disk
    """
    stem = artifact_stem(name)
    paths = [sink.write(f"{stem}{suffix}", content) for suffix, content in serialize_all(record_set)]
    logger.info(f"Wrote {len(record_set)} records to {stem}.json / .min.json / .csv")
    return paths
