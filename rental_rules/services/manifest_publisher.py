"""
Manifest Publisher Service

Writes compiled client manifests to the local filesystem, where the asset
build picks them up for the client form layer.

Layout: {manifest_output_dir}/{wizard}/{mode}.json

A manifest is written to a temporary file and renamed into place, so a
reader never observes a half-written file. Publishing the same manifest
twice is a no-op when the checksum on disk already matches.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from rental_rules.compiler.canonicalizer import to_canonical_json_pretty
from rental_rules.compiler.compiler import manifest_checksum
from rental_rules.core.config import settings
from rental_rules.core.errors import CompilationError

logger = logging.getLogger(__name__)


def _manifest_path(manifest: dict[str, Any], base_dir: Path) -> Path:
    try:
        wizard = manifest["wizard"]
        mode = manifest["mode"]
    except KeyError as e:
        raise CompilationError(
            "Manifest is missing its wizard or mode", details={"missing": str(e)}
        ) from e
    return base_dir / wizard / f"{mode}.json"


def _read_checksum(path: Path) -> str | None:
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8")).get("checksum")
    except json.JSONDecodeError:
        logger.warning("Existing manifest is not valid JSON, overwriting: %s", path)
        return None


def publish_manifest(manifest: dict[str, Any], output_dir: str | Path | None = None) -> Path:
    """
    Write a compiled manifest to disk.

    Args:
        manifest: Manifest returned by `compile_wizard`
        output_dir: Target directory (defaults to settings.manifest_output_dir)

    Returns:
        Path of the written (or already current) manifest

    Raises:
        CompilationError: If the manifest checksum does not match its content
    """
    expected = manifest_checksum(manifest)
    if manifest.get("checksum") != expected:
        raise CompilationError(
            "Manifest checksum does not match its content",
            details={"checksum": manifest.get("checksum"), "expected": expected},
        )

    base_dir = Path(output_dir or settings.manifest_output_dir)
    path = _manifest_path(manifest, base_dir)

    if _read_checksum(path) == expected:
        logger.info("Manifest already current: %s (%s)", path, expected)
        return path

    path.parent.mkdir(parents=True, exist_ok=True)
    content = to_canonical_json_pretty(manifest)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            tmp.write(content)
        os.replace(tmp_name, path)
    except OSError:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info("Published manifest to filesystem: %s (%d bytes, %s)", path, len(content), expected)
    return path
