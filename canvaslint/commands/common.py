"""Input loading shared by the check and fix commands."""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import LintConfig, find_config, load_config, recommended_config
from ..errors import DocumentError
from ..models import Document, detect_indent, load_document

logger = logging.getLogger(__name__)

SEVERITY_ORDER = {"error": 0, "warning": 1, "info": 2, "hint": 3}

LEVEL_STYLES = {
    "error": ("ERROR", "bold red"),
    "warning": ("WARN", "yellow"),
    "info": ("INFO", "dim"),
    "hint": ("HINT", "dim"),
}


def read_document(path: Path) -> Document:
    document, _ = read_document_with_indent(path)
    return document


def read_document_with_indent(path: Path) -> tuple[Document, int | None]:
    """Load a document along with the indent width its file was written with."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentError(f"{path}: {e}") from e
    try:
        return load_document(text), detect_indent(text)
    except DocumentError as e:
        raise DocumentError(f"{path}: {e}") from e


def resolve_config(document_path: Path, config_path: Path | None) -> LintConfig:
    """Explicit config, else a canvaslint.toml above the document, else the recommended set."""
    if config_path is not None:
        logger.debug(f"Using config {config_path}")
        return load_config(config_path)

    found = find_config(document_path)
    if found is not None:
        logger.debug(f"Found config {found}")
        return load_config(found)

    logger.debug("No canvaslint.toml found; using recommended rules")
    return recommended_config()
