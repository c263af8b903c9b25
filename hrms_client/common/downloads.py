"""Saving server-generated files (reports, payslips) to disk."""

from __future__ import annotations

import logging
import re
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import unquote

from hrms_client.common.http import Download

logger = logging.getLogger(__name__)

_EXTENDED_RE = re.compile(r"filename\*\s*=\s*([\w-]*)'[^']*'([^;\s]+)", re.IGNORECASE)
_PLAIN_RE = re.compile(r"filename\s*=\s*(?:\"([^\"]*)\"|([^;]+))", re.IGNORECASE)


def filename_from_disposition(content_disposition: Optional[str]) -> Optional[str]:
    """Extract the filename from a ``Content-Disposition`` header.

    ``filename*`` (RFC 5987, percent-encoded) wins over ``filename``.
    Directory parts are dropped; ``.`` and ``..`` give ``None``.
    """
    if not content_disposition:
        return None
    raw: Optional[str] = None
    extended = _EXTENDED_RE.search(content_disposition)
    if extended:
        charset = extended.group(1) or "utf-8"
        try:
            raw = unquote(extended.group(2), encoding=charset, errors="replace")
        except LookupError:
            raw = unquote(extended.group(2))
    else:
        plain = _PLAIN_RE.search(content_disposition)
        if plain:
            raw = plain.group(1) if plain.group(1) is not None else plain.group(2)
    if raw is None:
        return None
    # never let the server pick a directory
    name = PurePosixPath(raw.replace("\\", "/")).name.strip()
    if name in ("", ".", ".."):
        return None
    return name


def save_download(download: Download, directory: Path, fallback_name: str) -> Path:
    """Write *download* into *directory*; returns the path written.

    Uses the server-supplied filename, else *fallback_name*.
    """
    filename = filename_from_disposition(download.content_disposition) or fallback_name
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / filename
    target.write_bytes(download.content)
    logger.info("Saved %s (%s, %d bytes)", target, download.content_type, len(download.content))
    return target
