"""File-storage upload endpoint."""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Optional, Union

from hrms_client.common.exceptions import UploadError
from hrms_client.common.http import ResourceApi


class UploadApi(ResourceApi):

    async def upload(
        self,
        file: Union[Path, str, bytes],
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> str:
        """Upload one file and return the URL the backend stored it under."""
        if isinstance(file, (str, Path)):
            path = Path(file)
            content = path.read_bytes()
            filename = filename or path.name
        else:
            content = file
            filename = filename or "upload.bin"
        content_type = (
            content_type
            or mimetypes.guess_type(filename)[0]
            or "application/octet-stream"
        )

        body = await self._request(
            "POST",
            "/upload",
            files={"file": (filename, content, content_type)},
            action=f"uploading {filename}",
        )
        url = _extract_url(body)
        if not url:
            raise UploadError(f"Upload of {filename} returned no file URL")
        return url


def _extract_url(body: object) -> Optional[str]:
    if isinstance(body, str):
        return body or None
    if not isinstance(body, dict):
        return None
    for key in ("url", "fileUrl", "location"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    data = body.get("data")
    if isinstance(data, dict):
        return _extract_url(data)
    return None
