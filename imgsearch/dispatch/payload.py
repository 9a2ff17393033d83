"""
Image candidates and data-URI helpers.

A candidate is what a content script or the upload page hands to the core:
``{"data": <url or data: URI>, "objectUrl"?: ..., "info": {"filename"?: ...}}``.
"""

import base64
import binascii
import copy
import random
import re
import string
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional
from urllib.parse import unquote_to_bytes

from imgsearch.engines.catalog import IMAGE_MIME_TYPES

__all__ = [
    "ImageCandidate",
    "data_uri_mime_type",
    "decode_data_uri",
    "random_filename",
    "unique_by_data",
]

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[^;,]*)(?P<params>(?:;[^,]*)?),(?P<body>.*)$", re.DOTALL)
_ALNUM = string.ascii_letters + string.digits


@dataclass
class ImageCandidate:
    """One image found on a page or submitted for upload."""
    data:       str
    object_url: Optional[str] = None
    filename:   Optional[str] = None
    raw:        Optional[dict] = field(default=None, compare=False, repr=False)

    @property
    def is_blob(self) -> bool:
        return self.object_url is not None or self.data.startswith("data:")

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ImageCandidate":
        info = raw.get("info") or {}
        return cls(
            data=raw.get("data") or "",
            object_url=raw.get("objectUrl"),
            filename=info.get("filename") or None,
            raw=copy.deepcopy(dict(raw)),
        )

    def to_dict(self) -> dict:
        """Wire form; a candidate read with from_dict() keeps every field it came with."""
        if self.raw is not None:
            return copy.deepcopy(self.raw)
        data: dict = {"data": self.data}
        if self.object_url:
            data["objectUrl"] = self.object_url
        if self.filename:
            data["info"] = {"filename": self.filename}
        return data


def data_uri_mime_type(data: str) -> str:
    """MIME type of a data URI, lower-cased; empty string when not a data URI."""
    m = _DATA_URI_RE.match(data)
    return m.group("mime").strip().lower() if m else ""


def decode_data_uri(data: str) -> tuple[str, bytes]:
    """
    Split a data URI into (mime_type, body bytes).

    Raises:
        ValueError: *data* is not a well-formed data URI.
    """
    m = _DATA_URI_RE.match(data)
    if not m:
        raise ValueError("not a data URI")
    mime = m.group("mime").strip().lower() or "text/plain"
    body = m.group("body")
    if ";base64" in m.group("params").lower():
        try:
            return mime, base64.b64decode(body, validate=False)
        except binascii.Error as exc:
            raise ValueError(f"bad base64 payload: {exc}") from exc
    return mime, unquote_to_bytes(body)


def random_filename(data: str, rng: Optional[random.Random] = None) -> str:
    """
    Random alphanumeric stem of length 5–20 plus the MIME-mapped extension.

    Unmapped MIME types produce a name without extension.
    """
    rng = rng or random
    stem = "".join(rng.choice(_ALNUM) for _ in range(rng.randint(5, 20)))
    ext = IMAGE_MIME_TYPES.get(data_uri_mime_type(data), "")
    return f"{stem}.{ext}" if ext else stem


def unique_by_data(images: list[ImageCandidate]) -> list[ImageCandidate]:
    """Drop later candidates whose ``data`` repeats an earlier one."""
    seen: set[str] = set()
    unique = []
    for img in images:
        if img.data in seen:
            continue
        seen.add(img.data)
        unique.append(img)
    return unique
