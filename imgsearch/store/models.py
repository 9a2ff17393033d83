"""Data models for the store module."""

from dataclasses import dataclass, field
from typing import Optional

from imgsearch.exceptions import ReceiptOverflowError

__all__ = ["ImagePayload", "UploadSession"]


@dataclass
class ImagePayload:
    """
    Image handed to the search engines.

    Fields
    ──────
    is_blob      — True for locally held image data, False for a remote URL
    url          — remote image URL (set iff not is_blob)
    object_url   — local blob reference (set iff is_blob)
    filename     — file name presented to upload forms (blobs only)
    receipt_key  — key of the UploadSession this image belongs to, if any
    data_key     — key under which this payload lives in the EphemeralStore
    """
    is_blob:     bool
    url:         Optional[str] = None
    object_url:  Optional[str] = None
    filename:    Optional[str] = None
    receipt_key: Optional[str] = None
    data_key:    Optional[str] = None

    def __post_init__(self) -> None:
        if self.is_blob and (self.object_url is None or self.url is not None):
            raise ValueError("blob payload requires object_url and no url")
        if not self.is_blob and (self.url is None or self.object_url is not None):
            raise ValueError("remote payload requires url and no object_url")

    def to_dict(self) -> dict:
        """Serialise with the camelCase keys content scripts read."""
        data: dict = {"isBlob": self.is_blob}
        for key, value in (
            ("url", self.url),
            ("objectUrl", self.object_url),
            ("filename", self.filename),
            ("receiptKey", self.receipt_key),
            ("dataKey", self.data_key),
        ):
            if value is not None:
                data[key] = value
        return data


@dataclass
class UploadSession:
    """
    Receipt counter for one batch submitted from the upload page.

    total     — number of images in the batch
    receipts  — receipts recorded so far (0 ≤ receipts ≤ total)
    tab_id    — upload page tab, closed when the session is torn down
    blobs     — data_key → object_url of every image stored for this batch
    """
    total:    int
    tab_id:   int
    receipts: int = 0
    blobs:    dict[str, str] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return self.receipts >= self.total

    def record_receipt(self) -> bool:
        """Count one receipt; return True when the batch just completed."""
        if self.complete:
            raise ReceiptOverflowError(
                f"receipt beyond total ({self.receipts}/{self.total})"
            )
        self.receipts += 1
        return self.complete

    def __str__(self) -> str:
        return f"UploadSession(tab={self.tab_id}, {self.receipts}/{self.total})"
