"""
Pydantic schemas for runtime messages between frames and the background.

Every message is a JSON object tagged by ``id``. Both directions are closed
unions: a kind missing from InboundKind is not a message the core handles.
Field names are snake_case in Python and camelCase on the wire.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from imgsearch.dispatch.payload import ImageCandidate
from imgsearch.exceptions import ProtocolError

__all__ = [
    "InboundKind",
    "OutboundKind",
    "ImageData",
    "ImageDataRequest",
    "ActionPopupSubmit",
    "ImageUploadSubmit",
    "ImageUploadReceipt",
    "ImageSelectionSubmit",
    "ImageSelectionCancel",
    "ImageConfirmationSubmit",
    "ImageConfirmationCancel",
    "FrameIdRequest",
    "FrameHandshake",
    "NotificationRequest",
    "RouteMessage",
    "InboundMessage",
    "ImageDataResponse",
    "ImageConfirmationOpen",
    "ImageConfirmationClose",
    "ImageSelectionOpen",
    "ImageSelectionClose",
    "FrameIdResponse",
    "parse_inbound",
]


class InboundKind(str, Enum):
    IMAGE_DATA_REQUEST        = "imageDataRequest"
    ACTION_POPUP_SUBMIT       = "actionPopupSubmit"
    IMAGE_UPLOAD_SUBMIT       = "imageUploadSubmit"
    IMAGE_UPLOAD_RECEIPT      = "imageUploadReceipt"
    IMAGE_SELECTION_SUBMIT    = "imageSelectionSubmit"
    IMAGE_SELECTION_CANCEL    = "imageSelectionCancel"
    IMAGE_CONFIRMATION_SUBMIT = "imageConfirmationSubmit"
    IMAGE_CONFIRMATION_CANCEL = "imageConfirmationCancel"
    CONFIRM_FRAME_ID          = "confirmFrameId"
    SELECT_FRAME_ID           = "selectFrameId"
    FRAME_HANDSHAKE           = "frameHandshake"
    NOTIFICATION              = "notification"
    ROUTE_MESSAGE             = "routeMessage"


class OutboundKind(str, Enum):
    IMAGE_DATA_RESPONSE      = "imageDataResponse"
    IMAGE_CONFIRMATION_OPEN  = "imageConfirmationOpen"
    IMAGE_CONFIRMATION_CLOSE = "imageConfirmationClose"
    IMAGE_SELECTION_OPEN     = "imageSelectionOpen"
    IMAGE_SELECTION_CLOSE    = "imageSelectionClose"
    CONFIRM_FRAME_ID         = "confirmFrameId"
    SELECT_FRAME_ID          = "selectFrameId"


class _Message(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict:
        """JSON-ready dict with camelCase keys; unset optionals omitted."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ImageData(_Message):
    """Image as sent by content scripts and the upload page."""
    data:       str
    object_url: Optional[str] = None
    info:       Optional[dict[str, Any]] = None

    def to_candidate(self) -> ImageCandidate:
        return ImageCandidate.from_dict(self.model_dump(by_alias=True))


# ── Inbound ───────────────────────────────────────────────────────────────────

class ImageDataRequest(_Message):
    id:       Literal["imageDataRequest"] = "imageDataRequest"
    data_key: str


class ActionPopupSubmit(_Message):
    id:        Literal["actionPopupSubmit"] = "actionPopupSubmit"
    engine:    str
    image_url: Optional[str] = None


class ImageUploadSubmit(_Message):
    id:           Literal["imageUploadSubmit"] = "imageUploadSubmit"
    engine:       str
    images:       list[ImageData]
    search_count: Optional[int] = Field(default=None, ge=0)

    @property
    def total(self) -> int:
        return self.search_count if self.search_count is not None else len(self.images)


class ImageUploadReceipt(_Message):
    id:          Literal["imageUploadReceipt"] = "imageUploadReceipt"
    receipt_key: str


class ImageSelectionSubmit(_Message):
    id:     Literal["imageSelectionSubmit"] = "imageSelectionSubmit"
    engine: str
    token:  Optional[str] = None


class ImageSelectionCancel(_Message):
    id:    Literal["imageSelectionCancel"] = "imageSelectionCancel"
    token: Optional[str] = None


class ImageConfirmationSubmit(_Message):
    id:     Literal["imageConfirmationSubmit"] = "imageConfirmationSubmit"
    img:    ImageData
    engine: str
    token:  Optional[str] = None


class ImageConfirmationCancel(_Message):
    id:    Literal["imageConfirmationCancel"] = "imageConfirmationCancel"
    token: Optional[str] = None


class FrameIdRequest(_Message):
    """A frame asking the top frame to learn its frame id."""
    id: Literal["confirmFrameId", "selectFrameId"]


class FrameHandshake(_Message):
    """In-page runtime reporting its installed modules on document start."""
    id:      Literal["frameHandshake"] = "frameHandshake"
    modules: dict[str, bool] = Field(default_factory=dict)


class NotificationRequest(_Message):
    id:         Literal["notification"] = "notification"
    message_id: str
    type:       str = "info"


class RouteMessage(_Message):
    """Relay: deliver ``data`` unchanged to a tab (sender's tab by default)."""
    id:       Literal["routeMessage"] = "routeMessage"
    data:     Any = None
    tab_id:   Optional[int] = None
    frame_id: Optional[int] = None


InboundMessage = Annotated[
    Union[
        ImageDataRequest,
        ActionPopupSubmit,
        ImageUploadSubmit,
        ImageUploadReceipt,
        ImageSelectionSubmit,
        ImageSelectionCancel,
        ImageConfirmationSubmit,
        ImageConfirmationCancel,
        FrameIdRequest,
        FrameHandshake,
        NotificationRequest,
        RouteMessage,
    ],
    Field(discriminator="id"),
]

_INBOUND = TypeAdapter(InboundMessage)
_INBOUND_IDS = {k.value for k in InboundKind}


def parse_inbound(raw: Any) -> Optional[InboundMessage]:
    """
    Validate a raw inbound message.

    Returns:
        The typed message, or None when the kind is not one the core
        handles (unknown kinds are ignored, not errors).

    Raises:
        ProtocolError: the kind is known but the fields are invalid.
    """
    if not isinstance(raw, Mapping):
        return None
    kind = raw.get("id")
    if not isinstance(kind, str) or kind not in _INBOUND_IDS:
        return None
    try:
        return _INBOUND.validate_python(dict(raw))
    except ValidationError as exc:
        raise ProtocolError(f"invalid {kind} message: {exc}") from exc


# ── Outbound ──────────────────────────────────────────────────────────────────

class ImageDataResponse(_Message):
    id:       Literal["imageDataResponse"] = "imageDataResponse"
    img_data: Optional[dict[str, Any]] = None
    error:    Optional[str] = None


class ImageConfirmationOpen(_Message):
    id:     Literal["imageConfirmationOpen"] = "imageConfirmationOpen"
    images: list[dict[str, Any]]
    engine: str
    token:  str


class ImageConfirmationClose(_Message):
    id: Literal["imageConfirmationClose"] = "imageConfirmationClose"


class ImageSelectionOpen(_Message):
    id:    Literal["imageSelectionOpen"] = "imageSelectionOpen"
    token: str


class ImageSelectionClose(_Message):
    id:            Literal["imageSelectionClose"] = "imageSelectionClose"
    message_frame: Optional[bool] = None


class FrameIdResponse(_Message):
    id:       Literal["confirmFrameId", "selectFrameId"]
    frame_id: int
