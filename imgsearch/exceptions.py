"""
Project-wide custom exception hierarchy.
All modules raise subclasses of ImgSearchError — never bare Exception.

Errors that end a user-initiated workflow carry a ``message_key``: the
localisation key the notifier shows to the user.
"""

__all__ = [
    "ImgSearchError",
    "PreconditionError",
    "NoEnginesEnabledError",
    "ScriptsNotAllowedError",
    "InvalidSearchModeError",
    "InvalidImageUrlError",
    "UnknownEngineError",
    "ExtractionError",
    "ImageNotFoundError",
    "StoreError",
    "SessionExpiredError",
    "ReceiptOverflowError",
    "ConfigError",
    "ProtocolError",
    "BrowserError",
    "WorkflowStateError",
]


class ImgSearchError(Exception):
    """Root exception for all imgsearch errors."""

    message_key: str = "error_InternalError"


# ── Preconditions ─────────────────────────────────────────────────────────────

class PreconditionError(ImgSearchError):
    """Raised before any side effect when a search cannot start at all."""


class NoEnginesEnabledError(PreconditionError):
    """Raised when the options leave no search engine enabled."""

    message_key = "error_allEnginesDisabled"


class ScriptsNotAllowedError(PreconditionError):
    """Raised when the page forbids script execution (restricted URL)."""

    message_key = "error_scriptsNotAllowed"


class InvalidSearchModeError(PreconditionError):
    """Raised when the configured action search mode is unsupported on this platform."""

    message_key = "error_invalidSearchMode_url"


class InvalidImageUrlError(PreconditionError):
    """Raised when the page URL scheme cannot be searched (file: outside Firefox)."""

    message_key = "error_invalidImageUrl_fileUrl"


class UnknownEngineError(PreconditionError):
    """Raised when an engine id is not present in the engine catalog."""

    message_key = "error_engineNotFound"


# ── Extraction ────────────────────────────────────────────────────────────────

class ExtractionError(ImgSearchError):
    """Raised when the in-page probe or extraction round trip breaks."""

    message_key = "error_InternalError"


class ImageNotFoundError(ExtractionError):
    """Raised when extraction succeeds but yields no image."""

    message_key = "error_imageNotFound"


# ── Store ─────────────────────────────────────────────────────────────────────

class StoreError(ImgSearchError):
    """Raised on misuse of the ephemeral store."""


class SessionExpiredError(StoreError):
    """Raised when a data key no longer resolves to a stored entry."""

    message_key = "sessionExpired"


class ReceiptOverflowError(StoreError):
    """Raised when an upload session receives more receipts than its total."""


# ── Configuration ─────────────────────────────────────────────────────────────

class ConfigError(ImgSearchError):
    """Raised when an options record cannot be loaded."""


# ── Protocol / collaborators ──────────────────────────────────────────────────

class ProtocolError(ImgSearchError):
    """Raised when an inbound message of a known kind fails validation."""


class BrowserError(ImgSearchError):
    """Raised when a browser collaborator call fails."""


# ── Workflows ─────────────────────────────────────────────────────────────────

class WorkflowStateError(ImgSearchError):
    """Raised on a transition the workflow state machine does not allow."""
