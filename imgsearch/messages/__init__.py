"""
messages — runtime message protocol and routing.

Public API
──────────
InboundKind / OutboundKind  — closed sets of message kinds
parse_inbound               — raw dict → typed inbound message (or None)
MessageRouter               — dispatches inbound messages by kind
"""

from imgsearch.messages.schemas import InboundKind, OutboundKind, parse_inbound
from imgsearch.messages.router import MessageRouter

__all__ = ["InboundKind", "OutboundKind", "parse_inbound", "MessageRouter"]
