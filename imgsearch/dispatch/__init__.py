"""
dispatch — turns an image into one search tab per engine.

Public API
──────────
SearchDispatcher    — search_image / prepare_payload / release_session_blobs
build_tab_url       — destination URL of one engine for one payload
ImageCandidate      — image as handed over by pages and the upload page
random_filename, data_uri_mime_type, decode_data_uri, unique_by_data
"""

from imgsearch.dispatch.payload import (
    ImageCandidate,
    data_uri_mime_type,
    decode_data_uri,
    random_filename,
    unique_by_data,
)
from imgsearch.dispatch.dispatcher import SearchDispatcher, build_tab_url

__all__ = [
    "SearchDispatcher",
    "build_tab_url",
    "ImageCandidate",
    "data_uri_mime_type",
    "decode_data_uri",
    "random_filename",
    "unique_by_data",
]
