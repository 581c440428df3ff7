"""Image and video attachments carried as data URIs."""

from __future__ import annotations

import base64
import binascii
import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from advocate.errors import MediaRejectedError

DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>[A-Za-z0-9+/=\s]*)$")

MediaKind = Literal["image", "video"]


@dataclass(frozen=True)
class MediaAttachment:
    mime_type: str
    kind: MediaKind
    data_uri: str


def parse_data_uri(text: str) -> MediaAttachment:
    """Accept only ``data:image/*;base64,...`` or ``data:video/*;base64,...``."""
    match = DATA_URI_RE.match(text.strip())
    if match is None:
        raise MediaRejectedError("Expected a data URI of the form 'data:<mimetype>;base64,<data>'.")
    mime_type = match.group("mime").lower()
    kind = _kind_of(mime_type)
    try:
        base64.b64decode(match.group("data"), validate=False)
    except (binascii.Error, ValueError) as exc:
        raise MediaRejectedError(f"Attachment payload is not valid base64: {exc}") from exc
    return MediaAttachment(mime_type=mime_type, kind=kind, data_uri=text.strip())


def load_media_file(path: Path) -> MediaAttachment:
    """Read an image or video file into a data URI attachment."""
    mime_type, _ = mimetypes.guess_type(path.name)
    if mime_type is None:
        raise MediaRejectedError(f"Cannot tell the media type of {path.name}. Please upload an image or video file.")
    _kind_of(mime_type)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise MediaRejectedError(f"Could not read the selected file: {exc}") from exc
    encoded = base64.b64encode(data).decode("ascii")
    return parse_data_uri(f"data:{mime_type};base64,{encoded}")


def _kind_of(mime_type: str) -> MediaKind:
    if mime_type.startswith("image/"):
        return "image"
    if mime_type.startswith("video/"):
        return "video"
    raise MediaRejectedError(f"Invalid file type {mime_type}. Please upload an image or video file.")
