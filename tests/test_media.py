from pathlib import Path

import pytest

from advocate.errors import MediaRejectedError
from advocate.media import load_media_file, parse_data_uri


def test_image_data_uri_is_accepted() -> None:
    attachment = parse_data_uri("data:image/png;base64,iVBORw0KGgo=")
    assert attachment.kind == "image"
    assert attachment.mime_type == "image/png"


def test_video_data_uri_is_accepted() -> None:
    assert parse_data_uri("data:video/mp4;base64,AAAA").kind == "video"


@pytest.mark.parametrize(
    "text",
    [
        "data:application/pdf;base64,AAAA",
        "data:text/plain;base64,AAAA",
        "data:image/png,notbase64",
        "https://example.com/cat.png",
        "",
    ],
)
def test_other_inputs_are_rejected(text: str) -> None:
    with pytest.raises(MediaRejectedError):
        parse_data_uri(text)


def test_load_media_file_builds_data_uri(tmp_path: Path) -> None:
    path = tmp_path / "cat.png"
    path.write_bytes(b"\x89PNG")

    attachment = load_media_file(path)

    assert attachment.data_uri == "data:image/png;base64,iVBORw=="


def test_load_media_file_rejects_documents(tmp_path: Path) -> None:
    path = tmp_path / "notes.txt"
    path.write_text("hello", encoding="utf-8")

    with pytest.raises(MediaRejectedError):
        load_media_file(path)
