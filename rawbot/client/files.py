"""Turn an uploaded knowledge file into plain text."""

from __future__ import annotations

from pathlib import PurePath

from ..utils.exceptions import UnsupportedFileError

TEXT_SUFFIXES = {".txt", ".md", ".csv", ".json"}


def extract_text(file_name: str, data: bytes) -> str:
    suffix = PurePath(file_name).suffix.lower()
    if suffix not in TEXT_SUFFIXES:
        raise UnsupportedFileError(f"Unsupported file type: {suffix or file_name}")
    try:
        return data.decode("utf-8-sig").strip()
    except UnicodeDecodeError as e:
        raise UnsupportedFileError(f"{file_name} is not valid UTF-8 text") from e
