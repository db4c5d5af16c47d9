"""File IO utilities."""

from __future__ import annotations

import unicodedata

import chardet


def detect_encoding(raw: bytes) -> str:
    """Detect the encoding of raw text bytes."""

    detection = chardet.detect(raw)
    return detection.get("encoding") or "utf-8"


def decode_text(raw: bytes) -> str:
    """Decode uploaded bytes, preferring UTF-8 and dropping a leading BOM."""

    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        encoding = detect_encoding(raw)
    return raw.decode(encoding, errors="replace").lstrip("\ufeff")


def safe_filename(filename: str) -> str:
    """Return a filesystem safe filename."""

    normalized = unicodedata.normalize("NFKD", filename)
    sanitized = [c for c in normalized if c.isalnum() or c in {"-", "_", "."}]
    return "".join(sanitized)


def file_extension(filename: str) -> str:
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()

