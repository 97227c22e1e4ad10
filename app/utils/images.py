# app/utils/images.py
import io
import os
import re
import time
from typing import Optional, Tuple
from PIL import Image, UnidentifiedImageError

# safe image extensions we allow
ALLOWED_EXT = {".jpg", ".jpeg", ".png", ".webp", ".gif"}

_FORMAT_CONTENT_TYPES = {
    "JPEG": ("image/jpeg", ".jpg"),
    "PNG": ("image/png", ".png"),
    "WEBP": ("image/webp", ".webp"),
    "GIF": ("image/gif", ".gif"),
}

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")


class InvalidImageError(ValueError):
    pass


def _safe_ext(filename: str) -> str:
    _, ext = os.path.splitext(filename)
    return ext.lower()


def safe_file_name(original_name: str, now_ms: Optional[int] = None) -> str:
    """
    Storage key for an uploaded file: "<epoch ms>-<base><ext>", where every
    character of the base outside [A-Za-z0-9_-] becomes "_".
    """
    base, ext = os.path.splitext(os.path.basename(original_name or ""))
    if ext:
        ext = "." + _UNSAFE_CHARS.sub("_", ext[1:])
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{now_ms}-{_UNSAFE_CHARS.sub('_', base)}{ext}"


def inspect_image(contents: bytes) -> Tuple[str, str]:
    """
    Verify that `contents` is an image we accept.
    Returns (content_type, extension) detected from the bytes, not from the
    client-declared file name or mimetype.
    """
    try:
        im = Image.open(io.BytesIO(contents))
        im.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise InvalidImageError("Uploaded file is not a valid image") from e
    detected = _FORMAT_CONTENT_TYPES.get(im.format or "")
    if detected is None:
        raise InvalidImageError(f"Unsupported image format: {im.format}")
    return detected


def image_file_name(original_name: str, detected_ext: str) -> str:
    """Safe storage name whose extension is trusted: keep the client's if allowed, else use the detected one."""
    name = safe_file_name(original_name or "upload")
    if _safe_ext(name) in ALLOWED_EXT:
        return name
    stem, _ = os.path.splitext(name)
    return f"{stem}{detected_ext}"
