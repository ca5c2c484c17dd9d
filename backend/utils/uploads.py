# backend/utils/uploads.py
import logging
import re
import shutil
from pathlib import Path
from typing import List, Tuple

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/webp", "image/gif", "image/avif"}
_SAFE_SEGMENT = re.compile(r"^[\w-]+$")


class UnsafeUploadPath(ValueError):
    pass


def safe_segment(value: str, fallback: str) -> str:
    """Folder and file stems must be a single path segment of word chars and hyphens."""
    value = (value or "").strip()
    if not value:
        return fallback
    if not _SAFE_SEGMENT.match(value):
        raise UnsafeUploadPath(f"Unsafe path segment: {value!r}")
    return value


def file_extension(filename: str) -> str:
    ext = (filename or "").rsplit(".", 1)[-1] if "." in (filename or "") else "bin"
    ext = re.sub(r"[^A-Za-z0-9]", "", ext).lower()
    return ext or "bin"


def plan_filenames(existing: List[str], stem: str, extensions: List[str]) -> List[str]:
    """Pick target names for a batch of uploads.

    The first file takes the bare stem (``stem.ext``) unless a file with that
    stem already exists; every other file is numbered after the highest
    existing ``stem-N.ext``.
    """
    base_exists = any(name.startswith(f"{stem}.") for name in existing)
    pattern = re.compile(rf"^{re.escape(stem)}-(\d+)\.(\w+)$")
    highest = 0
    for name in existing:
        match = pattern.match(name)
        if match:
            highest = max(highest, int(match.group(1)))

    names = []
    for index, ext in enumerate(extensions):
        if index == 0 and not base_exists:
            names.append(f"{stem}.{ext}")
        else:
            highest += 1
            names.append(f"{stem}-{highest}.{ext}")
    return names


def save_images(upload_root, folder_slug: str, product_slug: str, files) -> List[Tuple[str, str, str]]:
    """Write uploaded files under ``upload_root/folder_slug``.

    Returns ``(url, original_filename, stored_filename)`` per file.
    """
    folder = safe_segment(folder_slug, "default")
    stem = safe_segment(product_slug, "file")

    target_dir = Path(upload_root) / folder
    target_dir.mkdir(parents=True, exist_ok=True)
    existing = [p.name for p in target_dir.iterdir() if p.is_file()]

    names = plan_filenames(existing, stem, [file_extension(f.filename) for f in files])
    saved = []
    for upload, name in zip(files, names):
        with open(target_dir / name, "wb") as buffer:
            shutil.copyfileobj(upload.file, buffer)
        saved.append((f"/uploads/{folder}/{name}", upload.filename, name))
    logger.info("Stored %d image(s) in %s", len(saved), target_dir)
    return saved
