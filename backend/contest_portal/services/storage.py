"""
Local upload storage.

Uploaded files are written under settings.UPLOAD_DIR and served read-only
from settings.UPLOAD_URL_PREFIX. Stored URLs always look like

    /uploads/<category>/<...>/<filename>

so they can be mapped back to a path on disk for archive exports.
"""

import os
import re
import secrets
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

import aiofiles
import aiofiles.os
from fastapi import UploadFile

from contest_portal.core.config import settings
from contest_portal.core.exceptions import FileTooLargeError, InvalidFileTypeError
from contest_portal.core.logging_config import logger


CHUNK_SIZE = 1024 * 1024  # 1MB

IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})

# Certificates issued by administrators may also be PDFs
ADMIN_CERTIFICATE_TYPES = IMAGE_TYPES | {"application/pdf"}

MATERIAL_TYPES = frozenset({
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "application/zip",
    "application/x-zip-compressed",
    "image/jpeg",
    "image/png",
    "image/webp",
})

_SAFE_SUFFIX = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


@dataclass
class StoredFile:
    """A file written to the upload directory"""
    path: Path
    url: str
    original_name: str
    filename: str
    mime: str
    size: int

    def to_attachment(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "originalName": self.original_name,
            "filename": self.filename,
            "mime": self.mime,
            "size": self.size,
            "uploadedAt": datetime.utcnow().isoformat() + "Z",
        }


def generate_filename(original_name: str) -> str:
    """Unique on-disk name; only a short alphanumeric suffix survives from the client name"""
    suffix = Path(original_name or "").suffix.lower()
    if not _SAFE_SUFFIX.match(suffix):
        suffix = ""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}{suffix}"


def public_url(path: Path) -> str:
    relative = path.resolve().relative_to(settings.upload_root)
    return f"{settings.UPLOAD_URL_PREFIX}/{relative.as_posix()}"


def resolve_upload_url(url: Optional[str]) -> Optional[Path]:
    """
    Map a stored public URL back to an existing file.

    Returns None for external URLs, paths escaping the upload root and
    files that no longer exist.
    """
    prefix = settings.UPLOAD_URL_PREFIX.rstrip("/") + "/"
    if not url or not url.startswith(prefix):
        return None

    root = settings.upload_root
    candidate = (root / url[len(prefix):]).resolve()
    if root not in candidate.parents:
        return None
    if not candidate.is_file():
        return None
    return candidate


def material_parts(competition_id: int, user_id: int) -> Tuple[Any, ...]:
    """Directory parts under UPLOAD_DIR for one registrant's materials"""
    return ("materials", competition_id, user_id)


def upload_url_within(url: Optional[str], parts: Iterable[Any]) -> bool:
    """
    False for a stored upload URL outside UPLOAD_DIR/<parts...>.

    External URLs are not ours to police and pass.
    """
    prefix = settings.UPLOAD_URL_PREFIX.rstrip("/") + "/"
    if not url or not url.startswith(prefix):
        return True

    root = settings.upload_root
    directory = root.joinpath(*[str(p) for p in parts]).resolve()
    candidate = (root / url[len(prefix):]).resolve()
    return directory in candidate.parents


async def save_upload(
    upload: UploadFile,
    parts: Iterable[Any],
    allowed_types: Iterable[str],
    max_size: Optional[int] = None,
) -> StoredFile:
    """
    Validate and stream an upload to UPLOAD_DIR/<parts...>/<generated name>.

    Raises InvalidFileTypeError before anything is written, and
    FileTooLargeError once the size limit is crossed; a partially written
    file is removed in that case.
    """
    original_name = upload.filename or "file"
    content_type = (upload.content_type or "").split(";")[0].strip().lower()
    allowed = set(allowed_types)
    max_size = max_size or settings.MAX_UPLOAD_SIZE

    if content_type not in allowed:
        logger.warning(
            f"Rejected upload '{original_name}' with type {content_type or 'unknown'}",
            extra={"event_type": "upload_rejected", "content_type": content_type},
        )
        raise InvalidFileTypeError(original_name, content_type, list(allowed))

    directory = settings.upload_root.joinpath(*[str(p) for p in parts])
    await aiofiles.os.makedirs(directory, exist_ok=True)

    filename = generate_filename(original_name)
    target = directory / filename
    temp_path = directory / f".{filename}.part"

    size = 0
    try:
        async with aiofiles.open(temp_path, "wb") as out:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_size:
                    raise FileTooLargeError(original_name, max_size)
                await out.write(chunk)
        await aiofiles.os.replace(temp_path, target)
    except BaseException:
        await discard(temp_path)
        raise

    logger.debug(f"Stored upload {original_name} -> {target} ({size} bytes)")

    return StoredFile(
        path=target,
        url=public_url(target),
        original_name=original_name,
        filename=filename,
        mime=content_type,
        size=size,
    )


async def discard(path: Path) -> None:
    """Remove a file if it exists"""
    try:
        await aiofiles.os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove {path}: {e}")


def ensure_upload_root() -> Path:
    root = settings.upload_root
    os.makedirs(root, exist_ok=True)
    return root
