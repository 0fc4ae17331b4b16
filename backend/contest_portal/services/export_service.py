"""
Data exports for administrators.

- Awards / registrations as .xlsx workbooks (openpyxl)
- Registration materials of one competition as a .zip archive, one folder
  per registrant, containing only attachments that still exist on disk

Both are built into a spooled temporary file and streamed back in chunks.
"""

import re
import tempfile
import zipfile
from datetime import date, datetime
from pathlib import Path, PurePosixPath
from typing import IO, Any, Iterable, Iterator, List, Optional, Sequence, Tuple
from urllib.parse import quote

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from starlette.concurrency import run_in_threadpool

from contest_portal.core.logging_config import logger
from contest_portal.models.award import Award, AwardLevel, AwardStatus
from contest_portal.models.registration import Registration, RegistrationStatus
from contest_portal.services.competition_service import get_competition
from contest_portal.services.storage import resolve_upload_url

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
ZIP_MEDIA_TYPE = "application/zip"

# Exports larger than this spill from memory to a temporary file
EXPORT_SPOOL_SIZE = 8 * 1024 * 1024
EXPORT_CHUNK_SIZE = 64 * 1024

SAFE_NAME_MAX_LENGTH = 80
_UNSAFE_CHARS = re.compile(r'[\\/:*?"<>|]')
_WHITESPACE = re.compile(r"\s+")

# (header, width)
AWARD_COLUMNS: Sequence[Tuple[str, int]] = (
    ("ID", 10),
    ("User ID", 10),
    ("Username", 16),
    ("Real Name", 16),
    ("Student ID", 16),
    ("Email", 24),
    ("Competition ID", 14),
    ("Competition", 24),
    ("Award Level", 12),
    ("Award Name", 28),
    ("Award Rank", 12),
    ("Award Time", 20),
    ("Status", 10),
    ("Certificate Number", 22),
    ("Certificate Image", 40),
    ("Review Notes", 30),
    ("Created At", 20),
)

REGISTRATION_COLUMNS: Sequence[Tuple[str, int]] = (
    ("ID", 10),
    ("Competition ID", 14),
    ("Competition", 26),
    ("User ID", 10),
    ("Username", 16),
    ("Real Name", 16),
    ("Student ID", 16),
    ("Email", 24),
    ("Phone", 16),
    ("Status", 10),
    ("Review Notes", 30),
    ("Registered At", 20),
)


def safe_name(value: Any) -> str:
    """Make a user-supplied string usable as one archive path segment"""
    name = _UNSAFE_CHARS.sub("_", str(value or ""))
    name = _WHITESPACE.sub(" ", name).strip()[:SAFE_NAME_MAX_LENGTH]
    if name in ("", ".", ".."):
        return "_"
    return name


def dated_filename(prefix: str, extension: str, today: Optional[date] = None) -> str:
    today = today or datetime.utcnow().date()
    return f"{prefix}-{today.isoformat()}.{extension}"


def content_disposition(filename: str) -> str:
    """attachment header with an ASCII fallback and the UTF-8 name"""
    fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_").replace('"', "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def _iso(value: Optional[datetime]) -> str:
    return value.isoformat() if value else ""


def _enum_value(value: Any) -> str:
    return value.value if hasattr(value, "value") else (value or "")


def spooled_buffer() -> IO[bytes]:
    return tempfile.SpooledTemporaryFile(max_size=EXPORT_SPOOL_SIZE)


def iter_file(fileobj: IO[bytes], chunk_size: int = EXPORT_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield a file from the start in chunks, closing it once exhausted"""
    try:
        fileobj.seek(0)
        while True:
            chunk = fileobj.read(chunk_size)
            if not chunk:
                break
            yield chunk
    finally:
        fileobj.close()


def build_workbook(title: str, columns: Sequence[Tuple[str, int]], rows: Iterable[List[Any]]) -> IO[bytes]:
    """Single-sheet workbook with a bold, frozen header row, rewound"""
    wb = Workbook()
    ws = wb.active
    ws.title = title

    ws.append([header for header, _ in columns])
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for index, (_, width) in enumerate(columns, start=1):
        ws.column_dimensions[get_column_letter(index)].width = width
    ws.freeze_panes = "A2"

    for row in rows:
        ws.append(row)

    buffer = spooled_buffer()
    try:
        wb.save(buffer)
    except Exception:
        buffer.close()
        raise
    buffer.seek(0)
    return buffer


async def fetch_awards(
    db: AsyncSession,
    award_level: Optional[AwardLevel] = None,
    status: Optional[AwardStatus] = None,
) -> List[Award]:
    query = select(Award).options(selectinload(Award.user), selectinload(Award.competition))
    if award_level:
        query = query.where(Award.award_level == award_level)
    if status:
        query = query.where(Award.status == status)
    query = query.order_by(Award.created_at.desc(), Award.id.desc()).execution_options(populate_existing=True)
    result = await db.execute(query)
    return list(result.scalars().all())


def award_row(award: Award) -> List[Any]:
    user = award.user
    return [
        award.id,
        award.user_id,
        user.username,
        user.real_name or "",
        user.student_id or "",
        user.email,
        award.competition_id if award.competition_id is not None else "",
        award.competition.title if award.competition else "",
        _enum_value(award.award_level),
        award.award_name,
        award.award_rank or "",
        _iso(award.award_time),
        _enum_value(award.status),
        award.certificate_number or "",
        award.certificate_image or "",
        award.review_notes or "",
        _iso(award.created_at),
    ]


async def export_awards(
    db: AsyncSession,
    award_level: Optional[AwardLevel] = None,
    status: Optional[AwardStatus] = None,
) -> Tuple[IO[bytes], int]:
    """Workbook file and the number of exported rows"""
    awards = await fetch_awards(db, award_level, status)
    content = await run_in_threadpool(build_workbook, "awards", AWARD_COLUMNS, [award_row(a) for a in awards])
    return content, len(awards)


async def fetch_registrations(
    db: AsyncSession,
    competition_id: Optional[int] = None,
    status: Optional[RegistrationStatus] = None,
) -> List[Registration]:
    query = select(Registration).options(
        selectinload(Registration.user), selectinload(Registration.competition)
    )
    if competition_id:
        query = query.where(Registration.competition_id == competition_id)
    if status:
        query = query.where(Registration.status == status)
    query = query.order_by(Registration.created_at.desc(), Registration.id.desc()).execution_options(
        populate_existing=True
    )
    result = await db.execute(query)
    return list(result.scalars().all())


def registration_row(registration: Registration) -> List[Any]:
    user = registration.user
    return [
        registration.id,
        registration.competition_id,
        registration.competition.title,
        registration.user_id,
        user.username,
        user.real_name or "",
        user.student_id or "",
        user.email,
        user.phone or "",
        _enum_value(registration.status),
        registration.review_notes or "",
        _iso(registration.created_at),
    ]


async def export_registrations(
    db: AsyncSession,
    competition_id: Optional[int] = None,
    status: Optional[RegistrationStatus] = None,
) -> Tuple[IO[bytes], int]:
    registrations = await fetch_registrations(db, competition_id, status)
    content = await run_in_threadpool(
        build_workbook, "registrations", REGISTRATION_COLUMNS, [registration_row(r) for r in registrations]
    )
    return content, len(registrations)


def _unique_entry(name: str, used: set) -> str:
    if name not in used:
        used.add(name)
        return name
    path = PurePosixPath(name)
    counter = 2
    while True:
        candidate = str(path.with_name(f"{path.stem} ({counter}){path.suffix}"))
        if candidate not in used:
            used.add(candidate)
            return candidate
        counter += 1


def collect_material_entries(root: str, registrations: Iterable[Registration]) -> List[Tuple[Path, str]]:
    """(disk path, archive name) for every attachment still present on disk"""
    entries = []
    used: set = set()

    for registration in registrations:
        attachments = registration.attachments or []
        if not isinstance(attachments, list) or not attachments:
            continue

        user = registration.user
        folder = safe_name(f"{user.display_name}_{user.student_id or user.id}")

        for attachment in attachments:
            if not isinstance(attachment, dict):
                continue
            disk_path = resolve_upload_url(attachment.get("url"))
            if disk_path is None:
                continue
            file_name = safe_name(attachment.get("originalName") or disk_path.name)
            entries.append((disk_path, _unique_entry(f"{root}/{folder}/{file_name}", used)))

    return entries


def build_zip(entries: Sequence[Tuple[Path, str]]) -> IO[bytes]:
    buffer = spooled_buffer()
    try:
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zipf:
            for disk_path, arcname in entries:
                try:
                    zipf.write(disk_path, arcname)
                except FileNotFoundError:
                    # Removed between the existence check and the read
                    logger.warning(f"Material vanished during export: {disk_path}")
    except Exception:
        buffer.close()
        raise
    buffer.seek(0)
    return buffer


async def export_competition_materials(db: AsyncSession, competition_id: int) -> Tuple[IO[bytes], str, int]:
    """ZIP file, the download filename and the number of files included"""
    competition = await get_competition(db, competition_id)
    root = safe_name(competition.title or f"competition-{competition_id}")

    result = await db.execute(
        select(Registration)
        .where(Registration.competition_id == competition_id)
        .options(selectinload(Registration.user))
        .order_by(Registration.created_at.asc(), Registration.id.asc())
        .execution_options(populate_existing=True)
    )
    registrations = result.scalars().all()

    entries = collect_material_entries(root, registrations)
    content = await run_in_threadpool(build_zip, entries)

    logger.info(
        f"Exported {len(entries)} material file(s) for competition {competition_id}",
        extra={"event_type": "materials_export", "competition_id": competition_id},
    )
    return content, f"{root}.zip", len(entries)
