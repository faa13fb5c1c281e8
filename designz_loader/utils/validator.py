# designz_loader/utils/validator.py

import io
import logging
import os
import zipfile
from typing import BinaryIO, List, Optional, Union

from designz_loader.schemas.validation import (
    EXPECTED_COLUMNS,
    ArchiveCorrupted,
    ArchiveIssue,
    ArchiveValidationResult,
    ColumnCountMismatch,
    ColumnNameMismatch,
    ExtraColumns,
    FolderGap,
    FolderNameMisplaced,
    FolderNameMissing,
    IncompleteFolders,
    InsufficientDesigns,
    MetadataNotFound,
    MetadataUnreadable,
    MissingInArchive,
    MissingInMetadata,
    NestedTooDeep,
    NoDesignFolders,
    SizeExceeded,
)
from designz_loader.utils.archive import FolderScan, find_metadata_entry, scan_design_folders
from designz_loader.utils.parser import normalize_header, parse_xlsx, trim_trailing_empty

logger = logging.getLogger(__name__)

MAX_ARCHIVE_BYTES = 1024 * 1024 * 1024  # 1 GiB

ArchiveSource = Union[bytes, BinaryIO, str, os.PathLike]


def _source_size(source: ArchiveSource) -> int:
    if isinstance(source, (bytes, bytearray)):
        return len(source)
    if isinstance(source, (str, os.PathLike)):
        return os.path.getsize(source)
    position = source.tell()
    source.seek(0, os.SEEK_END)
    size = source.tell()
    source.seek(position)
    return size


def validate_header(header: List[str]) -> List[ArchiveIssue]:
    """Check the metadata header row against the fixed six-column schema."""
    issues: List[ArchiveIssue] = []
    columns = [normalize_header(cell) for cell in trim_trailing_empty(header)]
    expected_count = len(EXPECTED_COLUMNS)

    if len(columns) != expected_count:
        issues.append(ColumnCountMismatch(expected=expected_count, actual=len(columns)))

    for idx, expected in enumerate(EXPECTED_COLUMNS):
        actual = columns[idx] if idx < len(columns) else ""
        if actual != expected:
            issues.append(ColumnNameMismatch(position=idx + 1, expected=expected, actual=actual))

    extra = [col for col in columns[expected_count:] if col]
    if extra:
        issues.append(ExtraColumns(columns=extra))

    if not columns or columns[0] != "folder_name":
        if "folder_name" in columns:
            issues.append(FolderNameMisplaced(position=columns.index("folder_name") + 1))
        else:
            issues.append(FolderNameMissing())

    return issues


def collect_row_folders(rows: List[List[str]], column: int = 0) -> List[str]:
    names = {}
    for row in rows[1:]:
        if column < len(row):
            name = str(row[column]).strip()
            if name:
                names.setdefault(name, None)
    return list(names)


def check_folders(scan: FolderScan, row_folders: List[str], minimum_designs: int) -> List[ArchiveIssue]:
    issues: List[ArchiveIssue] = []

    if scan.nested:
        issues.append(NestedTooDeep(folders=scan.nested))

    if not scan.folders:
        issues.append(NoDesignFolders())
        return issues

    complete = [f.name for f in scan.complete]
    incomplete = scan.incomplete
    if incomplete:
        issues.append(IncompleteFolders(
            folders=[FolderGap(folder=f.name, missing=f.missing, has=f.present) for f in incomplete],
            total_folders=len(scan.folders),
        ))

    if not complete:
        return issues

    if len(complete) < minimum_designs:
        issues.append(InsufficientDesigns(minimum=minimum_designs, found=len(complete)))

    # incomplete folders were already reported above
    known = set(complete) | {f.name for f in incomplete}
    missing_in_archive = [name for name in row_folders if name not in known]
    if missing_in_archive:
        issues.append(MissingInArchive(folders=missing_in_archive))

    listed = set(row_folders)
    missing_in_metadata = [name for name in complete if name not in listed]
    if missing_in_metadata:
        issues.append(MissingInMetadata(folders=missing_in_metadata))

    return issues


def validate_archive(
    source: ArchiveSource,
    minimum_designs: int,
    size_bytes: Optional[int] = None,
) -> ArchiveValidationResult:
    """Validate a bulk design upload archive.

    Never raises for problems with the archive itself: oversized, corrupt or
    malformed uploads all come back as issues on the result. The source is
    only read, never modified.
    """
    size = size_bytes if size_bytes is not None else _source_size(source)
    if size > MAX_ARCHIVE_BYTES:
        return ArchiveValidationResult.from_issues(
            [SizeExceeded(actual_bytes=size, limit_bytes=MAX_ARCHIVE_BYTES)]
        )

    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)

    try:
        archive = zipfile.ZipFile(source)
    except (zipfile.BadZipFile, OSError, ValueError) as e:
        logger.warning(f"Could not open archive: {e}")
        return ArchiveValidationResult.from_issues([ArchiveCorrupted(detail=str(e) or "invalid zip file")])

    with archive:
        names = archive.namelist()
        metadata_name = find_metadata_entry(names)
        if metadata_name is None:
            return ArchiveValidationResult.from_issues([MetadataNotFound()])

        try:
            rows = parse_xlsx(archive.read(metadata_name))
        except Exception as e:
            logger.warning(f"Could not parse {metadata_name}: {e}")
            return ArchiveValidationResult.from_issues(
                [MetadataUnreadable(detail=str(e) or "invalid Excel file format")]
            )

    header = rows[0] if rows else []
    schema_issues = validate_header(header)
    if schema_issues:
        return ArchiveValidationResult.from_issues(schema_issues)

    row_folders = collect_row_folders(rows)
    scan = scan_design_folders(names, metadata_name)
    issues = check_folders(scan, row_folders, minimum_designs)
    design_count = len(scan.complete)

    logger.info(
        f"Validated archive: {design_count} complete folders, "
        f"{len(scan.incomplete)} incomplete, {len(row_folders)} metadata rows, {len(issues)} issue(s)"
    )
    return ArchiveValidationResult.from_issues(issues, design_count=design_count)
