# designz_loader/schemas/validation.py

from pydantic import BaseModel, Field, computed_field
from typing import Annotated, List, Literal, Union

REQUIRED_EXTENSIONS = [".eps", ".cdr", ".jpg", ".png"]
EXPECTED_COLUMNS = ["folder_name", "title", "description", "category", "subcategory", "tags"]

DETAIL_PREVIEW_LIMIT = 5
NAME_PREVIEW_LIMIT = 10


def preview(items: List[str], limit: int, sep: str = ", ") -> str:
    shown = sep.join(items[:limit])
    if len(items) > limit:
        shown += f" (+{len(items) - limit} more)"
    return shown


def _mb(size: int) -> float:
    return size / (1024 * 1024)


class ArchiveIssue(BaseModel):
    """Base for every validation issue. Subclasses carry the structured
    fields and know how to render themselves for display."""

    def render(self) -> str:
        raise NotImplementedError

    @computed_field
    @property
    def message(self) -> str:
        return self.render()


class SizeExceeded(ArchiveIssue):
    code: Literal["size_exceeded"] = "size_exceeded"
    actual_bytes: int
    limit_bytes: int

    def render(self) -> str:
        return (
            f"File too large: {_mb(self.actual_bytes):.2f} MB exceeds the maximum "
            f"allowed size of {_mb(self.limit_bytes):.0f} MB (1 GB)"
        )


class ArchiveCorrupted(ArchiveIssue):
    code: Literal["archive_corrupted"] = "archive_corrupted"
    detail: str

    def render(self) -> str:
        return f"Error reading zip file: the archive is corrupted or not a valid zip ({self.detail})"


class MetadataNotFound(ArchiveIssue):
    code: Literal["metadata_not_found"] = "metadata_not_found"

    def render(self) -> str:
        return "metadata.xlsx file not found in zip. Place metadata.xlsx next to your design folders."


class MetadataUnreadable(ArchiveIssue):
    code: Literal["metadata_unreadable"] = "metadata_unreadable"
    detail: str

    def render(self) -> str:
        return f"Error reading metadata.xlsx: {self.detail}"


class ColumnCountMismatch(ArchiveIssue):
    code: Literal["column_count_mismatch"] = "column_count_mismatch"
    expected: int
    actual: int

    def render(self) -> str:
        return (
            f"metadata.xlsx must have exactly {self.expected} columns "
            f"({', '.join(EXPECTED_COLUMNS)}), found {self.actual}"
        )


class ColumnNameMismatch(ArchiveIssue):
    code: Literal["column_name_mismatch"] = "column_name_mismatch"
    position: int
    expected: str
    actual: str

    def render(self) -> str:
        found = f"'{self.actual}'" if self.actual else "an empty column"
        return f"Column {self.position} in metadata.xlsx must be '{self.expected}', found {found}"


class ExtraColumns(ArchiveIssue):
    code: Literal["extra_columns"] = "extra_columns"
    columns: List[str]

    def render(self) -> str:
        return (
            f"metadata.xlsx has extra columns after 'tags': {', '.join(self.columns)}. "
            "Remove them, extra columns corrupt how the design rows are read."
        )


class FolderNameMissing(ArchiveIssue):
    code: Literal["folder_name_missing"] = "folder_name_missing"

    def render(self) -> str:
        return "Required column 'folder_name' is missing entirely from metadata.xlsx"


class FolderNameMisplaced(ArchiveIssue):
    code: Literal["folder_name_misplaced"] = "folder_name_misplaced"
    position: int

    def render(self) -> str:
        return (
            f"Column 'folder_name' was found at the wrong position ({self.position}); "
            "it must be the first column of metadata.xlsx"
        )


class NestedTooDeep(ArchiveIssue):
    code: Literal["nested_too_deep"] = "nested_too_deep"
    folders: List[str]

    def render(self) -> str:
        return (
            f"Incorrect folder structure: design files are nested too deep in "
            f"{len(self.folders)} folder(s): {preview(self.folders, DETAIL_PREVIEW_LIMIT)}. "
            "Each design folder must sit at the root of the zip or inside a single top-level folder."
        )


class NoDesignFolders(ArchiveIssue):
    code: Literal["no_design_folders"] = "no_design_folders"

    def render(self) -> str:
        return (
            "No design folders found in zip. Expected structure: one folder per design "
            "(e.g. Design_001/) containing design.eps, design.cdr, design.jpg and design.png, "
            "with metadata.xlsx next to the folders."
        )


class FolderGap(BaseModel):
    folder: str
    missing: List[str]
    has: List[str]

    def describe(self) -> str:
        has = ", ".join(self.has) if self.has else "none"
        return f"{self.folder} (missing: {', '.join(self.missing)}; has: {has})"


class IncompleteFolders(ArchiveIssue):
    code: Literal["incomplete_folders"] = "incomplete_folders"
    folders: List[FolderGap]
    total_folders: int

    @property
    def all_invalid(self) -> bool:
        return len(self.folders) == self.total_folders

    def render(self) -> str:
        details = preview([gap.describe() for gap in self.folders], DETAIL_PREVIEW_LIMIT, sep="; ")
        required = ", ".join(REQUIRED_EXTENSIONS)
        if self.all_invalid:
            return (
                f"None of the {self.total_folders} folders in the zip contain all required files "
                f"({required}). Folders missing required files: {details}"
            )
        return (
            f"{len(self.folders)} of {self.total_folders} folders are missing required files "
            f"({required}). Folders missing required files: {details}"
        )


class InsufficientDesigns(ArchiveIssue):
    code: Literal["insufficient_designs"] = "insufficient_designs"
    minimum: int
    found: int

    @property
    def shortfall(self) -> int:
        return self.minimum - self.found

    def render(self) -> str:
        return (
            f"Insufficient design folders: minimum {self.minimum} complete design folders required, "
            f"found {self.found}. Add {self.shortfall} more."
        )


class MissingInArchive(ArchiveIssue):
    code: Literal["missing_in_archive"] = "missing_in_archive"
    folders: List[str]

    def render(self) -> str:
        return (
            f"Folders in metadata.xlsx not found in zip: {preview(self.folders, NAME_PREVIEW_LIMIT)}. "
            "Make sure each of these folders exists and contains all required files."
        )


class MissingInMetadata(ArchiveIssue):
    code: Literal["missing_in_metadata"] = "missing_in_metadata"
    folders: List[str]

    def render(self) -> str:
        return (
            f"Folders in zip not found in metadata.xlsx: {preview(self.folders, NAME_PREVIEW_LIMIT)}. "
            "Add a row for each of these folders to metadata.xlsx."
        )


Issue = Annotated[
    Union[
        SizeExceeded,
        ArchiveCorrupted,
        MetadataNotFound,
        MetadataUnreadable,
        ColumnCountMismatch,
        ColumnNameMismatch,
        ExtraColumns,
        FolderNameMissing,
        FolderNameMisplaced,
        NestedTooDeep,
        NoDesignFolders,
        IncompleteFolders,
        InsufficientDesigns,
        MissingInArchive,
        MissingInMetadata,
    ],
    Field(discriminator="code"),
]


class ArchiveValidationResult(BaseModel):
    valid: bool
    issues: List[Issue] = []
    design_count: int = 0

    @computed_field
    @property
    def errors(self) -> List[str]:
        return [issue.render() for issue in self.issues]

    @classmethod
    def from_issues(cls, issues: List[ArchiveIssue], design_count: int = 0) -> "ArchiveValidationResult":
        return cls(valid=not issues, issues=issues, design_count=design_count)
