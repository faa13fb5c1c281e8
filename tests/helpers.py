from __future__ import annotations

import io
import zipfile
from collections.abc import Iterable

from openpyxl import Workbook

HEADER = ["folder_name", "title", "description", "category", "subcategory", "tags"]
REQUIRED = [".eps", ".cdr", ".jpg", ".png"]


def make_metadata(folders: Iterable[str], header: list[str] | None = None) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.append(header if header is not None else HEADER)
    for idx, folder in enumerate(folders, start=1):
        ws.append([folder, f"Title {idx}", "A design", "Logos", "Minimal", "logo, brand"])
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def design_entries(folder: str, extensions: Iterable[str] = REQUIRED, root: str = "") -> list[tuple[str, bytes]]:
    prefix = f"{root}/" if root else ""
    return [(f"{prefix}{folder}/design{ext}", b"x") for ext in extensions]


def make_zip(entries: Iterable[tuple[str, bytes]]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, mode="w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, data in entries:
            archive.writestr(name, data)
    return buffer.getvalue()


def folder_names(count: int, start: int = 1) -> list[str]:
    return [f"Design_{i:03d}" for i in range(start, start + count)]


def make_design_archive(
    folders: list[str],
    rows: list[str] | None = None,
    header: list[str] | None = None,
    extra: Iterable[tuple[str, bytes]] = (),
) -> bytes:
    entries: list[tuple[str, bytes]] = []
    for folder in folders:
        entries.extend(design_entries(folder))
    entries.extend(extra)
    entries.append(("metadata.xlsx", make_metadata(folders if rows is None else rows, header)))
    return make_zip(entries)


class FakeEvents:
    """Stands in for the redis client; records what gets published."""

    def __init__(self) -> None:
        self.published: list[tuple[str, str]] = []

    async def publish(self, channel: str, data: str) -> int:
        self.published.append((channel, data))
        return 1
