# designz_loader/utils/archive.py

import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from designz_loader.schemas.validation import REQUIRED_EXTENSIONS

METADATA_FILENAME = "metadata.xlsx"
MOCKUP_FILENAMES = {"mockup.jpg", "mockup.png"}
SYSTEM_NAMES = {"__macosx", ".ds_store", "rar", ".rar", "thumbs.db"}


@dataclass
class DesignFolder:
    name: str
    extensions: set = field(default_factory=set)
    has_mockup: bool = False

    @property
    def missing(self) -> List[str]:
        return [ext for ext in REQUIRED_EXTENSIONS if ext not in self.extensions]

    @property
    def present(self) -> List[str]:
        return [ext for ext in REQUIRED_EXTENSIONS if ext in self.extensions]

    @property
    def is_complete(self) -> bool:
        return not self.missing


@dataclass
class FolderScan:
    folders: Dict[str, DesignFolder] = field(default_factory=dict)
    nested: List[str] = field(default_factory=list)

    @property
    def complete(self) -> List[DesignFolder]:
        return [f for f in self.folders.values() if f.is_complete]

    @property
    def incomplete(self) -> List[DesignFolder]:
        return [f for f in self.folders.values() if not f.is_complete]


def _normalize(name: str) -> str:
    # Some Windows zip tools write backslash separators
    return name.replace("\\", "/")


def find_metadata_entry(names: Iterable[str]) -> Optional[str]:
    for name in names:
        lowered = _normalize(name).lower()
        if lowered == METADATA_FILENAME or lowered.endswith("/" + METADATA_FILENAME):
            return name
    return None


def _is_system(segment: str) -> bool:
    return segment.lower() in SYSTEM_NAMES


def _is_design_file(filename: str) -> bool:
    lowered = filename.lower()
    return lowered in MOCKUP_FILENAMES or os.path.splitext(lowered)[1] in REQUIRED_EXTENSIONS


def scan_design_folders(names: Iterable[str], metadata_name: Optional[str] = None) -> FolderScan:
    """Group archive entries into design folders.

    ``folder/file.ext`` and ``root/folder/file.ext`` are the two accepted
    layouts. Anything deeper that holds a design file is reported in
    ``nested`` instead of being counted. A folder that shows up at both
    depths is merged under one name.
    """
    scan = FolderScan()

    for raw_name in names:
        if raw_name == metadata_name or raw_name.endswith("/"):
            continue
        parts = _normalize(raw_name).split("/")
        filename = parts[-1]
        if not filename or filename.startswith("._") or _is_system(filename):
            continue
        if any(_is_system(part) for part in parts[:-1]):
            continue

        if len(parts) == 2:
            folder_name = parts[0]
        elif len(parts) == 3:
            folder_name = parts[1]
        elif len(parts) > 3:
            if _is_design_file(filename):
                parent = "/".join(parts[:-1])
                if parent not in scan.nested:
                    scan.nested.append(parent)
            continue
        else:
            # loose file at the archive root
            continue

        if not folder_name:
            continue

        folder = scan.folders.setdefault(folder_name, DesignFolder(name=folder_name))
        lowered = filename.lower()
        if lowered in MOCKUP_FILENAMES:
            folder.has_mockup = True
            continue
        ext = os.path.splitext(lowered)[1]
        if ext in REQUIRED_EXTENSIONS:
            folder.extensions.add(ext)

    return scan
