# designz_loader/utils/template.py

import io
import zipfile
from typing import List

from openpyxl import Workbook
from openpyxl.worksheet.datavalidation import DataValidation

from designz_loader.schemas.catalog import CategoryNode
from designz_loader.schemas.validation import REQUIRED_EXTENSIONS
from designz_loader.utils.archive import METADATA_FILENAME

SAMPLE_FOLDERS = ["Design_001", "Design_002", "Design_003"]

# Parenthesized text is stripped by the validator when it reads the header
TEMPLATE_HEADERS = [
    "folder_name (must match a folder in the zip)",
    "title",
    "description",
    "category (pick from list)",
    "subcategory (pick after category)",
    "tags (comma separated)",
]

CATEGORY_COLUMN = "D"
SUBCATEGORY_COLUMN = "E"


def _sample_rows(categories: List[CategoryNode]) -> List[List[str]]:
    category = categories[0].name if categories else ""
    subcategory = categories[0].subcategories[0].name if categories and categories[0].subcategories else ""
    return [
        [
            folder,
            f"Sample Design {idx}",
            f"Short description of sample design {idx}",
            category,
            subcategory,
            "sample, design, template",
        ]
        for idx, folder in enumerate(SAMPLE_FOLDERS, start=1)
    ]


def build_metadata_workbook(categories: List[CategoryNode], dropdown_rows: int) -> bytes:
    wb = Workbook()
    sheet = wb.active
    sheet.title = "Metadata"
    sheet.append(TEMPLATE_HEADERS)
    for row in _sample_rows(categories):
        sheet.append(row)

    cat_sheet = wb.create_sheet("Categories")
    cat_sheet.append(["category"])
    for category in categories:
        cat_sheet.append([category.name])
    cat_sheet.sheet_state = "hidden"

    sub_sheet = wb.create_sheet("Subcategories")
    sub_sheet.append(["category", "subcategory"])
    for category in categories:
        for sub in category.subcategories:
            sub_sheet.append([category.name, sub.name])
    sub_sheet.sheet_state = "hidden"

    last_row = dropdown_rows + 1
    if categories:
        category_dv = DataValidation(
            type="list",
            formula1=f"Categories!$A$2:$A${len(categories) + 1}",
            allow_blank=True,
        )
        category_dv.add(f"{CATEGORY_COLUMN}2:{CATEGORY_COLUMN}{last_row}")
        sheet.add_data_validation(category_dv)

    if any(category.subcategories for category in categories):
        # Subcategories are grouped by category, so each row's list is the
        # contiguous block matching its own category cell.
        for r in range(2, last_row + 1):
            cell = f"${CATEGORY_COLUMN}{r}"
            sub_dv = DataValidation(
                type="list",
                formula1=(
                    f"OFFSET(Subcategories!$B$1,MATCH({cell},Subcategories!$A:$A,0)-1,0,"
                    f"COUNTIF(Subcategories!$A:$A,{cell}),1)"
                ),
                allow_blank=True,
            )
            sub_dv.add(f"{SUBCATEGORY_COLUMN}{r}")
            sheet.add_data_validation(sub_dv)

    for column, width in zip("ABCDEF", (44, 24, 40, 26, 32, 30)):
        sheet.column_dimensions[column].width = width

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def build_template_zip(categories: List[CategoryNode], dropdown_rows: int = 500) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, mode="w", compression=zipfile.ZIP_DEFLATED) as archive:
        for idx, folder in enumerate(SAMPLE_FOLDERS):
            for ext in REQUIRED_EXTENSIONS:
                archive.writestr(f"{folder}/design{ext}", b"")
            if idx == 0:
                archive.writestr(f"{folder}/mockup.jpg", b"")
        archive.writestr(METADATA_FILENAME, build_metadata_workbook(categories, dropdown_rows))
    return buffer.getvalue()
