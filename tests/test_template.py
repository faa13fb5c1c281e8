from __future__ import annotations

import io
import zipfile

from openpyxl import load_workbook

from designz_loader.schemas.catalog import CategoryNode, SubcategoryRef
from designz_loader.utils.parser import normalize_header, parse_xlsx
from designz_loader.utils.template import build_metadata_workbook, build_template_zip
from designz_loader.utils.validator import validate_archive


def _categories() -> list[CategoryNode]:
    return [
        CategoryNode(id=1, name="Logos", subcategories=[
            SubcategoryRef(id=10, name="Minimal"),
            SubcategoryRef(id=11, name="Mascot"),
        ]),
        CategoryNode(id=2, name="Jerseys", subcategories=[SubcategoryRef(id=20, name="Cricket")]),
        CategoryNode(id=3, name="Icons"),
    ]


def test_template_zip_layout() -> None:
    data = build_template_zip(_categories(), dropdown_rows=10)

    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        names = set(archive.namelist())

    for folder in ("Design_001", "Design_002", "Design_003"):
        for ext in (".eps", ".cdr", ".jpg", ".png"):
            assert f"{folder}/design{ext}" in names
    assert "Design_001/mockup.jpg" in names
    assert "Design_002/mockup.jpg" not in names
    assert "metadata.xlsx" in names


def test_template_passes_validation() -> None:
    data = build_template_zip(_categories(), dropdown_rows=10)

    result = validate_archive(data, minimum_designs=3)

    assert result.valid is True
    assert result.design_count == 3


def test_template_without_catalog_still_validates() -> None:
    result = validate_archive(build_template_zip([], dropdown_rows=5), minimum_designs=3)

    assert result.valid is True


def test_workbook_sheets_and_sample_rows() -> None:
    wb = load_workbook(io.BytesIO(build_metadata_workbook(_categories(), dropdown_rows=10)))

    assert wb.sheetnames == ["Metadata", "Categories", "Subcategories"]
    assert wb["Metadata"].sheet_state == "visible"
    assert wb["Categories"].sheet_state == "hidden"
    assert wb["Subcategories"].sheet_state == "hidden"

    categories = [row[0] for row in wb["Categories"].iter_rows(min_row=2, values_only=True)]
    assert categories == ["Logos", "Jerseys", "Icons"]
    pairs = list(wb["Subcategories"].iter_rows(min_row=2, values_only=True))
    assert pairs == [("Logos", "Minimal"), ("Logos", "Mascot"), ("Jerseys", "Cricket")]

    rows = parse_xlsx(build_metadata_workbook(_categories(), dropdown_rows=10))
    assert [normalize_header(cell) for cell in rows[0]] == [
        "folder_name", "title", "description", "category", "subcategory", "tags",
    ]
    assert [row[0] for row in rows[1:]] == ["Design_001", "Design_002", "Design_003"]
    assert rows[1][3:5] == ["Logos", "Minimal"]


def test_dropdown_validations() -> None:
    wb = load_workbook(io.BytesIO(build_metadata_workbook(_categories(), dropdown_rows=10)))
    validations = wb["Metadata"].data_validations.dataValidation

    category_dv = [dv for dv in validations if "Categories!" in dv.formula1]
    sub_dvs = [dv for dv in validations if dv.formula1.startswith("OFFSET(")]

    assert len(category_dv) == 1
    assert category_dv[0].formula1 == "Categories!$A$2:$A$4"
    assert str(category_dv[0].sqref) == "D2:D11"

    assert len(sub_dvs) == 10
    first = sub_dvs[0]
    assert str(first.sqref) == "E2"
    assert "MATCH($D2,Subcategories!$A:$A,0)" in first.formula1
    assert "COUNTIF(Subcategories!$A:$A,$D2)" in first.formula1


def test_no_dropdowns_without_catalog() -> None:
    wb = load_workbook(io.BytesIO(build_metadata_workbook([], dropdown_rows=10)))

    assert wb["Metadata"].data_validations.dataValidation == []
