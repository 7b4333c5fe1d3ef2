from decimal import Decimal
from io import BytesIO

import pandas as pd
from openpyxl import load_workbook

from freshbasket.basket import BasketSession
from freshbasket.exporter import export_to_excel, generate_excel_bytes
from freshbasket.handoff import build_handoff
from freshbasket.service import ExportService, ImportService

CSV_SHEET = b"""Product catalogue,,,,,
exported 2024-05-01,,,,,
_id,Name,Price,Unit,Stock,Available
a1,Kale,3.50,bunch,20,yes
a2,Tomatoes,12,kg,,no
,Garden eggs,4,,5,
,,,,,
"""


def test_import_csv_with_header_detection():
    products = ImportService().import_products(CSV_SHEET, "products.csv")

    assert [p.name for p in products] == ["Kale", "Tomatoes", "Garden eggs"]
    kale, tomatoes, eggs = products
    assert kale.product_id == "a1"
    assert kale.price == Decimal("3.50")
    assert kale.unit == "bunch"
    assert kale.count_in_stock == 20
    assert tomatoes.is_available is False
    assert tomatoes.count_in_stock == 999
    assert eggs.product_id.startswith("TEMP_PROD_")
    assert eggs.unit == "unit"
    assert eggs.is_available is True


def test_import_excel():
    buf = BytesIO()
    pd.DataFrame([
        {"id": "b1", "name": "Yam", "price": 15.0, "category": "tubers"},
        {"id": "b2", "name": "Plantain", "price": 8.0, "category": "fruit"},
    ]).to_excel(buf, index=False)

    products = ImportService().import_products(buf.getvalue(), "products.xlsx")

    assert [p.product_id for p in products] == ["b1", "b2"]
    assert products[0].category == "tubers"
    assert products[1].price == Decimal("8.0")


def test_import_unreadable_file_returns_empty():
    assert ImportService().import_products(b"\x00\x01garbage", "products.xlsx") == []


def test_import_sheet_without_product_columns_returns_empty():
    assert ImportService().import_products(b"foo,bar\n1,2\n", "other.csv") == []


def test_export_products_csv_roundtrips_through_import():
    products = ImportService().import_products(CSV_SHEET, "products.csv")
    data = ExportService().export_products(products)

    df = pd.read_csv(BytesIO(data), dtype=str)
    assert list(df.columns)[:3] == ["_id", "name", "price"]
    assert df.loc[0, "price"] == "3.50"

    again = ImportService().import_products(data, "again.csv")
    assert [p.product_id for p in again] == [p.product_id for p in products]


def test_generate_excel_bytes(package):
    session = BasketSession.start(package)
    session.adjust_quantity("p1", 1)
    handoff = build_handoff(session)

    stream, file_name = generate_excel_bytes(handoff)

    assert file_name.startswith("Family Veg Box_")
    assert file_name.endswith(".xlsx")
    wb = load_workbook(stream)
    assert wb.sheetnames == ["Basket", "Summary"]

    basket = wb["Basket"]
    assert [c.value for c in basket[1]] == ["Product", "Category", "Unit", "Unit price", "Quantity", "Line total"]
    assert basket["E2"].value == 3
    assert basket["F2"].value == 30
    assert basket.freeze_panes == "A2"

    summary = {row[0]: row[1] for row in wb["Summary"].iter_rows(min_row=2, values_only=True)}
    assert summary["Items total value"] == 50
    assert summary["Price adjustment"] == 10
    assert summary["Final price"] == 60


def test_export_to_excel_directory_path(package, tmp_path):
    handoff = build_handoff(BasketSession.start(package))
    path = export_to_excel(handoff, str(tmp_path) + "/")
    assert path.startswith(str(tmp_path))
    assert load_workbook(path)["Summary"]["B2"].value == "Family Veg Box"


def test_export_to_excel_explicit_path(package, tmp_path):
    target = tmp_path / "basket.xlsx"
    handoff = build_handoff(BasketSession.start(package))
    assert ExportService().export_basket(handoff, str(target)) == str(target)
    assert target.exists()
