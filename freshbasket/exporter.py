"""
Export module.
Writes a customized basket (lines + price breakdown) to a formatted Excel
workbook, either on disk or in memory, and product lists to CSV.
"""
import os
import re
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, Iterable, List, Tuple, Union

import pandas as pd
from openpyxl import load_workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from freshbasket.handoff import CheckoutHandoff
from freshbasket.models import Product
from freshbasket.pricing.rounding import to_display

BASKET_SHEET = "Basket"
SUMMARY_SHEET = "Summary"


def generate_excel_bytes(handoff: CheckoutHandoff) -> Tuple[BytesIO, str]:
    """
    Build the workbook in memory.
    Returns: (excel_stream, suggested_filename)
    """
    file_name = _generate_filename(handoff)
    output = BytesIO()

    _write_excel_data(handoff, output)
    output.seek(0)

    return output, file_name


def export_to_excel(handoff: CheckoutHandoff, path: str = "output.xlsx") -> str:
    """Write the workbook to disk; a directory path gets a generated file name."""
    if path == "output.xlsx" or path.endswith("/") or path.endswith("\\"):
        file_name = _generate_filename(handoff)
        if path.endswith("/") or path.endswith("\\"):
            path = os.path.join(path, file_name)
        else:
            path = file_name

    _write_excel_data(handoff, path)
    return path


def export_products_to_csv(products: Iterable[Product]) -> bytes:
    """Product list as UTF-8 CSV, using the storefront's field names."""
    rows = [
        {
            "_id": p.product_id,
            "name": p.name,
            "price": str(to_display(p.price)),
            "category": p.category,
            "unit": p.unit,
            "description": p.description,
            "image": p.image,
            "isAvailable": p.is_available,
            "countInStock": p.count_in_stock,
        }
        for p in products
    ]
    df = pd.DataFrame(rows, columns=[
        "_id", "name", "price", "category", "unit", "description", "image", "isAvailable", "countInStock",
    ])
    return df.to_csv(index=False).encode("utf-8")


def basket_rows(handoff: CheckoutHandoff) -> List[Dict[str, Any]]:
    return [
        {
            "Product": item.name,
            "Category": item.product.category,
            "Unit": item.product.unit,
            "Unit price": float(to_display(item.price)),
            "Quantity": item.quantity,
            "Line total": float(to_display(item.line_total)),
        }
        for item in handoff.basket
    ]


def summary_rows(handoff: CheckoutHandoff) -> List[Dict[str, Any]]:
    def money(amount):
        return float(to_display(amount)) if amount is not None else None

    return [
        {"Field": "Package", "Value": handoff.package.name},
        {"Field": "Items total value", "Value": money(handoff.items_total_value)},
        {"Field": "Package base price", "Value": money(handoff.package_base_price)},
        {"Field": "Package value price", "Value": money(handoff.package_value_price)},
        {"Field": "Price adjustment", "Value": money(handoff.price_adjustment)},
        {"Field": "Final price", "Value": money(handoff.final_price)},
    ]


# ==========================================
# Internal helpers
# ==========================================

def _generate_filename(handoff: CheckoutHandoff) -> str:
    """File name from the package name plus a timestamp."""
    file_name = handoff.package.name.strip() or "basket"

    # strip characters not allowed in file names
    safe_filename = re.sub(r'[\\/:*?"<>|]', '_', file_name)
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')

    return f"{safe_filename}_{timestamp}.xlsx"


def _write_excel_data(handoff: CheckoutHandoff, target: Union[str, BytesIO]):
    """Write both sheets, then format them."""
    with pd.ExcelWriter(target, engine="openpyxl") as writer:
        pd.DataFrame(basket_rows(handoff)).to_excel(writer, index=False, sheet_name=BASKET_SHEET)
        pd.DataFrame(summary_rows(handoff)).to_excel(writer, index=False, sheet_name=SUMMARY_SHEET)

    if isinstance(target, BytesIO):
        target.seek(0)
    _format_excel(target)


def _format_excel(target: Union[str, BytesIO]):
    """Header colors, borders, column widths, frozen header row."""
    wb = load_workbook(target)

    header_fill = PatternFill(start_color="228B22", end_color="228B22", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF", size=11)
    border = Border(
        left=Side(style='thin'), right=Side(style='thin'),
        top=Side(style='thin'), bottom=Side(style='thin')
    )
    center_align = Alignment(horizontal="center", vertical="center", wrap_text=True)
    left_align = Alignment(horizontal="left", vertical="center", wrap_text=True)

    for ws in wb.worksheets:
        for cell in ws[1]:
            cell.fill = header_fill
            cell.font = header_font
            cell.alignment = center_align
            cell.border = border

        for row in ws.iter_rows(min_row=2, max_row=ws.max_row):
            for cell in row:
                cell.border = border
                cell.alignment = left_align

        for column in ws.columns:
            column_letter = column[0].column_letter
            max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
            ws.column_dimensions[column_letter].width = min(max_length + 2, 50)

        ws.freeze_panes = "A2"

    if isinstance(target, BytesIO):
        target.seek(0)
        target.truncate()
    wb.save(target)
