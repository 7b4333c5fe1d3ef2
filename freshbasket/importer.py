"""
Product import module.
Parses an uploaded product sheet (CSV or Excel) into Product records.
Supports header-row auto-detection and column-name mapping.
"""
import logging
from io import BytesIO
from typing import Any, Dict, List, Optional

import pandas as pd

from freshbasket.catalog import normalize_product
from freshbasket.models import Product

logger = logging.getLogger(__name__)

# Column name mapping (target field -> accepted sheet headers)
COLUMN_MAPPING = {
    "_id": ["_id", "id", "product_id", "productid", "sku"],
    "name": ["name", "product", "product name", "product_name", "title"],
    "price": ["price", "unit price", "price (ghs)", "cost"],
    "category": ["category", "type"],
    "unit": ["unit", "uom", "unit of measure"],
    "description": ["description", "details"],
    "image": ["image", "image url", "image_url", "photo"],
    "isAvailable": ["isavailable", "available", "availability", "in stock"],
    "countInStock": ["countinstock", "stock", "quantity", "count"],
}

TRUE_WORDS = {"true", "yes", "y", "1", "available"}
FALSE_WORDS = {"false", "no", "n", "0", "unavailable"}


def parse_file_to_products(file_content: bytes, filename: str = "") -> List[Product]:
    """
    Parse a product sheet into Product objects.
    CSV is chosen by extension, anything else is read as Excel.
    The header row does not have to be the first row.
    """
    try:
        df_raw = _read_sheet(file_content, filename)
    except Exception as e:
        logger.warning("Could not read product sheet %s: %s", filename or "<upload>", e)
        return []

    if df_raw.empty:
        return []

    # 1. Find the header row
    header_row_index = _detect_header_row(df_raw)
    if header_row_index is None:
        header_row_index = 0

    df = df_raw.iloc[header_row_index + 1:].copy()
    df.columns = df_raw.iloc[header_row_index].astype(str).tolist()
    df.reset_index(drop=True, inplace=True)

    # 2. Map columns
    col_map = _build_column_map(df.columns)

    # A product sheet needs at least a name or a price column
    if "name" not in col_map and "price" not in col_map:
        return []

    # 3. Rows -> products
    products: List[Product] = []
    seen = set()
    for index, row in df.iterrows():
        raw = {key: _clean(row.get(column)) for key, column in col_map.items()}
        if raw.get("name") is None and raw.get("price") is None:
            continue

        raw["_id"] = str(raw.get("_id") or f"TEMP_PROD_{index}")
        raw["isAvailable"] = _parse_bool(raw.get("isAvailable"))

        if raw["_id"] in seen:
            logger.warning("Duplicate product id %s in sheet, keeping the first row", raw["_id"])
            continue
        seen.add(raw["_id"])

        products.append(normalize_product(raw))

    return products


def _read_sheet(file_content: bytes, filename: str) -> pd.DataFrame:
    if filename.lower().endswith(".csv"):
        return pd.read_csv(BytesIO(file_content), header=None, dtype=str)
    return pd.read_excel(BytesIO(file_content), header=None)


def _detect_header_row(df: pd.DataFrame, max_scan_rows: int = 20) -> Optional[int]:
    """
    Find the header row.
    Returns the row index, or None when no row looks like a header.
    """
    keywords = set()
    for keys in COLUMN_MAPPING.values():
        for k in keys:
            keywords.add(k.lower())

    best_row_idx = None
    max_matches = 0

    scan_limit = min(len(df), max_scan_rows)
    for i in range(scan_limit):
        row_values = [str(v).lower().strip() for v in df.iloc[i] if pd.notna(v)]
        matches = sum(1 for v in row_values if v in keywords)

        if matches > max_matches:
            max_matches = matches
            best_row_idx = i

    # At least two recognized headers (e.g. "name" and "price")
    if max_matches >= 2:
        return best_row_idx

    return None


def _build_column_map(columns: List[str]) -> Dict[str, str]:
    """
    Match sheet headers against COLUMN_MAPPING.
    Returns: { "internal_key": "Actual Column Name" }
    """
    result = {}
    cols_lower = {str(c).lower().strip(): c for c in columns}

    for key, candidates in COLUMN_MAPPING.items():
        for cand in candidates:
            if cand in cols_lower:
                result[key] = cols_lower[cand]
                break
    return result


def _clean(val: Any) -> Any:
    """NaN / blank cells -> None, strings stripped."""
    if val is None or (not isinstance(val, str) and pd.isna(val)):
        return None
    if isinstance(val, str):
        val = val.strip()
        return val or None
    return val


def _parse_bool(val: Any) -> Optional[bool]:
    if val is None:
        return None
    if isinstance(val, bool):
        return val
    text = str(val).strip().lower()
    if text in FALSE_WORDS:
        return False
    if text in TRUE_WORDS:
        return True
    return None
