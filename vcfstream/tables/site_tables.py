"""Site-level table assembly.

Converts the generator from ``VCFReader.iter_records`` into a DataFrame of
fixed columns.
"""
from __future__ import annotations

from typing import Dict, List, Optional

import pandas as pd

from ..io import VCFReader, VariantRecord

__all__ = ["SITE_COLUMNS", "record_to_row", "site_table"]

SITE_COLUMNS = ["Chrom", "Pos", "ID", "Ref", "Alt", "RefLen", "AltLen", "QUAL", "FILTER", "INFO", "FORMAT"]


def record_to_row(rec: VariantRecord) -> Dict[str, object]:
    """Flatten a record into a dict keyed by ``SITE_COLUMNS``."""
    return {
        "Chrom": rec.chrom,
        "Pos": rec.pos,
        "ID": rec.id,
        "Ref": rec.ref,
        "Alt": rec.alt,
        "RefLen": rec.ref_len,
        "AltLen": rec.alt_len,
        "QUAL": rec.qual,
        "FILTER": rec.filter,
        "INFO": rec.info,
        "FORMAT": rec.format,
    }


def rows_to_frame(rows: List[Dict[str, object]]) -> pd.DataFrame:
    df = pd.DataFrame(rows, columns=SITE_COLUMNS)
    # QUAL is free text in the record ('.' for missing); numeric here for convenience
    df["QUAL"] = pd.to_numeric(df["QUAL"], errors="coerce")
    for col in ["Pos", "RefLen", "AltLen"]:
        df[col] = df[col].astype("int64")
    return df


def site_table(reader: VCFReader, limit: Optional[int] = None) -> pd.DataFrame:
    """Return DataFrame with columns: Chrom, Pos, ID, Ref, Alt, RefLen, AltLen, QUAL, FILTER, INFO, FORMAT."""
    rows = []
    for i, rec in enumerate(reader.iter_records()):
        rows.append(record_to_row(rec))
        if limit and i + 1 >= limit:
            break
    return rows_to_frame(rows)
