"""Configuration constants and settings for the vcfstream decoder.

Field capacities mirror the bounded buffers of the classic C readers: text
longer than the capacity is cut to fit. Only REF/ALT report the cut (see
``VariantRecord.ref_len``); the other fields are bounded silently.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

FIXED_COLUMNS: Tuple[str, ...] = (
    "#CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO", "FORMAT",
)
N_FIXED_COLUMNS = len(FIXED_COLUMNS)

META_PREFIX = "##"
COLUMNS_PREFIX = "#CHROM"

FIELD_DELIMITERS = " \t"
FORMAT_DELIMITER = ":"
GL_DELIMITER = ","

GT_TAG = "GT"
GL_TAG = "GL"

# Allele value used for uncalled / unsupported genotypes.
GTYPE_MISSING = -1
GL_MISSING_MARKER = "."
# log10(1/3): uniform prior substituted for a '.' likelihood field.
MISSING_GL = math.log10(1.0 / 3.0)

HAPLOTYPES_PER_SAMPLE = 2
GENO_PROBS_PER_SAMPLE = 3

DEFAULT_MAX_CHROM_LEN = 1024
DEFAULT_MAX_ID_LEN = 1024
DEFAULT_MAX_ALLELE_LEN = 1024
DEFAULT_MAX_QUAL_LEN = 1024
DEFAULT_MAX_FILTER_LEN = 1024
DEFAULT_MAX_INFO_LEN = 65536
DEFAULT_MAX_FORMAT_LEN = 1024


@dataclass(frozen=True)
class DecoderConfig:
    """Per-stream decoding settings.

    Attributes
    ----------
    max_*_len : int
        Capacity (in characters) of each stored fixed field.
    delimiters : str
        Characters separating columns of a data line.
    """

    max_chrom_len: int = DEFAULT_MAX_CHROM_LEN
    max_id_len: int = DEFAULT_MAX_ID_LEN
    max_allele_len: int = DEFAULT_MAX_ALLELE_LEN
    max_qual_len: int = DEFAULT_MAX_QUAL_LEN
    max_filter_len: int = DEFAULT_MAX_FILTER_LEN
    max_info_len: int = DEFAULT_MAX_INFO_LEN
    max_format_len: int = DEFAULT_MAX_FORMAT_LEN
    delimiters: str = FIELD_DELIMITERS

    def __post_init__(self) -> None:
        for name in ("max_chrom_len", "max_id_len", "max_allele_len", "max_qual_len",
                     "max_filter_len", "max_info_len", "max_format_len"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")
        if not self.delimiters:
            raise ValueError("delimiters must not be empty")


DEFAULT_CONFIG = DecoderConfig()


__all__ = [
    "FIXED_COLUMNS",
    "N_FIXED_COLUMNS",
    "META_PREFIX",
    "COLUMNS_PREFIX",
    "FIELD_DELIMITERS",
    "FORMAT_DELIMITER",
    "GL_DELIMITER",
    "GT_TAG",
    "GL_TAG",
    "GTYPE_MISSING",
    "GL_MISSING_MARKER",
    "MISSING_GL",
    "HAPLOTYPES_PER_SAMPLE",
    "GENO_PROBS_PER_SAMPLE",
    "DecoderConfig",
    "DEFAULT_CONFIG",
]
