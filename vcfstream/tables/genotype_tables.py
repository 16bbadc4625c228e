"""Genotype matrix assembly.

Stacks the per-line arrays from ``VCFReader.iter_genotypes`` into
``(n_sites, 2 * n_samples)`` haplotype and ``(n_sites, 3 * n_samples)``
probability matrices, and reshapes them into long-form DataFrames keyed by
sample name.
"""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..config import GENO_PROBS_PER_SAMPLE, HAPLOTYPES_PER_SAMPLE
from ..io import VCFReader
from .site_tables import record_to_row, rows_to_frame

__all__ = ["genotype_matrices", "haplotype_long_table", "geno_prob_long_table"]


def _stack(arrays: List[np.ndarray], width: int, dtype) -> np.ndarray:
    if not arrays:
        return np.empty((0, width), dtype=dtype)
    return np.vstack(arrays)


def genotype_matrices(
    reader: VCFReader,
    haplotypes: bool = True,
    geno_probs: bool = True,
    limit: Optional[int] = None,
) -> Tuple[pd.DataFrame, Optional[np.ndarray], Optional[np.ndarray]]:
    """Decode the remaining records of ``reader`` into a site table and matrices.

    Returns (sites_df, haps, probs); a matrix is None when not requested.
    """
    n = reader.n_samples
    rows = []
    hap_rows: List[np.ndarray] = []
    prob_rows: List[np.ndarray] = []
    for i, (rec, haps, probs) in enumerate(reader.iter_genotypes(haplotypes=haplotypes, geno_probs=geno_probs)):
        rows.append(record_to_row(rec))
        if haps is not None:
            hap_rows.append(haps)
        if probs is not None:
            prob_rows.append(probs)
        if limit and i + 1 >= limit:
            break
    sites = rows_to_frame(rows)
    hap_mat = _stack(hap_rows, n * HAPLOTYPES_PER_SAMPLE, np.int8) if haplotypes else None
    prob_mat = _stack(prob_rows, n * GENO_PROBS_PER_SAMPLE, np.float32) if geno_probs else None
    return sites, hap_mat, prob_mat


def _long_index(sites: pd.DataFrame, samples: Sequence[str]) -> pd.DataFrame:
    n_sites, n_samples = len(sites), len(samples)
    return pd.DataFrame({
        "Chrom": np.repeat(sites["Chrom"].to_numpy(), n_samples),
        "Pos": np.repeat(sites["Pos"].to_numpy(), n_samples),
        "Sample": np.tile(np.asarray(samples, dtype=object), n_sites),
    })


def haplotype_long_table(sites: pd.DataFrame, haps: np.ndarray, samples: Sequence[str]) -> pd.DataFrame:
    """Return long-form table with one row per site and sample.

    Columns: Chrom, Pos, Sample, Hap1, Hap2 (-1 = missing)
    """
    if haps.shape != (len(sites), len(samples) * HAPLOTYPES_PER_SAMPLE):
        raise ValueError(f"haplotype matrix shape {haps.shape} does not match {len(sites)} sites x {len(samples)} samples")
    df = _long_index(sites, samples)
    pairs = haps.reshape(-1, HAPLOTYPES_PER_SAMPLE)
    df["Hap1"] = pairs[:, 0]
    df["Hap2"] = pairs[:, 1]
    return df


def geno_prob_long_table(sites: pd.DataFrame, probs: np.ndarray, samples: Sequence[str]) -> pd.DataFrame:
    """Return long-form table with one row per site and sample.

    Columns: Chrom, Pos, Sample, P_HomRef, P_Het, P_HomAlt
    """
    if probs.shape != (len(sites), len(samples) * GENO_PROBS_PER_SAMPLE):
        raise ValueError(f"probability matrix shape {probs.shape} does not match {len(sites)} sites x {len(samples)} samples")
    df = _long_index(sites, samples)
    triplets = probs.reshape(-1, GENO_PROBS_PER_SAMPLE)
    df["P_HomRef"] = triplets[:, 0]
    df["P_Het"] = triplets[:, 1]
    df["P_HomAlt"] = triplets[:, 2]
    return df
