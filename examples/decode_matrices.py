"""Decode GT / GL from a VCF into numpy matrices and print a short summary.

Usage:
	python examples/decode_matrices.py input.vcf.gz
"""

import sys

import numpy as np

from vcfstream import VCFReader
from vcfstream.tables import genotype_matrices, haplotype_long_table

if __name__ == "__main__":
	with VCFReader(sys.argv[1], max_records=1000) as reader:
		samples = reader.samples
		sites, haps, probs = genotype_matrices(reader)
	print(f"{len(sites):,} sites x {len(samples):,} samples")
	print(f"Missing haplotype calls: {np.mean(haps == -1):.2%}")
	print(haplotype_long_table(sites, haps, samples).head(10).to_string(index=False))
