"""Table / matrix assembly subpackage."""

from .genotype_tables import genotype_matrices, geno_prob_long_table, haplotype_long_table  # noqa: F401
from .site_tables import site_table  # noqa: F401

__all__ = ["site_table", "genotype_matrices", "haplotype_long_table", "geno_prob_long_table"]
