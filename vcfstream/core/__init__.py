"""Core decoding logic for per-sample genotype data."""

from .genotypes import GenotypeDecoder, likelihoods_to_probs, parse_gl, parse_gt, validate_buffer  # noqa: F401

__all__ = ["GenotypeDecoder", "parse_gt", "parse_gl", "likelihoods_to_probs", "validate_buffer"]
