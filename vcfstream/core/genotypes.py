"""Per-sample genotype decoding (GT allele pairs and GL likelihood triplets).

Both decoders walk the sample tail of a data line (one token per sample, each
a ':'-delimited list of subfields ordered by the record's FORMAT column) and
write into caller-owned numpy arrays. They deliberately differ in how they
handle bad input:

	GT	unparseable or non-binary calls degrade to MISSING (-1) with a warning
	GL	unparseable values (other than '.') abort the stream

The "some genotypes are unphased" notice is emitted once per
``GenotypeDecoder`` instance, so independent streams keep independent state.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

import numpy as np

from ..config import (
	GENO_PROBS_PER_SAMPLE,
	GL_MISSING_MARKER,
	GL_TAG,
	GT_TAG,
	GTYPE_MISSING,
	HAPLOTYPES_PER_SAMPLE,
	MISSING_GL,
)
from ..exceptions import (
	BufferSizeError,
	LikelihoodParseError,
	MissingFormatTagError,
	SampleCountError,
)
from ..utils import FieldCursor, get_format_index, get_subfield

logger = logging.getLogger(__name__)

# sscanf-style prefix patterns: leading whitespace allowed before each number,
# trailing text after the last number ignored.
_INT = r"\s*([+-]?\d+)"
_FLOAT = r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))"

PHASED_GT_RE = re.compile(_INT + r"\|" + _INT)
UNPHASED_GT_RE = re.compile(_INT + r"/" + _INT)
GL_RE = re.compile(_FLOAT + "," + _FLOAT + "," + _FLOAT, re.IGNORECASE)

_VALID_ALLELES = (0, 1, GTYPE_MISSING)

__all__ = [
	"GenotypeDecoder",
	"parse_gt",
	"parse_gl",
	"likelihoods_to_probs",
	"validate_buffer",
]


def validate_buffer(arr, expected: int, name: str, kind=np.number) -> np.ndarray:
	"""Check a caller-supplied output array has exactly ``expected`` writeable slots.

	``kind`` is the numpy abstract dtype the array must belong to, so values are
	never cast into a type that cannot hold them (e.g. -1 into uint8).
	"""
	if not isinstance(arr, np.ndarray) or arr.ndim != 1 or arr.shape[0] != expected:
		actual = getattr(arr, "shape", type(arr).__name__)
		raise BufferSizeError(name, expected, actual)
	if not arr.flags.writeable:
		raise BufferSizeError(name, expected, "read-only array")
	if not np.issubdtype(arr.dtype, kind):
		raise BufferSizeError(name, expected, f"dtype {arr.dtype}, expected {kind.__name__}")
	return arr


def parse_gt(value: str) -> Optional[Tuple[int, int, bool]]:
	"""Parse a GT subfield into ``(allele1, allele2, phased)``.

	'|' is tried first, then '/'. Returns None if neither form matches
	(e.g. '.', './.', haploid '0').
	"""
	m = PHASED_GT_RE.match(value)
	if m:
		return int(m.group(1)), int(m.group(2)), True
	m = UNPHASED_GT_RE.match(value)
	if m:
		return int(m.group(1)), int(m.group(2)), False
	return None


def parse_gl(value: str) -> Optional[Tuple[float, float, float]]:
	"""Parse a GL subfield into three log10 likelihoods.

	The missing marker '.' maps to a uniform triplet (log10(1/3) each).
	Returns None for anything else that does not start with three
	comma-separated numbers.
	"""
	m = GL_RE.match(value)
	if m:
		return float(m.group(1)), float(m.group(2)), float(m.group(3))
	if value == GL_MISSING_MARKER:
		return MISSING_GL, MISSING_GL, MISSING_GL
	return None


def likelihoods_to_probs(gl: np.ndarray) -> np.ndarray:
	"""Convert an ``(n, 3)`` array of log10 likelihoods to probabilities.

	Each row is renormalised to sum to 1.0, i.e. the posterior under a
	uniform prior over the three genotype classes. Source likelihoods are
	not guaranteed to be calibrated, so this is applied to every row.

	Each row is shifted by its maximum before exponentiating, so values far
	outside the float64 range (e.g. -330 or 400) still normalise. Rows with
	NaN, +inf or only -inf come out as NaN.
	"""
	gl = np.asarray(gl, dtype=np.float64)
	with np.errstate(over="ignore", invalid="ignore"):
		probs = np.power(10.0, gl - gl.max(axis=1, keepdims=True))
		sums = probs.sum(axis=1, keepdims=True)
		return probs / sums


class GenotypeDecoder:
	"""Decodes the sample tail of data lines for one stream.

	Attributes
	----------
	warned_unphased : bool
		True once the one-shot unphased genotype notice has been logged.
	"""

	def __init__(self) -> None:
		self.warned_unphased = False

	# -- haplotypes -------------------------------------------------------
	def parse_haplotypes(self, n_samples: int, format_spec: str, tail: FieldCursor, out: np.ndarray) -> None:
		"""Fill ``out`` (length 2*n_samples) with allele calls from the GT subfield."""
		gt_idx = get_format_index(format_spec, GT_TAG)
		if gt_idx is None:
			raise MissingFormatTagError(GT_TAG, format_spec)
		expect_haps = n_samples * HAPLOTYPES_PER_SAMPLE
		validate_buffer(out, expect_haps, "haplotypes", np.signedinteger)

		haps: List[int] = []
		for sample_index, token in enumerate(tail):
			gt = get_subfield(token, gt_idx)
			if gt is None:
				# no GT subfield for this sample; surfaces as an undercount
				continue
			parsed = parse_gt(gt)
			if parsed is None:
				logger.warning("could not parse genotype string '%s' (sample %d)", gt, sample_index)
				hap1 = hap2 = GTYPE_MISSING
			else:
				hap1, hap2, phased = parsed
				if not phased and not self.warned_unphased:
					logger.warning("some genotypes are unphased (delimited with '/' instead of '|')")
					self.warned_unphased = True
				if hap1 not in _VALID_ALLELES or hap2 not in _VALID_ALLELES:
					# multi-allelic sites and copy number variants are not supported
					logger.warning(
						"genotype '%s' (sample %d) has alleles other than 0/1, setting to missing",
						gt, sample_index,
					)
					hap1 = hap2 = GTYPE_MISSING
			if len(haps) + HAPLOTYPES_PER_SAMPLE > expect_haps:
				raise SampleCountError(GT_TAG, expect_haps, len(haps) + HAPLOTYPES_PER_SAMPLE)
			haps.append(hap1)
			haps.append(hap2)

		if len(haps) != expect_haps:
			raise SampleCountError(GT_TAG, expect_haps, len(haps))
		out[:] = np.asarray(haps, dtype=np.int8)

	# -- genotype likelihoods ---------------------------------------------
	def parse_geno_probs(self, n_samples: int, format_spec: str, tail: FieldCursor, out: np.ndarray) -> None:
		"""Fill ``out`` (length 3*n_samples) with renormalised GL probabilities."""
		gl_idx = get_format_index(format_spec, GL_TAG)
		if gl_idx is None:
			raise MissingFormatTagError(GL_TAG, format_spec)
		expect_probs = n_samples * GENO_PROBS_PER_SAMPLE
		validate_buffer(out, expect_probs, "geno_probs", np.floating)

		likes: List[Tuple[float, float, float]] = []
		for sample_index, token in enumerate(tail):
			gl = get_subfield(token, gl_idx)
			if gl is None:
				continue
			triplet = parse_gl(gl)
			if triplet is None:
				raise LikelihoodParseError(
					f"failed to parse genotype likelihoods from string '{gl}' (sample {sample_index})",
					sample_index=sample_index, value=gl,
				)
			if (len(likes) + 1) * GENO_PROBS_PER_SAMPLE > expect_probs:
				raise SampleCountError(GL_TAG, expect_probs, (len(likes) + 1) * GENO_PROBS_PER_SAMPLE)
			likes.append(triplet)

		if len(likes) * GENO_PROBS_PER_SAMPLE != expect_probs:
			raise SampleCountError(GL_TAG, expect_probs, len(likes) * GENO_PROBS_PER_SAMPLE)
		if not likes:
			return

		probs = likelihoods_to_probs(np.array(likes, dtype=np.float64))
		bad = ~np.isfinite(probs).all(axis=1)
		if bad.any():
			i = int(np.flatnonzero(bad)[0])
			raise LikelihoodParseError(
				f"genotype likelihoods {likes[i]} (sample {i}) cannot be normalised",
				sample_index=i, value=",".join(str(x) for x in likes[i]),
			)
		out[:] = probs.reshape(-1)
