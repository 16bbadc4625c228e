"""Streaming VCF decoder.

Reads the header once (validating the fixed ``#CHROM`` columns and deriving
the sample count), then decodes one data line at a time into a
``VariantRecord``. Per-sample genotypes are only parsed when the caller
supplies output arrays, so site-only passes cost nothing beyond the nine
fixed columns.

Input may be a path to a plain or gzip-compressed VCF, or any iterable of
text lines (handy for tests and for piping from other tools).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple, Union

import numpy as np

from ..config import (
	COLUMNS_PREFIX,
	DEFAULT_CONFIG,
	FIXED_COLUMNS,
	FORMAT_DELIMITER,
	GENO_PROBS_PER_SAMPLE,
	GTYPE_MISSING,
	HAPLOTYPES_PER_SAMPLE,
	META_PREFIX,
	N_FIXED_COLUMNS,
	DecoderConfig,
)
from ..core.genotypes import GenotypeDecoder
from ..exceptions import HeaderError, MalformedLineError, VCFDecodeError
from ..utils import FieldCursor, bounded_copy, open_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariantHeader:
	"""What the decoder retains from a VCF header.

	Attributes
	----------
	fixed_columns : tuple of str
		The nine fixed column names, in order.
	n_header_lines : int
		Lines consumed before the first record (``##`` lines plus ``#CHROM``).
	n_samples : int
		Number of sample columns following FORMAT.
	sample_names : tuple of str
		Sample identifiers from the ``#CHROM`` line.
	source : str | None
		Path the header was read from, if any.
	"""

	fixed_columns: Tuple[str, ...]
	n_header_lines: int
	n_samples: int
	sample_names: Tuple[str, ...] = ()
	source: Optional[str] = None


@dataclass
class VariantRecord:
	"""Fixed columns of a single data line.

	``ref_len`` / ``alt_len`` hold the length of the allele in the source
	line; ``ref`` / ``alt`` may be shorter if the allele exceeded the
	configured capacity. QUAL, FILTER and INFO are kept as raw text.
	"""

	chrom: str
	pos: int
	id: str
	ref: str
	ref_len: int
	alt: str
	alt_len: int
	qual: str
	filter: str
	info: str
	format: str

	@property
	def ref_truncated(self) -> bool:
		return len(self.ref) != self.ref_len

	@property
	def alt_truncated(self) -> bool:
		return len(self.alt) != self.alt_len

	@property
	def format_keys(self) -> List[str]:
		return self.format.split(FORMAT_DELIMITER) if self.format else []


def new_haplotype_buffer(header: VariantHeader) -> np.ndarray:
	"""Allocate a haplotype array sized for ``header`` (filled with MISSING)."""
	return np.full(header.n_samples * HAPLOTYPES_PER_SAMPLE, GTYPE_MISSING, dtype=np.int8)


def new_geno_prob_buffer(header: VariantHeader) -> np.ndarray:
	"""Allocate a genotype-probability array sized for ``header``."""
	return np.zeros(header.n_samples * GENO_PROBS_PER_SAMPLE, dtype=np.float32)


# -- header -------------------------------------------------------------------
def read_header(lines: Iterable[str], source: Optional[str] = None,
				config: DecoderConfig = DEFAULT_CONFIG) -> Tuple[VariantHeader, Iterator[str]]:
	"""Consume the header block and return ``(header, remaining_lines)``.

	``##`` lines are counted; the ``#CHROM`` line ends the header. Column names
	are checked by position only: a mismatch is logged and decoding carries on.
	Running out of lines first, or meeting any other kind of line, raises
	``HeaderError``.
	"""
	it = iter(lines)
	n_header_lines = 0
	for raw in it:
		line = raw.rstrip("\r\n")
		if line.startswith(META_PREFIX):
			n_header_lines += 1
			continue
		if not line.startswith(COLUMNS_PREFIX):
			raise HeaderError("expected last line in header to start with #CHROM",
							  line_number=n_header_lines + 1)
		n_header_lines += 1
		tokens = list(FieldCursor(line, config.delimiters))
		if len(tokens) < N_FIXED_COLUMNS:
			raise HeaderError(
				f"#CHROM line has {len(tokens)} columns, expected at least {N_FIXED_COLUMNS}",
				line_number=n_header_lines,
			)
		for i, (expected, tok) in enumerate(zip(FIXED_COLUMNS, tokens)):
			if tok != expected:
				logger.warning("expected token %d to be %s but got '%s'", i, expected, tok)
		samples = tuple(tokens[N_FIXED_COLUMNS:])
		header = VariantHeader(
			fixed_columns=FIXED_COLUMNS,
			n_header_lines=n_header_lines,
			n_samples=len(samples),
			sample_names=samples,
			source=source,
		)
		return header, it
	raise HeaderError("could not read header information from file: no #CHROM line before end of stream",
					  line_number=n_header_lines)


# -- records ------------------------------------------------------------------
def _next_fixed(cur: FieldCursor, index: int) -> str:
	tok = cur.next_token()
	if tok is None:
		raise MalformedLineError(
			f"expected at least {N_FIXED_COLUMNS} tokens per line, missing {FIXED_COLUMNS[index]} column",
			field=FIXED_COLUMNS[index],
		)
	return tok


def _copy_allele(tok: str, capacity: int) -> Tuple[str, int]:
	stored = bounded_copy(tok, capacity)
	if len(stored) != len(tok):
		logger.warning("truncating long allele (%d bp) to %d bp", len(tok), len(stored))
	return stored, len(tok)


def decode_line(
	line: str,
	header: VariantHeader,
	geno_probs: Optional[np.ndarray] = None,
	haplotypes: Optional[np.ndarray] = None,
	decoder: Optional[GenotypeDecoder] = None,
	config: DecoderConfig = DEFAULT_CONFIG,
) -> VariantRecord:
	"""Decode one data line.

	Parameters
	----------
	line : str
		Raw data line (a trailing newline is ignored).
	header : VariantHeader
		Header of the stream the line belongs to.
	geno_probs : numpy.ndarray | None
		If given, filled with ``3 * n_samples`` genotype probabilities (GL).
	haplotypes : numpy.ndarray | None
		If given, filled with ``2 * n_samples`` allele calls (GT).
	decoder : GenotypeDecoder | None
		Holds per-stream state; pass the same instance for every line of a
		stream so the unphased notice is only logged once.
	"""
	cur = FieldCursor(line.rstrip("\r\n"), config.delimiters)

	chrom = bounded_copy(_next_fixed(cur, 0), config.max_chrom_len)
	pos_tok = _next_fixed(cur, 1)
	try:
		pos = int(pos_tok)
	except ValueError:
		raise MalformedLineError(f"POS '{pos_tok}' is not an integer", field=FIXED_COLUMNS[1]) from None
	var_id = bounded_copy(_next_fixed(cur, 2), config.max_id_len)
	ref, ref_len = _copy_allele(_next_fixed(cur, 3), config.max_allele_len)
	alt, alt_len = _copy_allele(_next_fixed(cur, 4), config.max_allele_len)
	qual = bounded_copy(_next_fixed(cur, 5), config.max_qual_len)
	flt = bounded_copy(_next_fixed(cur, 6), config.max_filter_len)
	info = bounded_copy(_next_fixed(cur, 7), config.max_info_len)
	fmt = bounded_copy(_next_fixed(cur, 8), config.max_format_len)

	record = VariantRecord(chrom, pos, var_id, ref, ref_len, alt, alt_len, qual, flt, info, fmt)

	if geno_probs is None and haplotypes is None:
		return record
	if decoder is None:
		decoder = GenotypeDecoder()
	if geno_probs is not None and haplotypes is not None:
		# both decoders need the full sample tail; give GL its own cursor
		decoder.parse_geno_probs(header.n_samples, fmt, cur.fork(), geno_probs)
		decoder.parse_haplotypes(header.n_samples, fmt, cur, haplotypes)
	elif geno_probs is not None:
		decoder.parse_geno_probs(header.n_samples, fmt, cur, geno_probs)
	else:
		decoder.parse_haplotypes(header.n_samples, fmt, cur, haplotypes)
	return record


# -- stream -------------------------------------------------------------------
class VCFReader:
	"""Streaming VCF reader.

	Parameters
	----------
	source : str | os.PathLike | Iterable[str]
		Path to (optionally gzipped) VCF file, or an iterable of lines.
	config : DecoderConfig | None
		Field capacities and delimiters.
	max_records : int | None
		Optional limit for testing / faster prototyping.

	The header is decoded on construction, so a stream without a valid
	header fails immediately with ``HeaderError``.
	"""

	def __init__(self, source: Union[str, os.PathLike, Iterable[str]],
				 config: Optional[DecoderConfig] = None, max_records: Optional[int] = None):
		self.config = config or DEFAULT_CONFIG
		self.max_records = max_records
		self.decoder = GenotypeDecoder()
		self.n_records = 0
		self._fh = None
		if isinstance(source, (str, os.PathLike)):
			self.path: Optional[str] = os.fspath(source)
			self._fh = open_text(self.path)
			lines: Iterable[str] = self._fh
		else:
			self.path = None
			lines = source
		try:
			self.header, self._lines = read_header(lines, source=self.path, config=self.config)
		except Exception:
			self.close()
			raise
		self._line_number = self.header.n_header_lines

	@property
	def samples(self) -> List[str]:
		return list(self.header.sample_names)

	@property
	def n_samples(self) -> int:
		return self.header.n_samples

	def read_line(self, geno_probs: Optional[np.ndarray] = None,
				  haplotypes: Optional[np.ndarray] = None) -> Optional[VariantRecord]:
		"""Decode the next data line; returns None at end of stream."""
		if self.max_records is not None and self.n_records >= self.max_records:
			return None
		line = next(self._lines, None)
		if line is None:
			return None
		self._line_number += 1
		try:
			record = decode_line(line, self.header, geno_probs=geno_probs, haplotypes=haplotypes,
								 decoder=self.decoder, config=self.config)
		except VCFDecodeError as err:
			if err.line_number is None:
				err.line_number = self._line_number
			raise
		self.n_records += 1
		return record

	def iter_records(self) -> Iterator[VariantRecord]:
		"""Yield fixed columns only; sample columns are not parsed."""
		while True:
			record = self.read_line()
			if record is None:
				return
			yield record

	def iter_genotypes(self, haplotypes: bool = True, geno_probs: bool = True
					   ) -> Iterator[Tuple[VariantRecord, Optional[np.ndarray], Optional[np.ndarray]]]:
		"""Yield ``(record, haplotypes, geno_probs)`` with fresh arrays per line.

		Arrays not requested are None.
		"""
		while True:
			haps = new_haplotype_buffer(self.header) if haplotypes else None
			probs = new_geno_prob_buffer(self.header) if geno_probs else None
			record = self.read_line(geno_probs=probs, haplotypes=haps)
			if record is None:
				return
			yield record, haps, probs

	def __iter__(self) -> Iterator[VariantRecord]:
		return self.iter_records()

	def close(self) -> None:
		if self._fh is not None:
			self._fh.close()
			self._fh = None

	def __enter__(self) -> "VCFReader":
		return self

	def __exit__(self, *exc) -> None:
		self.close()
