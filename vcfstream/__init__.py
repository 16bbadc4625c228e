"""vcfstream – A streaming decoder for VCF genotype data.

Subpackages:
	io      – header / record decoding and the streaming reader
	core    – per-sample GT (haplotype) and GL (probability) decoders
	tables  – DataFrame / matrix assembly on top of the reader

Typical use::

	from vcfstream import VCFReader, new_haplotype_buffer

	with VCFReader("calls.vcf.gz") as reader:
		haps = new_haplotype_buffer(reader.header)
		while reader.read_line(haplotypes=haps) is not None:
			...
"""

from .config import DEFAULT_CONFIG, GTYPE_MISSING, DecoderConfig  # noqa: F401
from .exceptions import (  # noqa: F401
	BufferSizeError,
	HeaderError,
	LikelihoodParseError,
	MalformedLineError,
	MissingFormatTagError,
	SampleCountError,
	VCFDecodeError,
)
from .io import (  # noqa: F401
	VCFReader,
	VariantHeader,
	VariantRecord,
	decode_line,
	new_geno_prob_buffer,
	new_haplotype_buffer,
	read_header,
)
from .core import GenotypeDecoder  # noqa: F401

__version__ = "0.1.0"
__all__ = [
	"VCFReader",
	"VariantHeader",
	"VariantRecord",
	"GenotypeDecoder",
	"DecoderConfig",
	"DEFAULT_CONFIG",
	"GTYPE_MISSING",
	"decode_line",
	"read_header",
	"new_haplotype_buffer",
	"new_geno_prob_buffer",
	"VCFDecodeError",
	"HeaderError",
	"MalformedLineError",
	"MissingFormatTagError",
	"SampleCountError",
	"LikelihoodParseError",
	"BufferSizeError",
	"__version__",
]
