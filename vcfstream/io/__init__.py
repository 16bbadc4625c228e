"""I/O subpackage.

Exposes the streaming VCF reader and the header / line decoders it is
built from.
"""

from .vcf_reader import (  # noqa: F401
	VCFReader,
	VariantHeader,
	VariantRecord,
	decode_line,
	new_geno_prob_buffer,
	new_haplotype_buffer,
	read_header,
)

__all__ = [
	"VCFReader",
	"VariantHeader",
	"VariantRecord",
	"decode_line",
	"read_header",
	"new_haplotype_buffer",
	"new_geno_prob_buffer",
]
