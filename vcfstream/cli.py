"""Command line interface for vcfstream.

Current subcommands:
	header   – report sample count and header size
	sites    – decode fixed columns of every record to a TSV table
	matrices – decode GT haplotypes and GL probabilities to .npy matrices

Example:
	python -m vcfstream.cli matrices --vcf input.vcf.gz --out outdir --max-site 5000
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import numpy as np

from .config import DEFAULT_MAX_ALLELE_LEN, DecoderConfig
from .exceptions import VCFDecodeError
from .io import VCFReader
from .tables import genotype_matrices, site_table

logger = logging.getLogger("vcfstream")


def setup_logging(level: str = "INFO") -> None:
	logging.basicConfig(
		level=getattr(logging, level.upper(), logging.INFO),
		format="[%(asctime)s] [%(levelname)s] %(message)s",
		datefmt="%H:%M:%S",
	)


def _open_reader(args: argparse.Namespace) -> VCFReader:
	config = DecoderConfig(max_allele_len=args.max_allele_len)
	return VCFReader(args.vcf, config=config, max_records=args.max_site)


def cmd_header(args: argparse.Namespace) -> int:
	with _open_reader(args) as reader:
		header = reader.header
	print(f"Samples: {header.n_samples}")
	print(f"Header lines: {header.n_header_lines}")
	if header.sample_names:
		print("Sample names: " + ", ".join(header.sample_names))
	return 0


def cmd_sites(args: argparse.Namespace) -> int:
	outdir = Path(args.out)
	outdir.mkdir(parents=True, exist_ok=True)

	with _open_reader(args) as reader:
		site_df = site_table(reader)
	site_df.to_csv(outdir / 'sites.tsv', sep='\t', index=False)
	print(f"{len(site_df):,} sites written to {outdir / 'sites.tsv'}")
	return 0


def cmd_matrices(args: argparse.Namespace) -> int:
	outdir = Path(args.out)
	outdir.mkdir(parents=True, exist_ok=True)

	want_haps = not args.no_haplotypes
	want_probs = not args.no_geno_probs
	with _open_reader(args) as reader:
		samples = reader.samples
		sites, haps, probs = genotype_matrices(reader, haplotypes=want_haps, geno_probs=want_probs)

	sites.to_csv(outdir / 'sites.tsv', sep='\t', index=False)
	(outdir / 'samples.txt').write_text("".join(s + "\n" for s in samples))
	if haps is not None:
		np.save(outdir / 'haplotypes.npy', haps)
		print(f"Haplotype matrix {haps.shape[0]:,} x {haps.shape[1]:,} saved to: {outdir / 'haplotypes.npy'}")
	if probs is not None:
		np.save(outdir / 'geno_probs.npy', probs)
		print(f"Genotype probability matrix {probs.shape[0]:,} x {probs.shape[1]:,} saved to: {outdir / 'geno_probs.npy'}")
	print(f"Matrices for {len(sites):,} sites and {len(samples):,} samples written to {outdir}")
	return 0


def _add_common(sp: argparse.ArgumentParser) -> None:
	sp.add_argument("--vcf", required=True, help="Input VCF or VCF.GZ file")
	sp.add_argument("--max-site", type=int, default=None, help="Limit number of variant sites parsed (debug)")
	sp.add_argument("--max-allele-len", type=int, default=DEFAULT_MAX_ALLELE_LEN,
					help=f"Truncate REF/ALT alleles longer than this (default: {DEFAULT_MAX_ALLELE_LEN})")


def build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="vcfstream", description="Streaming VCF genotype decoder")
	p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
				   help="Logging verbosity (default: INFO)")
	sub = p.add_subparsers(dest="command")

	sp = sub.add_parser("header", help="Report sample count and header size")
	_add_common(sp)
	sp.set_defaults(func=cmd_header)

	sp2 = sub.add_parser("sites", help="Decode fixed columns to sites.tsv")
	_add_common(sp2)
	sp2.add_argument("--out", required=True, help="Output directory")
	sp2.set_defaults(func=cmd_sites)

	sp3 = sub.add_parser("matrices", help="Decode GT / GL into haplotype and probability matrices")
	_add_common(sp3)
	sp3.add_argument("--out", required=True, help="Output directory")
	sp3.add_argument("--no-haplotypes", action="store_true", help="Skip GT decoding (haplotypes.npy)")
	sp3.add_argument("--no-geno-probs", action="store_true", help="Skip GL decoding (geno_probs.npy)")
	sp3.set_defaults(func=cmd_matrices)
	return p


def main(argv=None):
	parser = build_parser()
	args = parser.parse_args(argv)
	if not hasattr(args, 'func'):
		parser.print_help()
		return 1
	setup_logging(args.log_level)
	try:
		return args.func(args)
	except VCFDecodeError as err:
		logger.error("%s: %s", args.vcf, err)
		return 1


if __name__ == "__main__":  # pragma: no cover
	raise SystemExit(main())
