import gzip

import pytest

from vcfstream import VCFReader

HEADER = [
    "##fileformat=VCFv4.1",
    "##FORMAT=<ID=GT,Number=1,Type=String,Description=\"Genotype\">",
    "##FORMAT=<ID=GL,Number=G,Type=Float,Description=\"Genotype likelihoods\">",
    "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tS1\tS2",
]

RECORDS = [
    "1\t100\trs1\tA\tG\t50\tPASS\tDP=10\tGT:GL\t0|1:-1.0,-0.1,-2.0\t1|1:-3.0,-1.0,0.0",
    "1\t200\trs2\tC\tT\t.\tPASS\t.\tGT:GL\t0/0:.\t2/3:-0.5,-0.5,-0.5",
    "2\t300\t.\tG\tA\t99\tq10\tAF=0.5\tGT\t0|0\t1|0",
]


def vcf_lines(records=RECORDS, header=HEADER):
    return [line + "\n" for line in list(header) + list(records)]


@pytest.fixture
def lines():
    return vcf_lines()


@pytest.fixture
def reader(lines):
    return VCFReader(lines)


@pytest.fixture
def vcf_path(tmp_path):
    path = tmp_path / "calls.vcf"
    path.write_text("".join(vcf_lines(RECORDS[:2])))
    return path


@pytest.fixture
def vcf_gz_path(tmp_path):
    # no .gz suffix: compression is detected from the magic bytes
    path = tmp_path / "calls.bin"
    with gzip.open(path, "wt") as fh:
        fh.write("".join(vcf_lines(RECORDS[:2])))
    return path
