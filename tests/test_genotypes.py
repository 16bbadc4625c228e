import logging

import numpy as np
import pytest

from vcfstream import BufferSizeError, GTYPE_MISSING, LikelihoodParseError, MissingFormatTagError, SampleCountError
from vcfstream.core.genotypes import GenotypeDecoder, likelihoods_to_probs, parse_gl, parse_gt
from vcfstream.utils import FieldCursor


def decode_haps(tail, n_samples, fmt="GT:GL", decoder=None):
    out = np.full(n_samples * 2, 9, dtype=np.int8)
    (decoder or GenotypeDecoder()).parse_haplotypes(n_samples, fmt, FieldCursor(tail), out)
    return out


def decode_probs(tail, n_samples, fmt="GT:GL", decoder=None):
    out = np.zeros(n_samples * 3, dtype=np.float32)
    (decoder or GenotypeDecoder()).parse_geno_probs(n_samples, fmt, FieldCursor(tail), out)
    return out


def unphased_notices(caplog):
    return [r for r in caplog.records if "unphased" in r.getMessage()]


# -- parsing helpers ---------------------------------------------------------
@pytest.mark.parametrize("value,expected", [
    ("0|1", (0, 1, True)),
    ("1/0", (1, 0, False)),
    ("0|1extra", (0, 1, True)),
    ("-1|0", (-1, 0, True)),
    (".", None),
    ("./.", None),
    ("1", None),
])
def test_parse_gt(value, expected):
    assert parse_gt(value) == expected


def test_parse_gl():
    assert parse_gl("-1.0,-0.1,-2.0") == (-1.0, -0.1, -2.0)
    assert parse_gl("0,1e-3,-.5") == (0.0, 0.001, -0.5)
    assert parse_gl(".") == pytest.approx((-0.4771, -0.4771, -0.4771), abs=1e-4)
    assert parse_gl("-1,-2") is None
    assert parse_gl(".,.,.") is None


def test_likelihoods_to_probs_always_renormalises():
    probs = likelihoods_to_probs(np.array([[0.0, 0.0, 0.0], [-1.0, -0.1, -2.0]]))
    np.testing.assert_allclose(probs.sum(axis=1), 1.0)
    np.testing.assert_allclose(probs[0], [1 / 3] * 3)


# -- haplotypes --------------------------------------------------------------
def test_phased_genotypes():
    out = decode_haps("0|1:-1.0,-0.1,-2.0\t1|0:.", 2)
    assert out.tolist() == [0, 1, 1, 0]


def test_gt_not_first_subfield():
    out = decode_haps("-1,-1,-1:0|1", 1, fmt="GL:GT")
    assert out.tolist() == [0, 1]


def test_non_binary_alleles_become_missing(caplog):
    with caplog.at_level(logging.WARNING):
        out = decode_haps("2/3:.\t0|2\t1|1", 3, fmt="GT")
    assert out.tolist() == [GTYPE_MISSING] * 4 + [1, 1]
    assert any("other than 0/1" in r.getMessage() for r in caplog.records)


def test_unparseable_gt_degrades_to_missing(caplog):
    with caplog.at_level(logging.WARNING):
        out = decode_haps(".\t./.\t0|1", 3, fmt="GT")
    assert out.tolist() == [-1, -1, -1, -1, 0, 1]
    assert sum("could not parse genotype" in r.getMessage() for r in caplog.records) == 2


def test_allele_values_in_domain():
    out = decode_haps("0|1\t5|0\t1/1\t.\t-1|1", 5, fmt="GT")
    assert set(out.tolist()) <= {0, 1, -1}


def test_unphased_notice_logged_once_per_decoder(caplog):
    decoder = GenotypeDecoder()
    with caplog.at_level(logging.WARNING):
        first = decode_haps("0/1\t1/1", 2, fmt="GT", decoder=decoder)
        second = decode_haps("1/0\t0/0", 2, fmt="GT", decoder=decoder)
    assert first.tolist() == [0, 1, 1, 1]
    assert second.tolist() == [1, 0, 0, 0]
    assert len(unphased_notices(caplog)) == 1
    assert decoder.warned_unphased


def test_unphased_notice_state_is_per_decoder(caplog):
    with caplog.at_level(logging.WARNING):
        decode_haps("0/1", 1, fmt="GT", decoder=GenotypeDecoder())
        decode_haps("0/1", 1, fmt="GT", decoder=GenotypeDecoder())
    assert len(unphased_notices(caplog)) == 2


def test_phased_input_never_triggers_unphased_notice(caplog):
    decoder = GenotypeDecoder()
    with caplog.at_level(logging.WARNING):
        decode_haps("0|1\t1|1", 2, fmt="GT", decoder=decoder)
    assert not unphased_notices(caplog)
    assert not decoder.warned_unphased


def test_missing_gt_tag_is_fatal():
    with pytest.raises(MissingFormatTagError) as exc:
        decode_haps("-1,-1,-1", 1, fmt="GL")
    assert exc.value.tag == "GT"


def test_more_genotypes_than_samples_is_fatal():
    with pytest.raises(SampleCountError) as exc:
        decode_haps("0|1\t1|1\t0|0", 2, fmt="GT")
    assert exc.value.expected == 4
    assert exc.value.actual > 4


def test_fewer_genotypes_than_samples_is_fatal():
    with pytest.raises(SampleCountError) as exc:
        decode_haps("0|1", 2, fmt="GT")
    assert (exc.value.expected, exc.value.actual) == (4, 2)


# -- genotype likelihoods ----------------------------------------------------
def test_likelihood_scenario():
    out = decode_probs("0|1:-1.0,-0.1,-2.0", 1)
    raw = np.array([10 ** -1.0, 10 ** -0.1, 10 ** -2.0])
    np.testing.assert_allclose(out, raw / raw.sum(), rtol=1e-6)
    assert out.sum() == pytest.approx(1.0, abs=1e-6)
    assert out[1] > out[0] > out[2]


def test_missing_likelihood_is_uniform():
    out = decode_probs("0|1:.", 1)
    np.testing.assert_allclose(out, [1 / 3] * 3, rtol=1e-6)


def test_probabilities_sum_to_one():
    out = decode_probs("0|0:0,-5,-10\t0|1:.\t1|1:-0.3,-0.3,-0.3\t./.:-20,-0.001,-3", 4)
    triplets = out.reshape(4, 3)
    assert ((triplets >= 0) & (triplets <= 1)).all()
    np.testing.assert_allclose(triplets.sum(axis=1), 1.0, rtol=1e-6)


def test_unparseable_likelihood_is_fatal():
    with pytest.raises(LikelihoodParseError) as exc:
        decode_probs("0|1:.\t0|1:abc", 2)
    assert exc.value.sample_index == 1
    assert exc.value.value == "abc"


def test_degenerate_likelihood_is_fatal():
    with pytest.raises(LikelihoodParseError):
        decode_probs("0|1:-inf,-inf,-inf", 1)


def test_missing_gl_tag_is_fatal():
    with pytest.raises(MissingFormatTagError):
        decode_probs("0|1", 1, fmt="GT")


def test_likelihood_count_mismatch_is_fatal():
    with pytest.raises(SampleCountError) as exc:
        decode_probs("0|1:.\t0|1:.", 1)
    assert exc.value.tag == "GL"
    with pytest.raises(SampleCountError) as exc:
        decode_probs("0|1:.", 2)
    assert (exc.value.expected, exc.value.actual) == (6, 3)


def test_sample_without_gl_subfield_counts_as_missing_field():
    # trailing subfields dropped for the second sample
    with pytest.raises(SampleCountError):
        decode_probs("0|1:.\t0|1", 2)


@pytest.mark.parametrize("gl,expected", [
    ("-330,-340,-350", [1.0, 1e-10, 1e-20]),
    ("400,0,0", [1.0, 0.0, 0.0]),
    ("-400,-400,-400", [1 / 3, 1 / 3, 1 / 3]),
])
def test_extreme_likelihoods_still_normalise(gl, expected):
    out = decode_probs(gl, 1, fmt="GL")
    np.testing.assert_allclose(out, expected, rtol=1e-6, atol=1e-30)
    assert out.sum() == pytest.approx(1.0, abs=1e-6)


def test_nan_likelihood_is_fatal():
    with pytest.raises(LikelihoodParseError):
        decode_probs("nan,0,0", 1, fmt="GL")


def test_unsigned_haplotype_buffer_rejected():
    out = np.zeros(2, dtype=np.uint8)
    with pytest.raises(BufferSizeError):
        GenotypeDecoder().parse_haplotypes(1, "GT", FieldCursor("2/3"), out)
    assert out.tolist() == [0, 0]


def test_integer_probability_buffer_rejected():
    out = np.zeros(3, dtype=np.int64)
    with pytest.raises(BufferSizeError):
        GenotypeDecoder().parse_geno_probs(1, "GL", FieldCursor("."), out)


def test_wider_signed_and_float_buffers_accepted():
    haps = np.zeros(2, dtype=np.int64)
    GenotypeDecoder().parse_haplotypes(1, "GT", FieldCursor("2/3"), haps)
    assert haps.tolist() == [-1, -1]
    probs = np.zeros(3, dtype=np.float64)
    GenotypeDecoder().parse_geno_probs(1, "GL", FieldCursor("."), probs)
    np.testing.assert_allclose(probs, [1 / 3] * 3)
