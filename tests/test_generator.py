"""
Admin generator tests.
Covers: new_with_random_ivs, generate_license, check_info, to_dict/from_dict
"""
import pytest

from errors import InvalidSeedLengthError
from generator import IV_MAX_LENGTH, IV_MIN_LENGTH, AdminGenerator
from key_derivation import compute_checksum, derive_chunk
from models import LicenseStructParameters

SEED = bytes([5, 100, 42, 69, 3, 90])


def test_random_ivs_match_layout(params):
    generator = AdminGenerator.new_with_random_ivs(params)
    assert len(generator.ivs) == params.payload_length
    for iv in generator.ivs:
        assert IV_MIN_LENGTH <= len(iv) < IV_MAX_LENGTH


def test_random_ivs_differ_between_generators(params):
    a = AdminGenerator.new_with_random_ivs(params)
    b = AdminGenerator.new_with_random_ivs(params)
    assert a.ivs != b.ivs


def test_generated_license_shape(license, params):
    assert license.seed == SEED
    assert len(license.payload) == params.payload_length
    assert all(len(chunk) == params.chunk_size for chunk in license.payload)
    assert len(license.checksum) == 2


def test_generated_license_is_internally_consistent(generator, license):
    for iv, chunk in zip(generator.ivs, license.payload):
        assert chunk == derive_chunk(iv, SEED, 2)
    assert license.checksum == compute_checksum(license.seed, license.payload)


def test_generation_is_deterministic(generator):
    """Reissuing a lost key for the same customer yields the same license."""
    assert generator.generate_license(SEED) == generator.generate_license(SEED)


@pytest.mark.parametrize("seed", [b"", b"\x01" * 5, b"\x01" * 7])
def test_generate_rejects_wrong_seed_length(generator, seed):
    with pytest.raises(InvalidSeedLengthError) as exc:
        generator.generate_license(seed)
    assert exc.value.expected == 6
    assert exc.value.actual == len(seed)


def test_constructor_rejects_wrong_iv_count(params):
    with pytest.raises(ValueError):
        AdminGenerator(params, [b"0123456789"] * 3)


def test_constructor_rejects_empty_iv(params):
    with pytest.raises(ValueError):
        AdminGenerator(params, [b""] + [b"0123456789"] * 9)


def test_check_info_is_a_copy_of_one_iv(generator):
    info = generator.check_info(3)
    assert info.iv_index == 3
    assert info.known_iv == generator.ivs[3]


@pytest.mark.parametrize("index", [-1, 10])
def test_check_info_rejects_out_of_range(generator, index):
    with pytest.raises(IndexError):
        generator.check_info(index)


def test_dict_export_restores_same_licenses(generator):
    restored = AdminGenerator.from_dict(generator.to_dict())
    assert restored.parameters == generator.parameters
    assert restored.ivs == generator.ivs
    assert restored.generate_license(SEED) == generator.generate_license(SEED)


def test_repr_hides_ivs(generator):
    text = repr(generator)
    assert "hidden" in text
    for iv in generator.ivs:
        assert repr(iv) not in text


def test_parameters_reject_chunk_larger_than_digest():
    with pytest.raises(ValueError):
        LicenseStructParameters(chunk_size=33)


@pytest.mark.parametrize("field", ["seed_length", "payload_length", "chunk_size"])
def test_parameters_must_be_positive(field):
    with pytest.raises(ValueError):
        LicenseStructParameters(**{field: 0})
