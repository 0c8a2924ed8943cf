"""Checkpoint 3: Golomb-Rice Codec Verification."""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pytest
from graycodec.errors import EmptyInputError, MalformedBitstreamError
from graycodec.io import pack_bits, unpack_bits
from graycodec.entropy import (
    GolombParameters, SignedMagnitude, EncodedBlock,
    select_parameters, to_signed_magnitudes, from_signed_magnitudes,
    encode_magnitudes, decode_magnitudes, encode_signed, decode_signed,
    golomb_encode, golomb_decode,
)


def test_known_bit_patterns():
    """Test reference byte sequences for m = 8."""
    print("=" * 60)
    print("Test 1: Known Bit Patterns")
    print("=" * 60)

    params = GolombParameters.from_m(8)
    assert params == (8, 3)

    # 21 = 2 * 8 + 5 -> unary 001, remainder 101
    bits = encode_magnitudes([21, 21, 21, 21], params)
    assert bits == [0, 0, 1, 1, 0, 1] * 4
    assert pack_bits(bits) == bytes([0b00110100, 0b11010011, 0b01001101])
    print("   ✓ [21, 21, 21, 21] -> 34 D3 4D")

    bits = encode_magnitudes([21], params)
    assert pack_bits(bits) == bytes([0b00110100])
    print("   ✓ [21] -> 34 (padded)")

    # Signed form prefixes each sample with its sign bit
    bits = encode_signed([SignedMagnitude(True, 21)], params)
    assert bits == [1, 0, 0, 1, 1, 0, 1]
    print("   ✓ -21 -> 1 001 101")

    # m = 1 has no remainder field
    assert encode_magnitudes([0, 3], GolombParameters.from_m(1)) == [1, 0, 0, 0, 1]
    print("   ✓ m = 1 is pure unary")


def test_parameter_selection():
    """Test m selection from the mean magnitude."""
    print("\n" + "=" * 60)
    print("Test 2: Parameter Selection")
    print("=" * 60)

    cases = [
        ([0, 0, 0], 1),
        ([1, 2, 3], 1),        # mean 2 -> m >= 1
        ([21, 21, 21, 21], 16),  # mean 21 -> m >= 10.5
        ([10] * 5, 8),          # mean 10 -> m >= 5
        ([255] * 3, 128),       # mean 255 -> m >= 127.5
    ]
    for magnitudes, expected in cases:
        params = select_parameters(magnitudes)
        assert params.m == expected, f"{magnitudes}: got m={params.m}"
        assert 2 ** params.b == params.m
        print(f"   ✓ mean={sum(magnitudes) / len(magnitudes):.1f} -> m={params.m}, b={params.b}")

    with pytest.raises(EmptyInputError):
        select_parameters([])
    print("   ✓ Empty sample rejected")

    # Mean 510 would want m = 256
    assert select_parameters([510] * 4).m == 256
    assert select_parameters([510] * 4, max_m=128).m == 128
    assert select_parameters([510] * 4, max_m=200).m == 128
    assert select_parameters([3] * 4, max_m=128).m == 2
    print("   ✓ max_m caps the selected divisor")

    for bad in (0, 3, 12, -4):
        with pytest.raises(ValueError):
            GolombParameters.from_m(bad)
    print("   ✓ Non power-of-two m rejected")


def test_roundtrip():
    """Test encode/decode roundtrip for every 8-bit m."""
    print("\n" + "=" * 60)
    print("Test 3: Roundtrip")
    print("=" * 60)

    np.random.seed(42)
    magnitudes = np.random.randint(0, 256, 500).tolist()

    for b in range(8):
        params = GolombParameters.from_m(1 << b)
        bits = encode_magnitudes(magnitudes, params)
        assert decode_magnitudes(bits, params) == magnitudes
        print(f"   ✓ m={params.m:>3}: {len(bits):>7} bits")

    values = np.random.randint(-255, 256, 500).tolist()
    samples = to_signed_magnitudes(values)
    assert from_signed_magnitudes(samples) == values
    params = select_parameters([s.magnitude for s in samples])
    decoded = decode_signed(encode_signed(samples, params), params)
    assert from_signed_magnitudes(decoded) == values
    print(f"   ✓ Signed samples (m={params.m})")

    assert decode_magnitudes([], params) == []
    print("   ✓ Empty stream decodes to nothing")


def test_packed_roundtrip():
    """Test decoding after byte packing."""
    print("\n" + "=" * 60)
    print("Test 4: Packed Roundtrip")
    print("=" * 60)

    params = GolombParameters.from_m(8)
    bits = encode_magnitudes([21], params)
    padded = unpack_bits(pack_bits(bits), 8)

    # With the sample count known, trailing padding is ignored
    assert decode_magnitudes(padded, params, count=1) == [21]
    print("   ✓ count= skips padding")

    # Without it, the two padding zeros look like an unterminated quotient
    with pytest.raises(MalformedBitstreamError) as excinfo:
        decode_magnitudes(padded, params)
    assert excinfo.value.field == 'quotient'
    assert excinfo.value.offset == 6
    print(f"   ✓ Padding without count: {excinfo.value}")

    assert decode_magnitudes(unpack_bits(pack_bits(bits), len(bits)), params) == [21]
    print("   ✓ Exact bit count decodes cleanly")


def test_malformed_streams():
    """Test truncated and corrupted bitstreams."""
    print("\n" + "=" * 60)
    print("Test 5: Malformed Streams")
    print("=" * 60)

    params = GolombParameters.from_m(8)

    with pytest.raises(MalformedBitstreamError) as excinfo:
        decode_magnitudes([0, 0, 1, 1], params)
    err = excinfo.value
    assert (err.field, err.offset, err.expected, err.available) == ('remainder', 3, 3, 1)
    print(f"   ✓ Truncated remainder: {err}")

    with pytest.raises(MalformedBitstreamError) as excinfo:
        decode_magnitudes([0, 0, 0], params)
    assert excinfo.value.field == 'quotient'
    print(f"   ✓ Missing terminator: {excinfo.value}")

    with pytest.raises(MalformedBitstreamError) as excinfo:
        decode_signed([0, 0, 1, 1, 0, 1], params, count=2)
    assert excinfo.value.field == 'sign'
    assert excinfo.value.offset == 6
    print(f"   ✓ Missing sample: {excinfo.value}")

    with pytest.raises(MalformedBitstreamError):
        decode_magnitudes([0] * 50 + [1, 0, 0, 0], params, max_quotient=10)
    print("   ✓ Quotient cap on decode")

    with pytest.raises(ValueError):
        encode_magnitudes([1000], params, max_quotient=10)
    with pytest.raises(ValueError):
        encode_magnitudes([-1], params)
    print("   ✓ Encoder rejects capped and negative magnitudes")


def test_encoded_block():
    """Test EncodedBlock with and without shape."""
    print("\n" + "=" * 60)
    print("Test 6: Encoded Block")
    print("=" * 60)

    np.random.seed(7)
    residual = np.random.randint(-60, 61, (16, 20)).astype(np.int32)

    block = golomb_encode(residual)
    assert block.shape == (16, 20)
    assert block.bit_count == len(block.bits)
    assert len(block.packed()) == (block.bit_count + 7) // 8
    decoded = golomb_decode(block)
    assert decoded.shape == (16, 20)
    assert np.array_equal(decoded, residual)
    print(f"   ✓ 2-D block: {block}")

    restored = EncodedBlock.from_bytes(block.to_bytes())
    assert restored.parameters == block.parameters
    assert restored.shape == block.shape
    assert np.array_equal(restored.decode(), residual)
    print("   ✓ Serialized block roundtrip")

    flat = golomb_encode([5, -3, 0, 12], GolombParameters.from_m(4))
    assert flat.shape is None
    assert golomb_decode(flat) == [5, -3, 0, 12]
    print("   ✓ Flat block decodes to a list")

    with pytest.raises(EmptyInputError):
        golomb_encode([])
    print("   ✓ Empty input without parameters rejected")

    # Payload longer than rows * cols samples
    six = golomb_encode([1, 2, 3, 4, 5, 6])
    four = golomb_encode([1, 2, 3, 4], six.parameters)
    oversized = EncodedBlock(six.parameters, six.bits, (2, 2))
    with pytest.raises(MalformedBitstreamError) as excinfo:
        golomb_decode(oversized)
    err = excinfo.value
    assert err.field == 'payload'
    assert err.offset == four.bit_count
    assert err.available == six.bit_count
    print(f"   ✓ Unused trailing bits rejected: {err}")

    assert golomb_decode(EncodedBlock(six.parameters, six.bits, (2, 3))).tolist() == [[1, 2, 3], [4, 5, 6]]
    assert golomb_decode(EncodedBlock(six.parameters, six.bits)) == [1, 2, 3, 4, 5, 6]
    print("   ✓ Matching shape and flat block decode cleanly")


def main():
    """Run all Checkpoint 3 tests."""
    print("\n" + "=" * 60)
    print("CHECKPOINT 3: GOLOMB-RICE CODEC VERIFICATION")
    print("=" * 60 + "\n")

    tests = [
        ("Known Bit Patterns", test_known_bit_patterns),
        ("Parameter Selection", test_parameter_selection),
        ("Roundtrip", test_roundtrip),
        ("Packed Roundtrip", test_packed_roundtrip),
        ("Malformed Streams", test_malformed_streams),
        ("Encoded Block", test_encoded_block),
    ]

    results = []
    for name, test in tests:
        try:
            test()
            results.append((name, True))
        except AssertionError as e:
            print(f"❌ {name} failed: {e}")
            results.append((name, False))

    # Summary
    print("\n" + "=" * 60)
    print("CHECKPOINT 3 SUMMARY")
    print("=" * 60)

    all_passed = True
    for name, passed in results:
        status = "✅ PASS" if passed else "❌ FAIL"
        print(f"   {name}: {status}")
        if not passed:
            all_passed = False

    print("\n" + "=" * 60)
    if all_passed:
        print("🎉 CHECKPOINT 3 PASSED - All tests successful!")
    else:
        print("⚠️  CHECKPOINT 3 FAILED - Some tests did not pass")
    print("=" * 60 + "\n")

    return 0 if all_passed else 1


if __name__ == "__main__":
    sys.exit(main())
