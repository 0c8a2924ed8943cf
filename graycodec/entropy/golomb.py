"""
Golomb-Rice coding with an embedded sign channel.

Each sample is split into a sign flag and a magnitude. The magnitude is
coded as a unary quotient (q zeros then a one) followed by the remainder
in b = log2(m) binary digits:

    [sign] [0 ... 0 1] [r_(b-1) ... r_0]

The divisor m is always a power of two, so the remainder field has a
fixed width and never needs the truncated-binary long form.
"""

import logging
from typing import List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

from ..constants import DEFAULT_MAX_QUOTIENT
from ..errors import EmptyInputError, MalformedBitstreamError
from ..io.bitstream import (
    BitstreamWriter, BitstreamReader, pack_bits, write_block, read_block,
)

logger = logging.getLogger(__name__)


class GolombParameters(NamedTuple):
    """Divisor m (a power of two) and its exponent b, m == 2 ** b."""
    m: int
    b: int

    @classmethod
    def from_m(cls, m: int) -> 'GolombParameters':
        m = int(m)
        if m < 1 or m & (m - 1):
            raise ValueError(f"Golomb m must be a power of two >= 1, got {m}")
        return cls(m, m.bit_length() - 1)


class SignedMagnitude(NamedTuple):
    """A signed sample split for coding; sign is True for negative values."""
    sign: bool
    magnitude: int


def select_parameters(magnitudes: Sequence[int],
                      max_m: Optional[int] = None) -> GolombParameters:
    """
    Choose m from the mean magnitude of a sample.

    m is the smallest power of two with m >= mean / 2, capped at the
    largest power of two not above max_m. This is a cheap heuristic, not
    the exact Golomb-optimal divisor.

    Raises:
        EmptyInputError: If magnitudes is empty
    """
    magnitudes = [int(v) for v in magnitudes]
    if not magnitudes:
        raise EmptyInputError("Cannot select Golomb parameters for an empty sample")

    mean = sum(magnitudes) / len(magnitudes)
    m = 1
    while m < mean / 2 and (max_m is None or m * 2 <= max_m):
        m *= 2

    params = GolombParameters.from_m(m)
    logger.debug("Golomb parameters: mean=%.3f -> m=%d, b=%d", mean, params.m, params.b)
    return params


def to_signed_magnitudes(values: Sequence[int]) -> List[SignedMagnitude]:
    """Split signed integers into (sign, magnitude) pairs."""
    return [SignedMagnitude(v < 0, abs(v)) for v in (int(x) for x in values)]


def from_signed_magnitudes(samples: Sequence[SignedMagnitude]) -> List[int]:
    """Inverse of to_signed_magnitudes; a signed zero decodes to 0."""
    return [-s.magnitude if s.sign else s.magnitude for s in samples]


def _write_magnitude(writer: BitstreamWriter, value: int, params: GolombParameters,
                     max_quotient: Optional[int]) -> None:
    value = int(value)
    if value < 0:
        raise ValueError(f"Magnitude must be non-negative, got {value}")

    q = value >> params.b
    r = value & (params.m - 1)

    if max_quotient is not None and q > max_quotient:
        raise ValueError(f"Quotient {q} for magnitude {value} exceeds limit of {max_quotient}")

    writer.write_unary(q)
    writer.write_bits(r, params.b)


def _read_magnitude(reader: BitstreamReader, params: GolombParameters,
                    max_quotient: Optional[int]) -> int:
    q = reader.read_unary('quotient', limit=max_quotient)
    r = reader.read_bits(params.b, 'remainder')
    return q * params.m + r


def encode_magnitudes(magnitudes: Sequence[int], params: GolombParameters,
                      max_quotient: Optional[int] = DEFAULT_MAX_QUOTIENT) -> List[int]:
    """
    Golomb-Rice encode non-negative integers without a sign bit.

    Returns:
        Bitstream as a list of 0/1
    """
    writer = BitstreamWriter()
    for v in magnitudes:
        _write_magnitude(writer, v, params, max_quotient)
    return writer.bits


def decode_magnitudes(bits: Sequence[int], params: GolombParameters,
                      count: Optional[int] = None,
                      max_quotient: Optional[int] = DEFAULT_MAX_QUOTIENT) -> List[int]:
    """
    Decode a bitstream produced by encode_magnitudes.

    Args:
        bits: Bitstream (list of 0/1)
        params: Golomb parameters used for encoding
        count: Number of values to decode; None decodes until the stream ends
        max_quotient: Reject unary runs longer than this

    Raises:
        MalformedBitstreamError: If a field is cut short
    """
    reader = BitstreamReader(bits)
    values = []
    while (len(values) < count) if count is not None else not reader.at_end():
        values.append(_read_magnitude(reader, params, max_quotient))
    return values


def encode_signed(samples: Sequence[SignedMagnitude], params: GolombParameters,
                  max_quotient: Optional[int] = DEFAULT_MAX_QUOTIENT) -> List[int]:
    """Encode (sign, magnitude) pairs as {sign bit, unary q, b-bit r}."""
    writer = BitstreamWriter()
    for sample in samples:
        writer.write_bit(1 if sample.sign else 0)
        _write_magnitude(writer, sample.magnitude, params, max_quotient)
    return writer.bits


def decode_signed(bits: Sequence[int], params: GolombParameters,
                  count: Optional[int] = None,
                  max_quotient: Optional[int] = DEFAULT_MAX_QUOTIENT) -> List[SignedMagnitude]:
    """Decode a bitstream produced by encode_signed."""
    return _read_signed(BitstreamReader(bits), params, count, max_quotient)


def _read_signed(reader: BitstreamReader, params: GolombParameters,
                 count: Optional[int], max_quotient: Optional[int]) -> List[SignedMagnitude]:
    samples = []
    while (len(samples) < count) if count is not None else not reader.at_end():
        sign = reader.read_bit('sign') == 1
        samples.append(SignedMagnitude(sign, _read_magnitude(reader, params, max_quotient)))
    return samples


class EncodedBlock:
    """Result of signed Golomb encoding: parameters, bits and optional 2-D shape."""

    def __init__(self, parameters: GolombParameters, bits: List[int],
                 shape: Optional[Tuple[int, int]] = None):
        self.parameters = parameters
        self.bits = bits
        self.shape = tuple(shape) if shape is not None else None

    @property
    def m(self) -> int:
        return self.parameters.m

    @property
    def bit_count(self) -> int:
        return len(self.bits)

    def packed(self) -> bytes:
        """Payload packed MSB-first with zero padding."""
        return pack_bits(self.bits)

    def to_bytes(self, use_prediction: bool = False) -> bytes:
        """Serialize as header + packed payload + CRC32."""
        return write_block(self.parameters.m, self.bits, self.shape, use_prediction)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'EncodedBlock':
        header, bits = read_block(data)
        return cls(GolombParameters.from_m(header['m']), bits, header['shape'])

    def decode(self, max_quotient: Optional[int] = DEFAULT_MAX_QUOTIENT):
        return golomb_decode(self, max_quotient=max_quotient)

    def __repr__(self) -> str:
        return (f"EncodedBlock(m={self.parameters.m}, bits={self.bit_count}, "
                f"shape={self.shape})")


def golomb_encode(values: Union[Sequence[int], np.ndarray],
                  params: Optional[GolombParameters] = None,
                  max_quotient: Optional[int] = DEFAULT_MAX_QUOTIENT,
                  max_m: Optional[int] = None) -> EncodedBlock:
    """
    Encode signed integers (flat sequence or 2-D array).

    Args:
        values: Signed samples; a 2-D array keeps its shape in the block
        params: Golomb parameters; selected from the mean magnitude if None
        max_quotient: Reject magnitudes whose quotient exceeds this
        max_m: Upper bound for an automatically selected m

    Returns:
        EncodedBlock
    """
    arr = np.asarray(values)
    if arr.ndim > 2:
        raise ValueError(f"Expected 1D or 2D input, got {arr.ndim}D")
    shape = arr.shape if arr.ndim == 2 else None

    samples = to_signed_magnitudes(arr.ravel().tolist())
    if params is None:
        params = select_parameters([s.magnitude for s in samples], max_m)

    bits = encode_signed(samples, params, max_quotient)
    logger.debug("Golomb encoded %d samples into %d bits (m=%d)",
                 len(samples), len(bits), params.m)
    return EncodedBlock(params, bits, shape)


def golomb_decode(block: EncodedBlock,
                  max_quotient: Optional[int] = DEFAULT_MAX_QUOTIENT):
    """
    Decode an EncodedBlock.

    Returns:
        int32 array of block.shape (row-major) if the block has a shape,
        otherwise a list of ints

    Raises:
        MalformedBitstreamError: If a field is cut short, or bits remain
            after the rows * cols samples of a shaped block
    """
    count = None
    if block.shape is not None:
        count = block.shape[0] * block.shape[1]

    reader = BitstreamReader(block.bits)
    samples = _read_signed(reader, block.parameters, count, max_quotient)
    if not reader.at_end():
        raise MalformedBitstreamError(
            reader.pos, 'payload', reader.pos, block.bit_count,
            f"{reader.bits_remaining()} unused bits after {count} samples at bit "
            f"offset {reader.pos} (byte {reader.pos // 8}): shape {block.shape} "
            f"accounts for {reader.pos} of {block.bit_count} bits")
    values = from_signed_magnitudes(samples)

    if block.shape is not None:
        return np.array(values, dtype=np.int32).reshape(block.shape)
    return values
