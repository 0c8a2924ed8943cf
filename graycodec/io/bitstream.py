"""Bitstream reader and writer for bit-level codecs."""

import logging
import struct
import zlib
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ..constants import (
    MAGIC, VERSION, BLOCK_HEADER_FORMAT, BLOCK_HEADER_SIZE,
    FLAG_HAS_SHAPE, FLAG_PREDICTION, CRC_SIZE,
)
from ..errors import MalformedBitstreamError

logger = logging.getLogger(__name__)


def pack_bits(bits: Sequence[int]) -> bytes:
    """
    Pack a sequence of 0/1 values into bytes.

    Bits are grouped MSB-first; a trailing partial group is left-aligned
    and zero-filled.

    Args:
        bits: Sequence of 0/1 values

    Returns:
        Packed bytes (ceil(len(bits) / 8) long)

    Raises:
        ValueError: If any element is not 0 or 1
    """
    arr = np.asarray(bits, dtype=np.int64).ravel()
    if arr.size and ((arr != 0) & (arr != 1)).any():
        bad = int(np.flatnonzero((arr != 0) & (arr != 1))[0])
        raise ValueError(f"Bit at index {bad} is {int(arr[bad])}, expected 0 or 1")
    return np.packbits(arr.astype(np.uint8)).tobytes()


def unpack_bits(data: bytes, bit_count: int) -> List[int]:
    """
    Unpack the first bit_count bits of a packed buffer.

    Padding bits are not self-describing, so the logical length has to be
    supplied by the caller.

    Raises:
        MalformedBitstreamError: If the buffer holds fewer than bit_count bits
    """
    available = len(data) * 8
    if bit_count < 0:
        raise ValueError(f"bit_count must be non-negative, got {bit_count}")
    if bit_count > available:
        raise MalformedBitstreamError(0, 'payload', bit_count, available)
    raw = np.frombuffer(bytes(data), dtype=np.uint8)
    return np.unpackbits(raw, count=bit_count).tolist()


class BitstreamWriter:
    """Bit-level writer accumulating an in-memory bitstream."""

    def __init__(self):
        self._bits: List[int] = []

    def __len__(self) -> int:
        return len(self._bits)

    def write_bit(self, bit: int) -> None:
        """Write a single bit."""
        self._bits.append(bit & 1)

    def write_bits(self, value: int, num_bits: int) -> None:
        """Write multiple bits from value (MSB first)."""
        for i in range(num_bits - 1, -1, -1):
            self._bits.append((value >> i) & 1)

    def write_unary(self, q: int) -> None:
        """Write q zero bits followed by a terminating one."""
        self._bits.extend([0] * q)
        self._bits.append(1)

    def extend(self, bits: Iterable[int]) -> None:
        """Append already-formed bits (e.g. a Huffman code)."""
        self._bits.extend(bits)

    @property
    def bits(self) -> List[int]:
        return self._bits

    def to_bytes(self) -> bytes:
        """Pack written bits, padding the last byte with 0s."""
        return pack_bits(self._bits)


class BitstreamReader:
    """Bit-level reader with bounds-checked cursor."""

    def __init__(self, bits: Sequence[int]):
        """
        Initialize bitstream reader.

        Args:
            bits: Sequence of 0/1 values to read from
        """
        self.bits = bits
        self.pos = 0

    @classmethod
    def from_bytes(cls, data: bytes, bit_count: Optional[int] = None) -> 'BitstreamReader':
        """Create a reader over packed bytes (all of them if bit_count is None)."""
        if bit_count is None:
            bit_count = len(data) * 8
        return cls(unpack_bits(data, bit_count))

    def bits_remaining(self) -> int:
        return len(self.bits) - self.pos

    def at_end(self) -> bool:
        return self.pos >= len(self.bits)

    def read_bit(self, field: str = 'bit') -> int:
        """Read a single bit."""
        if self.pos >= len(self.bits):
            raise MalformedBitstreamError(self.pos, field, 1, 0)
        bit = self.bits[self.pos]
        self.pos += 1
        return bit

    def read_bits(self, num_bits: int, field: str = 'bits') -> int:
        """Read multiple bits (MSB first) and return as integer."""
        remaining = self.bits_remaining()
        if num_bits > remaining:
            raise MalformedBitstreamError(self.pos, field, num_bits, remaining)
        value = 0
        for _ in range(num_bits):
            value = (value << 1) | self.bits[self.pos]
            self.pos += 1
        return value

    def read_unary(self, field: str = 'quotient', limit: Optional[int] = None) -> int:
        """
        Count zero bits up to and including the terminating one.

        Raises:
            MalformedBitstreamError: If the buffer ends before the terminator,
                or more than limit zeros are read
        """
        start = self.pos
        q = 0
        while True:
            if self.pos >= len(self.bits):
                raise MalformedBitstreamError(
                    start, field, q + 1, q,
                    f"No terminating 1 for {field} starting at bit offset {start} "
                    f"(byte {start // 8}): read {q} zero bits before end of stream")
            if self.bits[self.pos]:
                self.pos += 1
                return q
            q += 1
            self.pos += 1
            if limit is not None and q > limit:
                raise MalformedBitstreamError(
                    start, field, limit + 1, q,
                    f"Unary {field} at bit offset {start} exceeds limit of {limit}")


def pack_block_header(m: int, bit_count: int,
                      shape: Optional[Tuple[int, int]] = None,
                      use_prediction: bool = False) -> bytes:
    """
    Pack encoded-block metadata into a 20-byte binary header.

    Args:
        m: Golomb divisor (must fit 8 bits)
        bit_count: Logical number of bits in the payload
        shape: Optional (rows, cols) of the encoded 2-D array
        use_prediction: Whether the payload is a prediction error residual

    Returns:
        20-byte header as bytes
    """
    if not 1 <= m <= 0xFF:
        raise ValueError(f"Golomb m must fit in 8 bits, got {m}")

    flags = FLAG_HAS_SHAPE if shape is not None else 0x00
    if use_prediction:
        flags |= FLAG_PREDICTION
    rows, cols = shape if shape is not None else (0, 0)

    return struct.pack(
        BLOCK_HEADER_FORMAT,
        MAGIC,
        VERSION,
        flags,
        m,
        0,              # Reserved
        rows,
        cols,
        bit_count,
    )


def unpack_block_header(header_bytes: bytes) -> dict:
    """
    Unpack the 20-byte block header.

    Raises:
        ValueError: If header is invalid
    """
    if len(header_bytes) != BLOCK_HEADER_SIZE:
        raise ValueError(f"Header size mismatch. Expected {BLOCK_HEADER_SIZE}, "
                         f"got {len(header_bytes)}")

    magic, ver, flags, m, _, rows, cols, bit_count = struct.unpack(
        BLOCK_HEADER_FORMAT, header_bytes)

    if magic != MAGIC:
        raise ValueError(f"Invalid block signature: {magic}. Expected {MAGIC}")

    if ver != VERSION:
        raise ValueError(f"Unsupported version: {ver}")

    return {
        'm': m,
        'shape': (rows, cols) if flags & FLAG_HAS_SHAPE else None,
        'bit_count': bit_count,
        'use_prediction': bool(flags & FLAG_PREDICTION),
    }


def write_block(m: int, bits: Sequence[int],
                shape: Optional[Tuple[int, int]] = None,
                use_prediction: bool = False) -> bytes:
    """Serialize header + packed payload + CRC32."""
    payload = pack_bits(bits)
    crc = zlib.crc32(payload) & 0xFFFFFFFF
    header = pack_block_header(m, len(bits), shape, use_prediction)
    logger.debug("Packed block: m=%d, %d bits, %d payload bytes", m, len(bits), len(payload))
    return header + payload + crc.to_bytes(CRC_SIZE, 'little')


def read_block(data: bytes) -> Tuple[dict, List[int]]:
    """
    Parse a serialized block.

    Returns:
        (header dict, payload bits)

    Raises:
        ValueError: If the container is truncated or fails its CRC
    """
    if len(data) < BLOCK_HEADER_SIZE + CRC_SIZE:
        raise ValueError(f"Data too short: {len(data)} bytes, "
                         f"need at least {BLOCK_HEADER_SIZE + CRC_SIZE}")

    header = unpack_block_header(data[:BLOCK_HEADER_SIZE])
    payload_len = (header['bit_count'] + 7) // 8

    expected_len = BLOCK_HEADER_SIZE + payload_len + CRC_SIZE
    if len(data) < expected_len:
        raise ValueError(f"Data truncated: expected {expected_len} bytes, got {len(data)}")

    payload = data[BLOCK_HEADER_SIZE:BLOCK_HEADER_SIZE + payload_len]
    crc_received = int.from_bytes(
        data[BLOCK_HEADER_SIZE + payload_len:expected_len], 'little')
    crc_computed = zlib.crc32(payload) & 0xFFFFFFFF
    if crc_computed != crc_received:
        raise ValueError(f"CRC mismatch: expected {crc_received:08X}, got {crc_computed:08X}")

    return header, unpack_bits(payload, header['bit_count'])
