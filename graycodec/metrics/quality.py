"""Coding statistics and image comparison for codec evaluation."""

from typing import NamedTuple, Optional

import numpy as np

from ..errors import ImageMismatchError


class CodingStats(NamedTuple):
    """Outcome of one coding run, returned instead of printed."""
    scheme: str
    num_symbols: int
    original_bits: int
    encoded_bits: int
    compression_ratio: float
    bits_per_symbol: float
    entropy: float
    weighted_path_length: Optional[float] = None
    parameter: Optional[int] = None

    def as_dict(self) -> dict:
        return dict(self._asdict())


def calculate_bpp(compressed_size: int, image_shape: tuple) -> float:
    """
    Calculate Bits Per Pixel (BPP).

    Args:
        compressed_size: Size of compressed data in bytes
        image_shape: Tuple of (height, width)

    Returns:
        BPP value
    """
    num_pixels = image_shape[0] * image_shape[1]
    return (compressed_size * 8) / num_pixels


def calculate_compression_ratio(original_size: int, compressed_size: int) -> float:
    """
    Calculate compression ratio (original / compressed).

    Both sizes must use the same unit (bits or bytes).
    """
    if compressed_size == 0:
        return float('inf')
    return original_size / compressed_size


def coding_stats(scheme: str, num_symbols: int, encoded_bits: int, entropy: float,
                 symbol_bits: int = 8, weighted_path_length: float = None,
                 parameter: int = None) -> CodingStats:
    """
    Summarize a coding run against a fixed-width baseline.

    Args:
        scheme: Name of the coding scheme
        num_symbols: Number of coded symbols
        encoded_bits: Size of the coded bitstream
        entropy: Zeroth-order entropy of the source, bits/symbol
        symbol_bits: Width of one uncoded symbol
        weighted_path_length: Expected Huffman code length, if applicable
        parameter: Scheme parameter (Golomb m), if applicable
    """
    original_bits = num_symbols * symbol_bits
    bps = encoded_bits / num_symbols if num_symbols else 0.0
    return CodingStats(
        scheme=scheme,
        num_symbols=num_symbols,
        original_bits=original_bits,
        encoded_bits=encoded_bits,
        compression_ratio=calculate_compression_ratio(original_bits, encoded_bits),
        bits_per_symbol=bps,
        entropy=entropy,
        weighted_path_length=weighted_path_length,
        parameter=parameter,
    )


def verify_equal_images(expected: np.ndarray, actual: np.ndarray) -> None:
    """
    Check two images for exact equality.

    Raises:
        ImageMismatchError: Naming the shapes, or the first differing
            (row, col) and both pixel values
    """
    if expected.shape != actual.shape:
        raise ImageMismatchError(
            f"Images are not equal: shapes differ {expected.shape} != {actual.shape}",
            expected=expected.shape, actual=actual.shape)

    diff = np.argwhere(expected.astype(np.int64) != actual.astype(np.int64))
    if len(diff):
        row, col = (int(i) for i in diff[0])
        a, b = int(expected[row, col]), int(actual[row, col])
        raise ImageMismatchError(
            f"Images are not equal at ({row}, {col}): {a} != {b} "
            f"({len(diff)} pixels differ)",
            position=(row, col), expected=a, actual=b)
