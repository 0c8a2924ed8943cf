"""Fixed task list comparing Golomb-Rice and Huffman coding on one image."""

import logging
from typing import NamedTuple

import numpy as np

from ..constants import PIXEL_MIN, PIXEL_MAX
from ..entropy import (
    Histogram, HuffmanEncoder, HuffmanNode,
    encode_magnitudes, decode_magnitudes, golomb_encode, golomb_decode,
    select_parameters, weighted_path_length,
)
from ..metrics import CodingStats, coding_stats, verify_equal_images
from ..transform import (
    prediction_error, reconstruct_from_prediction_error,
    residual_magnitude_image, residual_signs,
)

logger = logging.getLogger(__name__)


class ExperimentReport(NamedTuple):
    """Everything run_all_tasks measures; rendering is left to the caller."""
    pixel_histogram: Histogram
    pixel_entropy: float
    residual: np.ndarray
    residual_histogram: Histogram
    residual_entropy: float
    sign_entropy: float
    magnitude_image: np.ndarray
    golomb_magnitude: CodingStats
    golomb_signed: CodingStats
    huffman_pixels: CodingStats
    huffman_magnitude: CodingStats
    huffman_tree: HuffmanNode

    def summary(self) -> dict:
        """JSON-friendly scalar results."""
        return {
            'pixel_entropy': self.pixel_entropy,
            'residual_entropy': self.residual_entropy,
            'sign_entropy': self.sign_entropy,
            'golomb_magnitude': self.golomb_magnitude.as_dict(),
            'golomb_signed': self.golomb_signed.as_dict(),
            'huffman_pixels': self.huffman_pixels.as_dict(),
            'huffman_magnitude': self.huffman_magnitude.as_dict(),
        }


def _huffman_stats(scheme: str, symbols: list):
    encoder = HuffmanEncoder()
    encoder.train(symbols)
    bits = encoder.encode(symbols)
    stats = coding_stats(
        scheme, len(symbols), len(bits), encoder.histogram.entropy(),
        weighted_path_length=weighted_path_length(encoder.histogram),
    )
    return stats, encoder.tree


def run_all_tasks(image: np.ndarray) -> ExperimentReport:
    """
    Run the full measurement pass on an 8-bit grayscale image.

    1. Pixel histogram and entropy
    2. Prediction error residual and its entropy
    3. Lossless reconstruction from the residual (verified)
    4. |residual| image and sign-plane entropy
    5. Golomb-Rice on |residual| (verified round trip) and on the signed residual
    6. Huffman on raw pixels and on |residual|, with weighted path lengths

    Raises:
        ImageMismatchError: If a reconstruction does not match its source
    """
    if image.ndim != 2 or image.size == 0:
        raise ValueError(f"Expected non-empty 2D image, got shape {image.shape}")
    if image.min() < PIXEL_MIN or image.max() > PIXEL_MAX:
        raise ValueError(f"Pixel values out of 8-bit range: [{image.min()}, {image.max()}]")
    image = image.astype(np.uint8)

    pixels = image.ravel().tolist()
    pixel_histogram = Histogram(pixels)
    pixel_entropy = pixel_histogram.entropy()

    residual = prediction_error(image)
    residual_histogram = Histogram(residual.ravel().tolist())
    residual_entropy = residual_histogram.entropy()

    verify_equal_images(image, reconstruct_from_prediction_error(residual))

    magnitude_image = residual_magnitude_image(residual)
    sign_entropy = Histogram(residual_signs(residual).ravel().tolist()).entropy()

    magnitudes = magnitude_image.ravel().tolist()
    params = select_parameters(magnitudes)
    magnitude_bits = encode_magnitudes(magnitudes, params)
    decoded = decode_magnitudes(magnitude_bits, params, count=len(magnitudes))
    verify_equal_images(magnitude_image,
                        np.array(decoded, dtype=np.int32).reshape(magnitude_image.shape))
    golomb_magnitude = coding_stats(
        'golomb-magnitude', len(magnitudes), len(magnitude_bits),
        Histogram(magnitudes).entropy(), parameter=params.m)

    block = golomb_encode(residual)
    verify_equal_images(residual, golomb_decode(block))
    golomb_signed = coding_stats(
        'golomb-signed', residual.size, block.bit_count, residual_entropy,
        parameter=block.m)

    huffman_pixels, tree = _huffman_stats('huffman-pixels', pixels)
    huffman_magnitude, _ = _huffman_stats('huffman-magnitude', magnitudes)

    logger.debug("Tasks complete: H(pixels)=%.4f, H(residual)=%.4f",
                 pixel_entropy, residual_entropy)

    return ExperimentReport(
        pixel_histogram=pixel_histogram,
        pixel_entropy=pixel_entropy,
        residual=residual,
        residual_histogram=residual_histogram,
        residual_entropy=residual_entropy,
        sign_entropy=sign_entropy,
        magnitude_image=magnitude_image,
        golomb_magnitude=golomb_magnitude,
        golomb_signed=golomb_signed,
        huffman_pixels=huffman_pixels,
        huffman_magnitude=huffman_magnitude,
        huffman_tree=tree,
    )
