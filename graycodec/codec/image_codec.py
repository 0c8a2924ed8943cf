"""Grayscale image codec: prediction residual + signed Golomb-Rice coding."""

import logging
from typing import Optional

import numpy as np

from ..constants import PIXEL_MIN, PIXEL_MAX, MAX_BLOCK_M
from ..entropy import EncodedBlock, GolombParameters, golomb_encode
from ..io.bitstream import read_block
from ..transform import prediction_error, reconstruct_from_prediction_error

logger = logging.getLogger(__name__)


class GolombImageEncoder:
    """
    Encoder for 8-bit grayscale images.

    Pipeline:
    1. Four-neighbor prediction error (optional, for ablation)
    2. Split into sign and magnitude
    3. Golomb parameter selection from the mean magnitude
    4. Golomb-Rice coding with sign bits
    5. Block container (header + packed payload + CRC32)
    """

    def __init__(self):
        self.last_block = None

    def encode(self, image: np.ndarray, m: Optional[int] = None,
               use_prediction: bool = True) -> bytes:
        """
        Encode a grayscale image.

        Args:
            image: 2D numpy array with values in [0, 255]
            m: Golomb divisor (power of two); chosen from the data, at most
                MAX_BLOCK_M, if None
            use_prediction: Code the prediction residual instead of raw pixels

        Returns:
            Compressed data as bytes
        """
        if image.ndim != 2:
            raise ValueError(f"Expected 2D array, got {image.ndim}D")
        if image.size and (image.min() < PIXEL_MIN or image.max() > PIXEL_MAX):
            raise ValueError(f"Pixel values out of 8-bit range: [{image.min()}, {image.max()}]")

        source = prediction_error(image) if use_prediction else image.astype(np.int32)
        params = GolombParameters.from_m(m) if m is not None else None

        self.last_block = golomb_encode(source, params, max_m=MAX_BLOCK_M)
        logger.debug("Encoded %dx%d image: m=%d, %d bits",
                     image.shape[0], image.shape[1], self.last_block.m,
                     self.last_block.bit_count)
        return self.last_block.to_bytes(use_prediction=use_prediction)


class GolombImageDecoder:
    """Decoder for GolombImageEncoder output."""

    def decode(self, data: bytes) -> np.ndarray:
        """
        Decode compressed grayscale image.

        Returns:
            Reconstructed 2D numpy array (uint8)

        Raises:
            ValueError: If data is invalid or corrupted
        """
        header, bits = read_block(data)
        if header['shape'] is None:
            raise ValueError("Block has no 2-D shape; not an image")

        block = EncodedBlock(GolombParameters.from_m(header['m']), bits, header['shape'])
        values = block.decode()

        if header['use_prediction']:
            return reconstruct_from_prediction_error(values)
        return np.clip(values, PIXEL_MIN, PIXEL_MAX).astype(np.uint8)
