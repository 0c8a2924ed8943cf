"""Four-neighbor prediction error transform."""

import numpy as np

from ..constants import PIXEL_MIN, PIXEL_MAX


def prediction_error(image: np.ndarray) -> np.ndarray:
    """
    Compute the prediction error residual of a grayscale image.

        P(x, y) = I(x, y) - I(x-1, y) - I(x, y-1) + I(x-1, y-1)

    Pixels outside the image count as 0, so the first row and column
    reduce to one-dimensional differences and P(0, 0) = I(0, 0).

    Args:
        image: 2D array of pixel values

    Returns:
        int32 residual of the same shape
    """
    if image.ndim != 2:
        raise ValueError(f"Expected 2D array, got {image.ndim}D")

    padded = np.pad(image.astype(np.int32), ((1, 0), (1, 0)), mode='constant')
    return np.diff(np.diff(padded, axis=0), axis=1)


def reconstruct_from_prediction_error(residual: np.ndarray) -> np.ndarray:
    """
    Invert prediction_error.

    I(x, y) is the 2-D prefix sum of P; the result is clipped to 8 bits.

    Returns:
        uint8 image
    """
    if residual.ndim != 2:
        raise ValueError(f"Expected 2D array, got {residual.ndim}D")

    image = np.cumsum(np.cumsum(residual.astype(np.int64), axis=0), axis=1)
    return np.clip(image, PIXEL_MIN, PIXEL_MAX).astype(np.uint8)


def residual_magnitude_image(residual: np.ndarray) -> np.ndarray:
    """|residual| saturated to the 8-bit pixel range."""
    return np.clip(np.abs(residual), PIXEL_MIN, PIXEL_MAX).astype(np.uint8)


def residual_signs(residual: np.ndarray) -> np.ndarray:
    """Boolean sign plane, True where the residual is negative."""
    return residual < 0
