"""Transform modules for the grayscale entropy codec."""

from .prediction import (
    prediction_error,
    reconstruct_from_prediction_error,
    residual_magnitude_image,
    residual_signs,
)

__all__ = [
    'prediction_error',
    'reconstruct_from_prediction_error',
    'residual_magnitude_image',
    'residual_signs',
]
