"""Evaluation metrics for the grayscale entropy codec."""

from .quality import (
    CodingStats,
    calculate_bpp,
    calculate_compression_ratio,
    coding_stats,
    verify_equal_images,
)

__all__ = [
    'CodingStats',
    'calculate_bpp',
    'calculate_compression_ratio',
    'coding_stats',
    'verify_equal_images',
]
