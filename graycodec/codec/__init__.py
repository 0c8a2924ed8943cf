"""Codec modules for the grayscale entropy codec."""

from .image_codec import GolombImageEncoder, GolombImageDecoder
from .experiment import ExperimentReport, run_all_tasks

__all__ = [
    'GolombImageEncoder',
    'GolombImageDecoder',
    'ExperimentReport',
    'run_all_tasks',
]
