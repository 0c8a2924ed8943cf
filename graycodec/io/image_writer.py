"""Grayscale image writer supporting PNG, NumPy, and raw formats."""

import numpy as np
from pathlib import Path
from PIL import Image


def write_grayscale_image(image: np.ndarray, path: str, format: str = None) -> None:
    """
    Write an 8-bit grayscale image to file.

    Args:
        image: 2D numpy array with values in [0, 255]
        path: Output file path
        format: Output format ('png', 'npy' or 'raw'). Auto-detected from extension if None.

    Raises:
        ValueError: If format is unsupported
    """
    path = Path(path)

    if format is None:
        suffix = path.suffix.lower()
        if suffix in ('.npy', '.raw', '.png'):
            format = suffix[1:]
        else:
            format = 'png'
            path = path.with_suffix('.png')

    if image.ndim != 2:
        raise ValueError(f"Expected 2D array, got {image.ndim}D")

    if format == 'png':
        Image.fromarray(image.astype(np.uint8)).save(str(path))
    elif format == 'npy':
        np.save(str(path), image)
    elif format == 'raw':
        with open(path, 'wb') as f:
            f.write(image.astype(np.uint8).tobytes())
    else:
        raise ValueError(f"Unsupported format: {format}")
