"""Grayscale image reader supporting PIL-decodable images, NumPy, and raw formats."""

import numpy as np
from pathlib import Path
from PIL import Image

RASTER_SUFFIXES = ('.png', '.bmp', '.pgm', '.pnm', '.tif', '.tiff', '.jpg', '.jpeg', '.gif')


def read_grayscale_image(path: str, width: int = None, height: int = None) -> np.ndarray:
    """
    Read an 8-bit grayscale image.

    Args:
        path: Path to the image file (raster image, .npy, or .raw)
        width: Image width (required for .raw files)
        height: Image height (required for .raw files)

    Returns:
        2D numpy array with dtype uint8

    Raises:
        ValueError: If format is unsupported or parameters are missing
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix in RASTER_SUFFIXES:
        return _read_raster(path)
    elif suffix == '.npy':
        return _read_numpy(path)
    elif suffix == '.raw':
        if width is None or height is None:
            raise ValueError("Width and height are required for .raw files")
        return _read_raw(path, width, height)
    else:
        raise ValueError(f"Unsupported file format: {suffix}")


def _read_raster(path: Path) -> np.ndarray:
    """Decode with PIL and convert to 8-bit luma."""
    with Image.open(path) as img:
        return np.array(img.convert('L'), dtype=np.uint8)


def _read_numpy(path: Path) -> np.ndarray:
    """Read a NumPy array file."""
    data = np.load(str(path))

    if data.ndim != 2:
        raise ValueError(f"Expected 2D array, got {data.ndim}D")

    if data.min() < 0 or data.max() > 255:
        raise ValueError(f"Pixel values out of 8-bit range: [{data.min()}, {data.max()}]")

    return data.astype(np.uint8)


def _read_raw(path: Path, width: int, height: int) -> np.ndarray:
    """Read a raw 8-bit binary file."""
    with open(path, 'rb') as f:
        data = np.frombuffer(f.read(), dtype=np.uint8)

    expected_size = width * height
    if len(data) != expected_size:
        raise ValueError(f"Data size mismatch. Expected {expected_size}, got {len(data)}")

    return data.reshape((height, width)).copy()
