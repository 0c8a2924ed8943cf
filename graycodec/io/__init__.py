"""I/O modules for the grayscale entropy codec."""

from .image_reader import read_grayscale_image
from .image_writer import write_grayscale_image
from .bitstream import (
    BitstreamWriter,
    BitstreamReader,
    pack_bits,
    unpack_bits,
    pack_block_header,
    unpack_block_header,
    write_block,
    read_block,
)

__all__ = [
    'read_grayscale_image',
    'write_grayscale_image',
    'BitstreamWriter',
    'BitstreamReader',
    'pack_bits',
    'unpack_bits',
    'pack_block_header',
    'unpack_block_header',
    'write_block',
    'read_block',
]
