"""Grayscale image entropy-coding experiments: Golomb-Rice and Huffman."""

__version__ = '0.1.0'
