"""Entropy coding modules: histograms, Golomb-Rice and Huffman."""

from .histogram import (
    Symbol,
    Histogram,
    data_entropy,
    entropy_from_frequencies,
    normalize_histogram,
)
from .golomb import (
    GolombParameters,
    SignedMagnitude,
    EncodedBlock,
    select_parameters,
    to_signed_magnitudes,
    from_signed_magnitudes,
    encode_magnitudes,
    decode_magnitudes,
    encode_signed,
    decode_signed,
    golomb_encode,
    golomb_decode,
)
from .huffman import (
    HuffmanNode,
    Leaf,
    Internal,
    HuffmanEncoder,
    HuffmanDecoder,
    build_huffman_tree,
    build_code_table,
    build_tree_from_code_table,
    huffman_encode,
    huffman_decode,
    code_lengths,
    is_prefix_free,
    weighted_path_length,
    serialize_code_table,
    deserialize_code_table,
    tree_to_dot,
)

__all__ = [
    'Symbol',
    'Histogram',
    'data_entropy',
    'entropy_from_frequencies',
    'normalize_histogram',
    'GolombParameters',
    'SignedMagnitude',
    'EncodedBlock',
    'select_parameters',
    'to_signed_magnitudes',
    'from_signed_magnitudes',
    'encode_magnitudes',
    'decode_magnitudes',
    'encode_signed',
    'decode_signed',
    'golomb_encode',
    'golomb_decode',
    'HuffmanNode',
    'Leaf',
    'Internal',
    'HuffmanEncoder',
    'HuffmanDecoder',
    'build_huffman_tree',
    'build_code_table',
    'build_tree_from_code_table',
    'huffman_encode',
    'huffman_decode',
    'code_lengths',
    'is_prefix_free',
    'weighted_path_length',
    'serialize_code_table',
    'deserialize_code_table',
    'tree_to_dot',
]
