"""Huffman coding over arbitrary discrete symbol streams."""

import heapq
import logging
import struct
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .histogram import Histogram, Symbol
from ..errors import (
    EmptyInputError, UnknownSymbolError, DegenerateAlphabetError,
    MalformedBitstreamError,
)
from ..io.bitstream import BitstreamReader

logger = logging.getLogger(__name__)

Code = Tuple[int, ...]
CodeTable = Dict[Symbol, Code]

# Code used when the alphabet has a single symbol
SINGLE_SYMBOL_CODE: Code = (0,)


class HuffmanNode:
    """
    Node in Huffman tree.

    Ordering is only meaningful for nodes of equal total frequency: every
    Leaf sorts before every Internal node, Internal nodes are mutually
    equal, and Leaves compare by frequency.
    """

    frequency = 0

    def is_leaf(self) -> bool:
        raise NotImplementedError


class Leaf(HuffmanNode):
    """Terminal node holding a symbol and its count."""

    def __init__(self, value: Symbol, frequency: int):
        self.value = value
        self.frequency = frequency

    def is_leaf(self) -> bool:
        return True

    def __lt__(self, other: HuffmanNode) -> bool:
        if isinstance(other, Leaf):
            return self.frequency < other.frequency
        return True

    def __repr__(self) -> str:
        return f"Leaf({self.value!r}, {self.frequency})"


class Internal(HuffmanNode):
    """Merge node; owns both children."""

    def __init__(self, left: HuffmanNode, right: HuffmanNode):
        self.left = left
        self.right = right
        self.frequency = left.frequency + right.frequency

    def is_leaf(self) -> bool:
        return False

    def __lt__(self, other: HuffmanNode) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Internal({self.frequency})"


def _as_histogram(source) -> Histogram:
    if isinstance(source, Histogram):
        return source
    if isinstance(source, Mapping):
        return Histogram.from_counts(source)
    return Histogram(source)


def build_huffman_tree(freq_table: Union[Histogram, Mapping[Symbol, int]]) -> HuffmanNode:
    """
    Build Huffman tree from frequency table.

    Leaves are seeded in ascending symbol order; the two lowest
    (frequency, node) entries are merged until one root remains.

    Args:
        freq_table: Histogram or mapping of symbol -> frequency

    Returns:
        Root of Huffman tree (a bare Leaf for single-symbol input)

    Raises:
        EmptyInputError: If the table has no symbols
    """
    hist = _as_histogram(freq_table)
    counts = hist.counts()
    if not counts:
        raise EmptyInputError("Cannot build a Huffman tree from an empty histogram")

    heap = [(freq, Leaf(symbol, freq)) for symbol, freq in
            sorted(counts.items(), key=lambda item: item[0])]
    heapq.heapify(heap)

    while len(heap) > 1:
        freq1, left = heapq.heappop(heap)
        freq2, right = heapq.heappop(heap)
        heapq.heappush(heap, (freq1 + freq2, Internal(left, right)))

    return heap[0][1]


def build_code_table(tree: HuffmanNode) -> CodeTable:
    """
    Build code table from Huffman tree.

    Left edges append 0, right edges append 1. A tree that is a single
    Leaf gets the 1-bit code (0,).

    Args:
        tree: Root of Huffman tree

    Returns:
        Dictionary of symbol -> tuple of bits
    """
    if tree.is_leaf():
        return {tree.value: SINGLE_SYMBOL_CODE}

    code_table = {}
    stack = [(tree, ())]
    while stack:
        node, code = stack.pop()
        if node.is_leaf():
            code_table[node.value] = code
        else:
            stack.append((node.right, code + (1,)))
            stack.append((node.left, code + (0,)))
    return code_table


class _TrieNode:
    __slots__ = ('left', 'right', 'symbol', 'terminal')

    def __init__(self):
        self.left = None
        self.right = None
        self.symbol = None
        self.terminal = False


def build_tree_from_code_table(code_table: CodeTable) -> _TrieNode:
    """
    Build a decoding trie from a code table.

    Raises:
        ValueError: If the table is empty or not prefix-free
    """
    if not code_table:
        raise ValueError("Empty code table")

    root = _TrieNode()
    for symbol, code in code_table.items():
        if not code:
            raise ValueError(f"Empty code for symbol {symbol!r}")
        node = root
        for bit in code:
            if node.terminal:
                raise ValueError(f"Code table is not prefix-free at symbol {symbol!r}")
            if bit == 0:
                if node.left is None:
                    node.left = _TrieNode()
                node = node.left
            else:
                if node.right is None:
                    node.right = _TrieNode()
                node = node.right
        if node.terminal or node.left is not None or node.right is not None:
            raise ValueError(f"Code table is not prefix-free at symbol {symbol!r}")
        node.symbol = symbol
        node.terminal = True
    return root


class HuffmanEncoder:
    """Huffman encoder trained on one symbol stream."""

    def __init__(self):
        self.histogram = None
        self.tree = None
        self.code_table = None

    def train(self, symbols) -> CodeTable:
        """
        Build histogram, tree and code table.

        Args:
            symbols: Symbol sequence, Histogram or symbol -> count mapping
        """
        self.histogram = _as_histogram(symbols)
        self.tree = build_huffman_tree(self.histogram)
        self.code_table = build_code_table(self.tree)
        logger.debug("Huffman table trained on %d symbols (%d distinct)",
                     self.histogram.total(), len(self.code_table))
        return self.code_table

    def _check_trained(self) -> None:
        if self.code_table is None:
            raise ValueError("Encoder has not been trained")

    def encode_symbol(self, symbol: Symbol) -> Code:
        """Code for one symbol."""
        self._check_trained()
        try:
            return self.code_table[symbol]
        except KeyError:
            raise UnknownSymbolError(symbol) from None

    def encode(self, symbols: Sequence[Symbol]) -> List[int]:
        """
        Concatenate the codes of symbols in order.

        Raises:
            UnknownSymbolError: If a symbol is not in the trained table
        """
        self._check_trained()
        bits = []
        for position, symbol in enumerate(symbols):
            code = self.code_table.get(symbol)
            if code is None:
                raise UnknownSymbolError(symbol, position)
            bits.extend(code)
        return bits


class HuffmanDecoder:
    """Huffman decoder walking a trie rebuilt from a code table."""

    def __init__(self, code_table: CodeTable):
        self.code_table = code_table
        self.single_symbol = len(code_table) == 1
        self.root = build_tree_from_code_table(code_table)

    def decode_symbol(self, reader: BitstreamReader) -> Symbol:
        """Decode one symbol from reader."""
        start = reader.pos
        node = self.root
        depth = 0
        while not node.terminal:
            if reader.at_end():
                raise MalformedBitstreamError(
                    start, 'code', depth + 1, depth,
                    f"Bitstream ended inside a code starting at bit offset {start} "
                    f"(byte {start // 8}) after {depth} bits")
            bit = reader.read_bit('code')
            depth += 1
            node = node.left if bit == 0 else node.right
            if node is None:
                if self.single_symbol:
                    raise DegenerateAlphabetError(
                        f"Invalid bit at offset {reader.pos - 1}: a single-symbol "
                        f"alphabet only has the code "
                        f"{''.join(map(str, next(iter(self.code_table.values()))))}")
                raise MalformedBitstreamError(
                    start, 'code', depth, depth,
                    f"Invalid code prefix at bit offset {start} (byte {start // 8})")
        return node.symbol

    def decode(self, bits: Sequence[int], count: Optional[int] = None) -> List[Symbol]:
        """
        Decode a bitstream.

        Args:
            bits: Bitstream (list of 0/1)
            count: Number of symbols to decode; None decodes until the stream ends
        """
        reader = BitstreamReader(bits)
        symbols = []
        while (len(symbols) < count) if count is not None else not reader.at_end():
            symbols.append(self.decode_symbol(reader))
        return symbols


def huffman_encode(symbols: Sequence[Symbol]) -> Tuple[List[int], CodeTable]:
    """
    Encode a stream with a code built from its own histogram.

    Returns:
        (bits, code_table)
    """
    encoder = HuffmanEncoder()
    encoder.train(symbols)
    return encoder.encode(symbols), encoder.code_table


def huffman_decode(bits: Sequence[int], code_table: CodeTable,
                   count: Optional[int] = None) -> List[Symbol]:
    return HuffmanDecoder(code_table).decode(bits, count)


def code_lengths(code_table: CodeTable) -> Dict[Symbol, int]:
    return {symbol: len(code) for symbol, code in code_table.items()}


def is_prefix_free(code_table: CodeTable) -> bool:
    """True if no code is a prefix of another code in the table."""
    codes = sorted(code_table.values())
    # In sorted order a prefix always sits immediately before a code it prefixes
    for shorter, longer in zip(codes, codes[1:]):
        if longer[:len(shorter)] == shorter:
            return False
    return True


def weighted_path_length(source) -> float:
    """
    Expected code length in bits/symbol.

    sum(frequency(s) / total * len(code(s))), directly comparable to the
    entropy of the same histogram.

    Args:
        source: Symbol sequence, Histogram or symbol -> count mapping
    """
    hist = _as_histogram(source)
    total = hist.total()
    if total == 0:
        raise EmptyInputError("Weighted path length of an empty stream is undefined")
    code_table = build_code_table(build_huffman_tree(hist))
    counts = hist.counts()
    return sum(counts[s] * len(code) for s, code in code_table.items()) / total


def serialize_code_table(code_table: CodeTable) -> bytes:
    """
    Serialize a code table with integer symbols.

    Format:
    - 2 bytes: number of symbols
    - For each symbol:
        - 4 bytes: symbol (int32)
        - 1 byte: code length
        - ceil(code_length/8) bytes: code bits, MSB first, zero padded

    Raises:
        TypeError: If a symbol is not an integer
    """
    result = bytearray(struct.pack('<H', len(code_table)))

    for symbol, code in sorted(code_table.items()):
        if not isinstance(symbol, int):
            raise TypeError(f"Only integer symbols can be serialized, got {symbol!r}")
        result.extend(struct.pack('<i', symbol))
        result.append(len(code))

        value = 0
        for bit in code:
            value = (value << 1) | bit
        num_bytes = (len(code) + 7) // 8
        value <<= num_bytes * 8 - len(code)
        result.extend(value.to_bytes(num_bytes, 'big'))

    return bytes(result)


def deserialize_code_table(data: bytes) -> Tuple[CodeTable, int]:
    """
    Deserialize a code table.

    Returns:
        (code_table, bytes_consumed)
    """
    offset = 0
    num_symbols = struct.unpack_from('<H', data, offset)[0]
    offset += 2

    code_table = {}
    for _ in range(num_symbols):
        symbol = struct.unpack_from('<i', data, offset)[0]
        offset += 4

        code_length = data[offset]
        offset += 1

        num_bytes = (code_length + 7) // 8
        if offset + num_bytes > len(data):
            raise ValueError(f"Code table truncated at byte {offset}")
        value = int.from_bytes(data[offset:offset + num_bytes], 'big')
        value >>= num_bytes * 8 - code_length
        offset += num_bytes

        code_table[symbol] = tuple((value >> i) & 1 for i in range(code_length - 1, -1, -1))

    return code_table, offset


def tree_to_dot(tree: HuffmanNode) -> str:
    """
    Render a Huffman tree as Graphviz DOT text.

    Leaves are labelled with symbol, code and frequency.
    """
    codes = build_code_table(tree)
    lines = ['digraph HuffmanTree {']
    next_id = 1
    stack = [(tree, 0)]
    while stack:
        node, node_id = stack.pop()
        if node.is_leaf():
            code_str = ''.join(str(bit) for bit in codes[node.value])
            lines.append(
                f'    node{node_id} [shape=box, style="filled", fillcolor=lightblue, '
                f'label="{_dot_escape(repr(node.value))}\\n{code_str}\\n({node.frequency}x)"];')
        else:
            left_id, right_id = next_id, next_id + 1
            next_id += 2
            lines.append(
                f'    node{node_id} [shape=circle, style=filled, width=0.1, height=0.1, '
                f'fillcolor=white, label=""];')
            lines.append(f'    node{node_id} -> node{left_id} [label="0"];')
            lines.append(f'    node{node_id} -> node{right_id} [label="1"];')
            stack.append((node.right, right_id))
            stack.append((node.left, left_id))
    lines.append('}')
    return '\n'.join(lines) + '\n'


def _dot_escape(text: str) -> str:
    return text.replace('\\', '\\\\').replace('"', '\\"')
