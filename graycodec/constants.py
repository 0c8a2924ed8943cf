"""Constants for the grayscale entropy codec."""

import struct

# Magic number: 'GRCB' (Golomb-Rice Coded Block)
MAGIC = b'GRCB'
VERSION = 0x01

# 8-bit grayscale pixel domain
PIXEL_MIN = 0
PIXEL_MAX = 255

# Block header format (Little-endian, 20 bytes total)
# 4s: Magic (4B), B: Version (1B), B: Flags (1B), B: Golomb m (1B),
# B: Reserved (1B), I: Rows (4B), I: Cols (4B), I: Bit count (4B)
BLOCK_HEADER_FORMAT = '<4sBBBBIII'
BLOCK_HEADER_SIZE = struct.calcsize(BLOCK_HEADER_FORMAT)  # 20 bytes

# Flags byte
FLAG_HAS_SHAPE = 0x01
FLAG_PREDICTION = 0x02  # payload is a prediction error residual

# Largest power-of-two Golomb m that fits the uint8 header field
MAX_BLOCK_M = 128

# CRC32 trailer appended after the packed payload
CRC_SIZE = 4

# Histogram CSV export header
CSV_HEADER = ('element', 'frequency')

# Longest unary quotient run accepted by default (None = unbounded)
DEFAULT_MAX_QUOTIENT = None
