#!/usr/bin/env python3
"""
Grayscale Image Decoder CLI

Usage:
    python decode.py --input <path> --output <path>

Example:
    python decode.py --input lena.grc --output recovered.png
"""

import argparse
import logging
import sys
import os
import time

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from graycodec.errors import CodecError
from graycodec.io import write_grayscale_image
from graycodec.codec import GolombImageDecoder


def main():
    parser = argparse.ArgumentParser(
        description='Grayscale Image Decoder - Restore Golomb-Rice coded images',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Decode to PNG
  python decode.py --input lena.grc --output recovered.png

  # Decode to NumPy format with verbose output
  python decode.py --input lena.grc --output recovered.npy --format npy --verbose
        """
    )

    # Required arguments
    parser.add_argument('--input', '-i', required=True,
                        help='Input compressed file path (.grc)')
    parser.add_argument('--output', '-o', required=True,
                        help='Output image path (.png, .npy or .raw)')

    # Optional arguments
    parser.add_argument('--format', '-f', choices=['png', 'npy', 'raw'],
                        help='Output format (default: from extension)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Verbose output')

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(name)s: %(message)s')

    if not os.path.exists(args.input):
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.verbose:
            print(f"Reading compressed file: {args.input}")

        start_time = time.time()

        with open(args.input, 'rb') as f:
            compressed = f.read()

        if args.verbose:
            print(f"  Compressed size: {len(compressed):,} bytes")
            print("Decoding...")

        decoder = GolombImageDecoder()
        image = decoder.decode(compressed)

        elapsed = time.time() - start_time

        if args.verbose:
            print(f"\nReconstructed image:")
            print(f"  Shape: {image.shape}")
            print(f"  Range: [{image.min()}, {image.max()}]")

        write_grayscale_image(image, args.output, format=args.format)

        if args.verbose:
            print(f"  Decoding time: {elapsed:.2f}s")
            print(f"\nOutput written to: {args.output}")
        else:
            print(f"Decoded: {args.input} -> {args.output} "
                  f"({image.shape[0]}x{image.shape[1]})")

    except CodecError as e:
        print(f"Error: Corrupted bitstream - {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: Invalid compressed file - {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
