#!/usr/bin/env python3
"""
Grayscale Image Encoder CLI

Usage:
    python encode.py --input <path> --output <path> [--m <m>]

Example:
    python encode.py --input data/lena.png --output lena.grc
"""

import argparse
import logging
import sys
import os
import time

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from graycodec.io import read_grayscale_image
from graycodec.codec import GolombImageEncoder
from graycodec.metrics import calculate_bpp, calculate_compression_ratio


def main():
    parser = argparse.ArgumentParser(
        description='Grayscale Image Encoder - Lossless Golomb-Rice coding of prediction residuals',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Encode a PNG with an automatically chosen divisor
  python encode.py --input data/lena.png --output lena.grc

  # Force m = 4 and skip the prediction step
  python encode.py --input data/lena.png --output lena.grc --m 4 --no-prediction

  # Encode raw file (requires dimensions)
  python encode.py --input data/raw.bin --output out.grc --width 512 --height 512
        """
    )

    # Required arguments
    parser.add_argument('--input', '-i', required=True,
                        help='Input image path (.png, .bmp, .pgm, .npy, or .raw)')
    parser.add_argument('--output', '-o', required=True,
                        help='Output compressed file path (.grc)')

    # Optional arguments
    parser.add_argument('--m', type=int,
                        help='Golomb divisor, a power of two (default: chosen from data)')
    parser.add_argument('--no-prediction', action='store_true',
                        help='Code raw pixels instead of the prediction residual')
    parser.add_argument('--width', '-W', type=int,
                        help='Image width (required for raw files)')
    parser.add_argument('--height', '-H', type=int,
                        help='Image height (required for raw files)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Verbose output')

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(name)s: %(message)s')

    # Check input file exists
    if not os.path.exists(args.input):
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        sys.exit(1)

    # Check raw file requirements
    input_ext = os.path.splitext(args.input)[1].lower()
    if input_ext == '.raw':
        if args.width is None or args.height is None:
            print("Error: --width and --height are required for raw files",
                  file=sys.stderr)
            sys.exit(1)

    try:
        if args.verbose:
            print(f"Reading input: {args.input}")

        start_time = time.time()

        image = read_grayscale_image(args.input, width=args.width, height=args.height)

        if args.verbose:
            print(f"  Shape: {image.shape}")
            print(f"  Range: [{image.min()}, {image.max()}]")

        encoder = GolombImageEncoder()
        compressed = encoder.encode(image, m=args.m,
                                    use_prediction=not args.no_prediction)

        with open(args.output, 'wb') as f:
            f.write(compressed)

        elapsed = time.time() - start_time

        original_size = image.nbytes
        compressed_size = len(compressed)
        bpp = calculate_bpp(compressed_size, image.shape)
        cr = calculate_compression_ratio(original_size, compressed_size)

        if args.verbose:
            print(f"\nResults:")
            print(f"  Golomb m:          {encoder.last_block.m}")
            print(f"  Payload bits:      {encoder.last_block.bit_count:,}")
            print(f"  Original size:     {original_size:,} bytes")
            print(f"  Compressed size:   {compressed_size:,} bytes")
            print(f"  Compression ratio: {cr:.2f}x")
            print(f"  Bits per pixel:    {bpp:.3f}")
            print(f"  Encoding time:     {elapsed:.2f}s")
            print(f"\nOutput written to: {args.output}")
        else:
            print(f"Encoded: {args.input} -> {args.output} "
                  f"({cr:.2f}x compression, {bpp:.3f} bpp)")

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
