#!/usr/bin/env python3
"""
Run the Golomb-Rice vs. Huffman experiments on grayscale images.

For every input image, writes <name>.csv (pixel relative frequencies over
[0, 255]), <name>_residual.csv (residual frequencies), <name>_huffman.dot,
<name>_magnitude.png, and one metrics.json covering all images.
"""

import argparse
import json
import logging
import os
import sys
from datetime import datetime

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from graycodec.constants import PIXEL_MIN, PIXEL_MAX
from graycodec.codec import run_all_tasks
from graycodec.entropy import tree_to_dot
from graycodec.io import read_grayscale_image, write_grayscale_image


def print_stats(stats):
    """Print one CodingStats row."""
    line = (f"  {stats.scheme:<18} {stats.encoded_bits:>12,} bits  "
            f"{stats.bits_per_symbol:>7.4f} b/sym  CR {stats.compression_ratio:>6.3f}x  "
            f"H={stats.entropy:.4f}")
    if stats.weighted_path_length is not None:
        line += f"  WPL={stats.weighted_path_length:.4f}"
    if stats.parameter is not None:
        line += f"  m={stats.parameter}"
    print(line)


def run_image(path: str, results_dir: str) -> dict:
    """Run all tasks on one image and write its artifacts."""
    name = os.path.splitext(os.path.basename(path))[0]
    image = read_grayscale_image(path)

    print(f"\n--- {name} ---")
    print(f"  Shape: {image.shape}")
    print(f"  Range: [{image.min()}, {image.max()}]")

    report = run_all_tasks(image)

    csv_path = os.path.join(results_dir, f"{name}.csv")
    report.pixel_histogram.to_csv(csv_path, PIXEL_MIN, PIXEL_MAX)

    residual = report.residual
    residual_csv = os.path.join(results_dir, f"{name}_residual.csv")
    report.residual_histogram.to_csv(residual_csv, int(residual.min()), int(residual.max()))

    dot_path = os.path.join(results_dir, f"{name}_huffman.dot")
    with open(dot_path, 'w', encoding='utf-8') as f:
        f.write(tree_to_dot(report.huffman_tree))

    write_grayscale_image(report.magnitude_image,
                          os.path.join(results_dir, f"{name}_magnitude.png"))

    print(f"  Pixel entropy:     {report.pixel_entropy:.4f} bits")
    print(f"  Residual entropy:  {report.residual_entropy:.4f} bits")
    print(f"  Sign entropy:      {report.sign_entropy:.4f} bits")
    print("  Reconstruction from residual: exact")
    print_stats(report.golomb_magnitude)
    print_stats(report.golomb_signed)
    print_stats(report.huffman_pixels)
    print_stats(report.huffman_magnitude)
    print(f"  Saved: {name}.csv, {name}_residual.csv, {name}_huffman.dot, "
          f"{name}_magnitude.png")

    result = report.summary()
    result['image'] = path
    result['shape'] = list(image.shape)
    return result


def main():
    """Run all experiments."""
    parser = argparse.ArgumentParser(description='Golomb-Rice vs. Huffman experiment runner')
    parser.add_argument('images', nargs='+', help='Grayscale input images')
    parser.add_argument('--results-dir', default='results',
                        help='Output directory (default: results)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable debug logging')
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(name)s: %(message)s')

    print("=" * 60)
    print("GRAYSCALE ENTROPY CODING - EXPERIMENT RUNNER")
    print("=" * 60)

    os.makedirs(args.results_dir, exist_ok=True)

    all_results = []
    for path in args.images:
        if not os.path.exists(path):
            print(f"Error: image not found: {path}", file=sys.stderr)
            return 1
        all_results.append(run_image(path, args.results_dir))

    output = {
        "experiment_date": datetime.now().isoformat(),
        "codec_info": {
            "prediction": "I(x,y) - I(x-1,y) - I(x,y-1) + I(x-1,y-1)",
            "golomb": "sign bit + unary quotient + log2(m)-bit remainder, m >= mean/2",
            "huffman": "binary min-heap merge, leaves before internal nodes on ties",
        },
        "results": all_results,
    }

    output_path = os.path.join(args.results_dir, "metrics.json")
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(output, f, indent=2)

    print("\n" + "=" * 60)
    print("EXPERIMENT COMPLETE")
    print("=" * 60)
    print(f"\nResults saved to: {output_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
