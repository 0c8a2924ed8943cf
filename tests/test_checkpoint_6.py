"""Checkpoint 6: CLI and Experiment Runner Verification."""

import sys
import os
import csv
import json
import subprocess
import tempfile

# Add parent directory to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

import numpy as np
from graycodec.io import write_grayscale_image, read_grayscale_image


def run_command(args):
    """Run a project script and return (returncode, stdout, stderr)."""
    result = subprocess.run(
        [sys.executable] + args,
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True
    )
    return result.returncode, result.stdout, result.stderr


def smooth_image(h=40, w=56):
    np.random.seed(42)
    i, j = np.mgrid[0:h, 0:w]
    noise = np.random.randint(-2, 3, (h, w))
    return np.clip(60 + i + 2 * j + noise, 0, 255).astype(np.uint8)


def test_encode_decode_roundtrip():
    """Test encode/decode CLI roundtrip."""
    print("=" * 60)
    print("Test 1: Encode/Decode CLI Roundtrip")
    print("=" * 60)

    image = smooth_image()

    with tempfile.TemporaryDirectory() as tmp:
        input_path = os.path.join(tmp, 'input.png')
        compressed_path = os.path.join(tmp, 'input.grc')
        output_path = os.path.join(tmp, 'restored.npy')
        write_grayscale_image(image, input_path)

        for extra in ([], ['--m', '2'], ['--no-prediction']):
            rc, stdout, stderr = run_command(
                ['encode.py', '--input', input_path, '--output', compressed_path,
                 '--verbose'] + extra)
            assert rc == 0, f"Encode failed: {stderr}"
            assert os.path.exists(compressed_path)

            rc, stdout, stderr = run_command(
                ['decode.py', '--input', compressed_path, '--output', output_path])
            assert rc == 0, f"Decode failed: {stderr}"

            restored = np.load(output_path)
            assert restored.dtype == np.uint8
            assert np.array_equal(restored, image)
            size = os.path.getsize(compressed_path)
            print(f"   ✓ {' '.join(extra) or 'default'}: {size} bytes, lossless")


def test_error_handling_cli():
    """Test CLI error handling."""
    print("\n" + "=" * 60)
    print("Test 2: CLI Error Handling")
    print("=" * 60)

    with tempfile.TemporaryDirectory() as tmp:
        rc, _, stderr = run_command(
            ['encode.py', '--input', os.path.join(tmp, 'missing.png'),
             '--output', os.path.join(tmp, 'out.grc')])
        assert rc != 0
        assert "not found" in stderr
        print("   ✓ Non-existent input: exit code != 0")

        input_path = os.path.join(tmp, 'input.npy')
        np.save(input_path, smooth_image(8, 8))
        rc, _, stderr = run_command(
            ['encode.py', '--input', input_path, '--output', os.path.join(tmp, 'out.grc'),
             '--m', '3'])
        assert rc != 0
        print("   ✓ Non power-of-two m: exit code != 0")

        raw_path = os.path.join(tmp, 'input.raw')
        with open(raw_path, 'wb') as f:
            f.write(bytes(64))
        rc, _, stderr = run_command(
            ['encode.py', '--input', raw_path, '--output', os.path.join(tmp, 'out.grc')])
        assert rc != 0
        assert "--width" in stderr
        print("   ✓ Raw input without dimensions: exit code != 0")

        invalid_path = os.path.join(tmp, 'invalid.grc')
        with open(invalid_path, 'wb') as f:
            f.write(b"INVALID_DATA")
        rc, _, stderr = run_command(
            ['decode.py', '--input', invalid_path, '--output', os.path.join(tmp, 'out.npy')])
        assert rc != 0
        print("   ✓ Invalid compressed file: exit code != 0")


def test_help_messages():
    """Test help messages."""
    print("\n" + "=" * 60)
    print("Test 3: Help Messages")
    print("=" * 60)

    rc, stdout, _ = run_command(['encode.py', '--help'])
    assert rc == 0
    for flag in ('--input', '--output', '--m', '--no-prediction'):
        assert flag in stdout, f"Help should mention {flag}"
    print("   ✓ encode.py --help works")

    rc, stdout, _ = run_command(['decode.py', '--help'])
    assert rc == 0
    assert "--input" in stdout and "--output" in stdout
    print("   ✓ decode.py --help works")


def test_experiment_runner():
    """Test the experiment runner outputs."""
    print("\n" + "=" * 60)
    print("Test 4: Experiment Runner")
    print("=" * 60)

    image = smooth_image()

    with tempfile.TemporaryDirectory() as tmp:
        input_path = os.path.join(tmp, 'sample.png')
        results_dir = os.path.join(tmp, 'results')
        write_grayscale_image(image, input_path)

        rc, stdout, stderr = run_command(
            [os.path.join('scripts', 'run_experiments.py'), input_path,
             '--results-dir', results_dir])
        assert rc == 0, f"Runner failed: {stderr}"

        for name in ('sample.csv', 'sample_residual.csv', 'sample_huffman.dot',
                     'sample_magnitude.png', 'metrics.json'):
            assert os.path.exists(os.path.join(results_dir, name)), f"Missing {name}"
        print("   ✓ All artifacts written")

        with open(os.path.join(results_dir, 'sample.csv'), newline='') as f:
            rows = list(csv.reader(f))
        assert rows[0] == ['element', 'frequency']
        assert len(rows) == 257
        assert abs(sum(float(r[1]) for r in rows[1:]) - 1.0) < 1e-9
        print("   ✓ Pixel CSV covers [0, 255] and sums to 1")

        with open(os.path.join(results_dir, 'metrics.json')) as f:
            metrics = json.load(f)
        result = metrics['results'][0]
        assert result['shape'] == [40, 56]
        assert result['residual_entropy'] < result['pixel_entropy']
        for key in ('golomb_magnitude', 'golomb_signed', 'huffman_pixels', 'huffman_magnitude'):
            assert result[key]['encoded_bits'] > 0
        print(f"   ✓ metrics.json: H(pixels)={result['pixel_entropy']:.3f}, "
              f"H(residual)={result['residual_entropy']:.3f}")

        magnitude = read_grayscale_image(os.path.join(results_dir, 'sample_magnitude.png'))
        assert magnitude.shape == image.shape

        with open(os.path.join(results_dir, 'sample_huffman.dot')) as f:
            assert f.read().startswith('digraph HuffmanTree {')


def main():
    """Run all Checkpoint 6 tests."""
    print("\n" + "=" * 60)
    print("CHECKPOINT 6: CLI INTERFACE VERIFICATION")
    print("=" * 60 + "\n")

    tests = [
        ("Encode/Decode Roundtrip", test_encode_decode_roundtrip),
        ("CLI Error Handling", test_error_handling_cli),
        ("Help Messages", test_help_messages),
        ("Experiment Runner", test_experiment_runner),
    ]

    results = []
    for name, test in tests:
        try:
            test()
            results.append((name, True))
        except AssertionError as e:
            print(f"❌ {name} failed: {e}")
            results.append((name, False))

    # Summary
    print("\n" + "=" * 60)
    print("CHECKPOINT 6 SUMMARY")
    print("=" * 60)

    all_passed = True
    for name, passed in results:
        status = "✅ PASS" if passed else "❌ FAIL"
        print(f"   {name}: {status}")
        if not passed:
            all_passed = False

    print("\n" + "=" * 60)
    if all_passed:
        print("🎉 CHECKPOINT 6 PASSED - All tests successful!")
    else:
        print("⚠️  CHECKPOINT 6 FAILED - Some tests did not pass")
    print("=" * 60 + "\n")

    return 0 if all_passed else 1


if __name__ == "__main__":
    sys.exit(main())
