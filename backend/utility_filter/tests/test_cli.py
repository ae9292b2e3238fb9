"""
Command-Line Interface Tests
============================
Tests for scripts/score_video.py.
"""

import io
import os
import sys
import json
from contextlib import redirect_stdout

# Add parent and scripts directories to path for imports
BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
sys.path.insert(0, BACKEND_DIR)
sys.path.insert(0, os.path.join(BACKEND_DIR, "scripts"))

import score_video


EXAMPLE_FLAGS = [
    '--video-id', 'example',
    '--likes', '9000',
    '--dislikes', '1000',
    '--views', '500000',
    '--subscribers', '10000',
    '--days-old', '3',
    '--title', 'Insane Secret Hack Revealed!!!',
]


def run_cli(argv: list) -> tuple:
    """Run the CLI and return (exit code, stdout)."""
    buffer = io.StringIO()
    with redirect_stdout(buffer):
        code = score_video.main(argv)
    return code, buffer.getvalue()


def test_score_from_flags():
    code, output = run_cli(EXAMPLE_FLAGS + ['--json'])

    assert code == 0
    result = json.loads(output)['result']
    assert result['score'] == 43.9
    assert result['tier'] == 'red'

    print("[PASS] Score from flags test passed")


def test_tier_yellow_override():
    code, output = run_cli(EXAMPLE_FLAGS + ['--tier-yellow', '40', '--json'])

    assert code == 0
    assert json.loads(output)['result']['tier'] == 'yellow'

    print("[PASS] Tier yellow override test passed")


def test_invalid_tier_yellow_is_reported():
    """A yellow cutoff above the green cutoff is an error message, not a traceback."""
    code, output = run_cli(EXAMPLE_FLAGS + ['--tier-yellow', '90'])

    assert code == 1
    assert output.startswith("Error:")
    assert "tier_yellow" in output

    print("[PASS] Invalid tier yellow test passed")


def test_missing_input_file_is_reported():
    code, output = run_cli(['--input', os.path.join(BACKEND_DIR, 'no_such_listing.json')])

    assert code == 1
    assert output.startswith("Error: cannot read")

    print("[PASS] Missing input file test passed")


def test_missing_config_file_is_reported():
    code, output = run_cli(EXAMPLE_FLAGS + ['--config', os.path.join(BACKEND_DIR, 'no_such_config.json')])

    assert code == 1
    assert output.startswith("Error: cannot load")

    print("[PASS] Missing config file test passed")


def run_all_tests():
    """Run all CLI tests."""
    print("\n" + "="*60)
    print("COMMAND-LINE INTERFACE TESTS")
    print("="*60 + "\n")

    test_score_from_flags()
    test_tier_yellow_override()
    test_invalid_tier_yellow_is_reported()
    test_missing_input_file_is_reported()
    test_missing_config_file_is_reported()

    print("\n" + "="*60)
    print("ALL CLI TESTS PASSED")
    print("="*60 + "\n")


if __name__ == "__main__":
    run_all_tests()
