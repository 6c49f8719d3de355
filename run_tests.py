#!/usr/bin/env python3
"""
Run the Files Manager test suites.

Usage:
  python run_tests.py                 # unit, api and e2e in sequence
  python run_tests.py unit api        # selected suites
  python run_tests.py unit --no-coverage
"""

import argparse
import os
import subprocess
import sys

SUITES = {
    "unit": ["tests/unit/"],
    "api": ["tests/api/", "--tb=short"],
    # Later workflow steps depend on earlier ones
    "e2e": ["tests/e2e/", "--tb=short", "-x"],
}


def run_suite(name: str, verbose: bool, coverage: bool) -> int:
    cmd = [sys.executable, "-m", "pytest", *SUITES[name]]
    if verbose:
        cmd.extend(["-v", "-s"])
    if coverage and name == "unit":
        cmd.extend(["--cov=app", "--cov=models", "--cov-report=term-missing"])

    print(f"\n=== {name} tests: {' '.join(cmd)}")
    return subprocess.run(cmd, env={**os.environ, **_test_environment()}).returncode


def _test_environment() -> dict[str, str]:
    # Thumbnails run in-process and without retry delays
    return {
        "ENVIRONMENT": os.environ.get("ENVIRONMENT", "testing"),
        "THUMBNAIL_BACKEND": os.environ.get("THUMBNAIL_BACKEND", "local"),
        "THUMBNAIL_BACKOFF_SECONDS": os.environ.get("THUMBNAIL_BACKOFF_SECONDS", "0"),
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Files Manager test runner")
    parser.add_argument("suites", nargs="*", help=f"Suites to run, any of: {', '.join(SUITES)}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--no-coverage", action="store_true", help="Skip coverage reporting")
    args = parser.parse_args()
    unknown = set(args.suites) - set(SUITES)
    if unknown:
        parser.error(f"unknown suites: {', '.join(sorted(unknown))}")

    results = {name: run_suite(name, args.verbose, not args.no_coverage) for name in args.suites or SUITES}

    print()
    for name, code in results.items():
        print(f"{name:6} {'PASSED' if code == 0 else 'FAILED'}")
    return 1 if any(results.values()) else 0


if __name__ == "__main__":
    sys.exit(main())
