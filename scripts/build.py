#!/usr/bin/env python3
"""
Build script for Activity Timer.

This script automates various development tasks including:
- Cleaning build artifacts
- Running tests with coverage
- Building Python package
"""

import argparse
import shutil
import subprocess
import sys
from pathlib import Path

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent.absolute()


def clean():
    """Clean build artifacts and temporary files."""
    print("Cleaning build artifacts...")

    clean_paths = [
        "build",
        "dist",
        "*.egg-info",
        ".pytest_cache",
        ".coverage",
        "htmlcov",
        "__pycache__",
        "logs/*.log"
    ]

    for pattern in clean_paths:
        for path in PROJECT_ROOT.glob("**/" + pattern):
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()

    print("Clean completed!")


def run_tests(coverage=True, benchmarks=True):
    """Run test suite with optional coverage report.

    Args:
        coverage: Whether to generate coverage report
        benchmarks: Whether to run the performance benchmarks
    """
    print("Running tests...")

    cmd = [sys.executable, "-m", "pytest", "-v"]

    if coverage:
        cmd.extend([
            "--cov=src/activity_timer",
            "--cov-report=term-missing",
            "--cov-report=html"
        ])

    if not benchmarks:
        cmd.append("--benchmark-skip")

    result = subprocess.run(cmd, cwd=PROJECT_ROOT)

    if result.returncode != 0:
        print("Tests failed!")
        sys.exit(result.returncode)

    print("Tests completed successfully!")


def build_package():
    """Build Python package using setuptools."""
    print("Building Python package...")

    clean()

    subprocess.run(
        [sys.executable, "-m", "build"],
        cwd=PROJECT_ROOT,
        check=True
    )

    print("Package build completed!")


def setup_dev_environment():
    """Install the package in editable mode with test dependencies."""
    print("Setting up development environment...")

    subprocess.run(
        [sys.executable, "-m", "pip", "install", "-e", ".[test]"],
        cwd=PROJECT_ROOT,
        check=True
    )

    print("Development environment setup completed!")


def main():
    """Main entry point for build script."""
    parser = argparse.ArgumentParser(
        description="Build script for Activity Timer"
    )

    parser.add_argument("--clean", action="store_true", help="Clean build artifacts")
    parser.add_argument("--test", action="store_true", help="Run test suite")
    parser.add_argument(
        "--no-coverage",
        action="store_true",
        help="Run tests without coverage report"
    )
    parser.add_argument(
        "--no-benchmarks",
        action="store_true",
        help="Skip performance benchmarks"
    )
    parser.add_argument("--package", action="store_true", help="Build Python package")
    parser.add_argument(
        "--dev-setup",
        action="store_true",
        help="Set up development environment"
    )
    parser.add_argument("--all", action="store_true", help="Run all build steps")

    args = parser.parse_args()

    try:
        if args.all:
            clean()
            run_tests(coverage=True)
            build_package()
            return

        if args.clean:
            clean()

        if args.dev_setup:
            setup_dev_environment()

        if args.test:
            run_tests(
                coverage=not args.no_coverage,
                benchmarks=not args.no_benchmarks,
            )

        if args.package:
            build_package()

        # If no flags provided, show help
        if not any(vars(args).values()):
            parser.print_help()

    except subprocess.CalledProcessError as e:
        print(f"Build failed: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
