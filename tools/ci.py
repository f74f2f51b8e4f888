#!/usr/bin/env python3
# Copyright 2026 idlkit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Run all CI checks locally: format, lint, type check, tests, and build.

Pass step keys (e.g. ``lint tests``) to run a subset of the steps.
"""

import pathlib
import subprocess
import sys
import time

from yachalk import chalk

# ###############
# Public Interface
# ###############

STEPS: list[tuple[str, str, list[str]]] = [
    ("format", "Format check", ["uv", "run", "ruff", "format", "--check", "src/", "tests/", "tools/"]),
    ("lint", "Lint", ["uv", "run", "ruff", "check", "src/", "tests/", "tools/"]),
    ("types", "Type check", ["uv", "run", "ty", "check", "src/"]),
    ("tests", "Tests", ["uv", "run", "pytest", "--cov=idlkit", "--cov-report=term-missing"]),
    ("build", "Build", ["uv", "build"]),
]


def main(argv: list[str] | None = None) -> int:
    """Run the selected CI steps (all by default) and report results."""
    selected = argv if argv is not None else sys.argv[1:]
    unknown = [key for key in selected if key not in {key for key, _, _ in STEPS}]
    if unknown:
        print(chalk.red(f"Unknown step(s): {', '.join(unknown)}"))
        print(f"Available steps: {', '.join(key for key, _, _ in STEPS)}")
        return 2

    results: list[tuple[str, bool, float]] = []
    for key, name, cmd in STEPS:
        if selected and key not in selected:
            continue
        _banner(name)
        start = time.monotonic()
        proc = subprocess.run(cmd, cwd=_repo_root())
        elapsed = time.monotonic() - start
        results.append((name, proc.returncode == 0, elapsed))

    _banner("  Summary")
    all_passed = True
    for name, passed, elapsed in results:
        if passed:
            line = chalk.green(f"  PASS  {name} ({elapsed:.1f}s)")
        else:
            line = chalk.red(f"  FAIL  {name} ({elapsed:.1f}s)")
            all_passed = False
        print(line)

    print()
    return 0 if all_passed else 1


# ################
# Implementation
# ################


def _banner(title: str) -> None:
    sep = chalk.blue("=" * 60)
    print(f"\n{sep}")
    print(chalk.blue(title))
    print(sep)


def _repo_root() -> str:
    return str(pathlib.Path(__file__).parent.parent)


if __name__ == "__main__":
    sys.exit(main())
