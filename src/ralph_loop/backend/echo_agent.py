"""Local stand-in assistant for loop integration tests."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from ralph_loop.loop import COMPLETION_MARKER


def main(argv: list[str] | None = None) -> int:
    """Echo the prompt from stdin and optionally signal completion."""

    parser = argparse.ArgumentParser()
    parser.add_argument("--counter-file", default=None)
    parser.add_argument("--complete-on", type=int, default=0)
    parser.add_argument("--exit-code", type=int, default=0)
    args = parser.parse_args(argv)

    prompt = sys.stdin.read()
    invocation = _bump_counter(Path(args.counter_file)) if args.counter_file else 1

    sys.stdout.write(f"echo_agent invocation {invocation}\n")
    sys.stdout.write(prompt)
    sys.stdout.flush()
    sys.stderr.write(f"echo_agent read {len(prompt)} characters\n")
    sys.stderr.flush()

    if args.complete_on and invocation >= args.complete_on:
        sys.stdout.write(f"{COMPLETION_MARKER}\n")
    return args.exit_code


def _bump_counter(path: Path) -> int:
    try:
        current = int(path.read_text("utf-8").strip() or "0")
    except FileNotFoundError:
        current = 0
    current += 1
    path.write_text(str(current), "utf-8")
    return current


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
