"""Test stage: write stdin back out with the line order reversed."""

import sys

lines = sys.stdin.buffer.read().splitlines()
sys.stdout.buffer.write(b"".join(line + b"\n" for line in reversed(lines)))
