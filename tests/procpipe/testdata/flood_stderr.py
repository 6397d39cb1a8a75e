"""Test stage: write far more than a pipe buffer to stderr, then copy stdin to stdout."""

import sys

size = int(sys.argv[1]) if len(sys.argv) > 1 else 256 * 1024
line = "x" * 63 + "\n"
for i in range(size // len(line)):
    sys.stderr.write(f"{i:08d}{line[8:]}")
sys.stderr.flush()
sys.stdout.buffer.write(sys.stdin.buffer.read())
