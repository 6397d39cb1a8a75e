"""Test stage: copy stdin to stdout one line at a time, flushing each line."""

import sys

for line in sys.stdin.buffer:
    sys.stdout.buffer.write(line)
    sys.stdout.buffer.flush()
