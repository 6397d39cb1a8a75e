"""Test stage: report the number of lines and words read from stdin."""

import sys

data = sys.stdin.buffer.read()
print(f"lines={len(data.splitlines())} words={len(data.split())}")
