"""Test stage: drain stdin, print each argument as a line, exit with a status.

usage: emit.py [--stderr] [--exit N] [--sleep SECONDS] [LINE ...]
"""

import argparse
import sys
import time

parser = argparse.ArgumentParser()
parser.add_argument("--stderr", action="store_true")
parser.add_argument("--exit", type=int, default=0)
parser.add_argument("--sleep", type=float, default=0.0)
parser.add_argument("lines", nargs="*")
args = parser.parse_args()

sys.stdin.buffer.read()
out = sys.stderr if args.stderr else sys.stdout
for line in args.lines:
    out.write(line + "\n")
out.flush()
time.sleep(args.sleep)
sys.exit(args.exit)
