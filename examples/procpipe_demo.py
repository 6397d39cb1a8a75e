#!/usr/bin/env python3
# %% [markdown]
# # procpipe: Interactive Demo
#
# Walks through the process pipeline runner.  Run the cells top to bottom.
# Every command used here ships with a POSIX system.

# %% [markdown]
# ## Setup & Imports

# %%
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

_root = Path(__file__).resolve().parents[1] if "__file__" in dir() else Path.cwd()
sys.path.insert(0, str(_root))
load_dotenv(_root / ".env")

from procpipe import (
    PipelineRunner,
    RunnerConfig,
    Stage,
    StageExecutionError,
    build_pipeline,
)

logging.basicConfig(level=logging.DEBUG, format="%(levelname)-8s %(message)s")
runner = PipelineRunner(RunnerConfig.from_env())

# %% [markdown]
# ## 1. A shell-style pipe
#
# Each `|` segment becomes a stage; stage output feeds the next stage and
# every line the last stage prints shows up in the log.

# %%
result = runner.run("ls -1 / | sort -r | head -n 3")
print("ok:", result.ok)

# %% [markdown]
# ## 2. Failures carry the stage's command line

# %%
result = runner.run("ls /nope | wc -l")
print("failed at:", result.failed_at)
print("error:", result.error)
try:
    result.raise_for_error()
except StageExecutionError as exc:
    print("returncode:", exc.returncode)

# %% [markdown]
# ## 3. Conditional success
#
# A failing stage counts as successful when any line of its output or
# error stream matches one of the patterns.

# %%
result = runner.run("ls /nope", success_patterns=["No such file"])
print("ok:", result.ok, "rescued:", result.outcomes[0].rescued)

# %% [markdown]
# ## 4. Arguments containing whitespace
#
# The string entry points split on whitespace only.  Build stages directly
# to pass an argument intact.

# %%
pipeline = build_pipeline(
    [Stage("printf", ("%s\n", "one argument with spaces")), Stage("wc", ("-w",))]
)
result = runner.execute(pipeline)
print("ok:", result.ok)
