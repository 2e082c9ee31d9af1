# ./examples/api_minimal.py
"""Minimal compkit API usage example.

Run with: `python examples/api_minimal.py`
Inputs: the built-in component catalog, files under the current directory.
Outputs: prints the Dialog install plan summary and diff preview; performs no writes.
"""

from __future__ import annotations

from pathlib import Path

from compkit._types import Options
from compkit.apply import preview_plan
from compkit.core import plan_component
from compkit.report import make_diff, summarize_plan


def main() -> None:
    options = Options(target_dir=Path("."), layout="default")
    plan = plan_component("dialog", options)
    print(summarize_plan(plan))
    print("Conflicts:", len(plan.conflicts))
    diff = make_diff(preview_plan(plan, options.target_dir))
    if diff:
        print(diff)


if __name__ == "__main__":
    main()
