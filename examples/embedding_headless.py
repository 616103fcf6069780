#!/usr/bin/env python3
"""
Example: Headless Watch Loop
Shows how to drive RewatchController from another program, without the console UI.

This example demonstrates:
- Using RewatchController with a custom notifier
- Collecting run outcomes programmatically
- Stopping the loop from code after a fixed number of runs
- Letting stdlib logging report what the watcher does

Usage:
    python examples/embedding_headless.py "pytest -x" src tests
"""

import asyncio
import logging
import sys

from rewatch import RewatchController
from rewatch_core import LoggingNotifier, RunOutcome


class RunCollector(LoggingNotifier):
    """
    Record every outcome and stop the controller after a number of runs.

    Use case: CI smoke checks, editor plugins, scripted rebuild loops.
    """

    def __init__(self, max_runs: int = 3):
        self.max_runs = max_runs
        self.outcomes: list[RunOutcome] = []
        self.controller: RewatchController | None = None

    def run_finished(self, outcome: RunOutcome) -> None:
        super().run_finished(outcome)
        self.outcomes.append(outcome)
        if len(self.outcomes) >= self.max_runs and self.controller is not None:
            self.controller.request_stop()


async def main(command: str, paths: list[str]) -> int:
    collector = RunCollector(max_runs=3)
    controller = RewatchController(command, paths, notifier=collector)
    collector.controller = controller

    exit_code = await controller.run()

    passed = sum(1 for outcome in collector.outcomes if outcome.success)
    print(f"\n{passed}/{len(collector.outcomes)} runs succeeded")
    return exit_code


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: embedding_headless.py COMMAND PATH [PATH ...]")
        sys.exit(2)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    sys.exit(asyncio.run(main(sys.argv[1], sys.argv[2:])))
