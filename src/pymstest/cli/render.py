# src/pymstest/cli/render.py

"""
Terminal rendering of parsed results.
"""

import click
from rich.console import Console
from rich.table import Table

from pymstest.parsing.events import TestResult

OUTCOME_EMOJIS = {True: "✅", False: "❌"}


class ResultPrinter:
    """Prints results as they arrive and a summary table at the end."""

    def __init__(self, show_details: bool = True, console: Console | None = None):
        self.show_details = show_details
        self.console = console or Console(highlight=False)
        self.error_count = 0

    def on_test(self, result: TestResult) -> None:
        click.echo(f"{OUTCOME_EMOJIS[result.passed]} {result.status:<12} {result.name}")
        if not self.show_details:
            return
        for key, value in result.attributes.items():
            lines = value.splitlines() or [""]
            click.echo(f"    {key}: {lines[0]}")
            for line in lines[1:]:
                click.echo(f"        {line}")

    def on_error(self, message: str) -> None:
        self.error_count += 1
        click.echo(f"⚠️  {message}", err=True)

    def print_summary(
        self,
        results: list[TestResult],
        passed: list[TestResult],
        failed: list[TestResult],
    ) -> None:
        table = Table(title="Test Results")
        table.add_column("Outcome")
        table.add_column("Count", justify="right")
        table.add_row("Passed", str(len(passed)))
        table.add_row("Failed", str(len(failed)))
        table.add_row("Total", str(len(results)))
        self.console.print(table)

        for result in failed:
            click.echo(f"FAILED ({result.status}): {result.name}")
        click.echo(f"{len(results)} total, {len(passed)} passed, {len(failed)} failed")
