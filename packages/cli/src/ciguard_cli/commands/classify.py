"""classify-plan command: show the collapse verdict for a plan file."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from ciguard_core.gh.actions import write_outputs
from ciguard_core.plan import classify

console = Console()


@click.command("classify-plan")
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the classification as JSON.")
def classify_cmd(plan_file: str, as_json: bool):
    """Classify a `terraform plan` output file.

    Reports whether the plan only changes worker code and would be collapsed
    in the PR comment, along with the signals behind that verdict.
    """
    result = classify(Path(plan_file).read_text(encoding="utf-8", errors="replace"))
    write_outputs({"should_collapse": result.should_collapse})

    if as_json:
        click.echo(json.dumps(asdict(result), indent=2))
        return

    table = Table(title=f"Plan classification: {plan_file}", show_header=True, header_style="bold cyan")
    table.add_column("Signal", style="bold")
    table.add_column("Value")
    table.add_row("Only updates", str(result.has_only_updates))
    table.add_row("Changed attributes", ", ".join(result.changed_attrs) or "—")
    table.add_row("Real additions", str(result.has_real_additions))
    table.add_row("Real deletions", str(result.has_real_deletions))
    table.add_row("Resource changes", str(result.has_resource_changes))
    console.print(table)

    if result.should_collapse:
        console.print("[green]Worker code-only change: comment will be collapsed.[/green]")
    else:
        console.print("[yellow]Plan will be shown in full.[/yellow]")
