"""coverage-gate command: fail the job when diff coverage is below threshold."""

from __future__ import annotations

import logging

import click
from github import GithubException
from rich.console import Console

from ciguard_core.coverage import GateDecision, evaluate, load_coverage_report
from ciguard_core.gh.actions import write_outputs
from ciguard_core.gh.event import load_event, pull_request_context
from ciguard_core.gh.pull_request import get_repo, review_fetcher
from ciguard_telemetry.models import RunMetadata
from ciguard_telemetry.noop import NoOpSink

console = Console()
logger = logging.getLogger(__name__)


def _format_coverage(decision: GateDecision) -> str:
    if decision.coverage_percent is None:
        return "n/a"
    return f"{decision.coverage_percent:g}%"


@click.command("coverage-gate")
@click.option("--report", "report_path", default=None, help="diff-cover JSON report. Overrides config file.")
@click.option("--threshold", type=float, default=None, help="Minimum diff coverage percent. Overrides config file.")
@click.option("--codeowners", "codeowners_path", default=None, help="CODEOWNERS file. Overrides config file.")
@click.option("--override-label", default=None, help="PR label requesting an override. Overrides config file.")
@click.option("--repo", envvar="GITHUB_REPOSITORY", default=None, help="GitHub repository in owner/name format.")
@click.option("--event-path", envvar="GITHUB_EVENT_PATH", default=None, help="Path to the GitHub event payload.")
@click.pass_context
def coverage_gate_cmd(
    ctx,
    report_path: str | None,
    threshold: float | None,
    codeowners_path: str | None,
    override_label: str | None,
    repo: str | None,
    event_path: str | None,
):
    """Enforce the diff-coverage threshold for a pull request.

    Below the threshold the job fails unless the PR carries the override label
    AND a codeowner (other than the author) has approved it. Override outcomes
    are sent as telemetry when AXIOM_TOKEN is set.
    """
    from ciguard_cli.auth import resolve_github_token

    config = ctx.obj["config"]
    report_path = report_path or config["report_path"]
    threshold = threshold if threshold is not None else float(config["threshold"])
    codeowners_path = codeowners_path or config["codeowners_path"]
    override_label = override_label or config["override_label"]

    pr = pull_request_context(load_event(event_path))
    labels = pr.labels if pr else []

    def fetch_reviews():
        token = resolve_github_token()
        if not token or not repo:
            raise click.UsageError("Checking override approval needs GITHUB_TOKEN and --repo (or GITHUB_REPOSITORY).")
        return review_fetcher(get_repo(repo, token=token), pr.number)()

    report = load_coverage_report(report_path)
    try:
        decision = evaluate(
            report,
            pr,
            fetch_reviews,
            labels,
            threshold,
            codeowners_path=codeowners_path,
            override_label=override_label,
        )
    except GithubException as e:
        raise click.ClickException(f"GitHub API error while listing reviews: {e}")

    events = [event.to_dict() for event in decision.telemetry_events]
    if events:
        sink = ctx.obj["sink"]
        if isinstance(sink, NoOpSink):
            logger.warning("AXIOM_TOKEN not set - skipping telemetry")
        else:
            sink.send_all(events, RunMetadata.from_env(pr.number if pr else None))

    write_outputs(
        {
            "should_fail": decision.should_fail,
            "coverage_percent": decision.coverage_percent,
            "override_applied": decision.override_applied,
        }
    )

    coverage = _format_coverage(decision)
    if decision.should_fail:
        console.print(f"[red]Coverage check failed ({coverage}): {decision.reason}[/red]")
        ctx.exit(1)
    console.print(f"[green]Coverage check passed ({coverage}): {decision.reason}[/green]")
