"""plan-comment command: keep one Terraform plan comment per module on the PR."""

from __future__ import annotations

import click
from github import GithubException
from rich.console import Console

from ciguard_core.comment import NO_CHANGES_EXITCODE, publish_plan_comment, read_plan_output
from ciguard_core.gh.actions import write_outputs
from ciguard_core.gh.event import load_event, pull_request_context
from ciguard_core.gh.pull_request import IssueCommentStore, get_repo

console = Console()


@click.command("plan-comment")
@click.option("--plan-file", required=True, help="File holding the `terraform plan` output.")
@click.option(
    "--exitcode",
    required=True,
    help="Exit code of `terraform plan -detailed-exitcode` (0 = no changes, 2 = changes).",
)
@click.option("--marker", required=True, help="Unique string identifying this module's comment.")
@click.option("--module-name", required=True, help="Display name of the Terraform module.")
@click.option(
    "--collapse/--no-collapse",
    default=None,
    help="Collapse worker code-only plans. Overrides config file.",
)
@click.option("--repo", envvar="GITHUB_REPOSITORY", required=True, help="GitHub repository in owner/name format.")
@click.option("--actor", envvar="GITHUB_ACTOR", default="github-actions", show_default=True, help="User shown in the footer.")
@click.option("--event-path", envvar="GITHUB_EVENT_PATH", default=None, help="Path to the GitHub event payload.")
@click.pass_context
def plan_comment_cmd(
    ctx,
    plan_file: str,
    exitcode: str,
    marker: str,
    module_name: str,
    collapse: bool | None,
    repo: str,
    actor: str,
    event_path: str | None,
):
    """Post or refresh the Terraform plan comment on a pull request.

    \b
    Required environment variables:
      GITHUB_TOKEN         Token with pull-requests: write (or use gh CLI)
    """
    from ciguard_cli.auth import resolve_github_token

    config = ctx.obj["config"]
    pr = pull_request_context(load_event(event_path))
    if pr is None:
        console.print("[yellow]Skipping PR comment: not a pull_request event[/yellow]")
        write_outputs({"comment_action": "skipped"})
        return

    if not marker.strip():
        raise click.UsageError("--marker is required and cannot be empty.")

    token = resolve_github_token()
    if not token:
        raise click.UsageError("No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.")

    enable_collapse = config.get("enable_collapse", True) if collapse is None else collapse
    plan = "" if exitcode == NO_CHANGES_EXITCODE else read_plan_output(plan_file)

    try:
        store = IssueCommentStore(get_repo(repo, token=token), pr.number)
        action = publish_plan_comment(
            store,
            pr.number,
            marker=marker,
            exitcode=exitcode,
            plan=plan,
            enable_collapse=enable_collapse,
            actor=actor,
            module_name=module_name,
        )
    except ValueError as e:
        raise click.UsageError(str(e))
    except GithubException as e:
        raise click.ClickException(f"GitHub API error while updating the plan comment: {e}")

    write_outputs({"comment_action": action})
    console.print(f"[green]Plan comment for {module_name}: {action}[/green]")
