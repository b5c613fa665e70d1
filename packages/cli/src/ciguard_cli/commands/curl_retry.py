"""curl-retry command: curl with exponential backoff on transient errors."""

from __future__ import annotations

import click

from ciguard_core.retry import run_curl_with_retry


@click.command(
    "curl-retry",
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.argument("curl_args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def curl_retry_cmd(ctx, curl_args: tuple[str, ...]):
    """Run curl, retrying connect failures, timeouts and receive errors.

    All arguments are passed to curl unchanged; curl's final exit code is
    this command's exit code.

    \b
    Environment variables:
      CURL_RETRY_MAX         Maximum attempts (default: 3)
      CURL_RETRY_BASE_DELAY  Base backoff delay in seconds (default: 1)
    """
    config = ctx.obj["config"]
    try:
        result = run_curl_with_retry(
            list(curl_args),
            max_attempts=config["curl_retry_max"],
            base_delay=config["curl_retry_base_delay"],
        )
    except FileNotFoundError:
        raise click.ClickException("curl is not installed or not on PATH.")

    stdout = click.get_binary_stream("stdout")
    stdout.write(result.stdout)
    stdout.flush()
    ctx.exit(result.exit_code)
