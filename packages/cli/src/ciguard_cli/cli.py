"""CLI entry point for ciguard.

Commands:
  classify-plan  show how a Terraform plan would be classified
  plan-comment   post, update or delete the Terraform plan PR comment
  coverage-gate  enforce the diff-coverage threshold (with override)
  curl-retry     run curl with retry on transient network errors
"""

from __future__ import annotations

import importlib.metadata

import click

from ciguard_cli.commands.classify import classify_cmd
from ciguard_cli.commands.coverage_gate import coverage_gate_cmd
from ciguard_cli.commands.curl_retry import curl_retry_cmd
from ciguard_cli.commands.plan_comment import plan_comment_cmd


def _build_sink(config: dict):
    """Instantiate the telemetry sink from config.

    An AXIOM_TOKEN selects AxiomSink; without one every event is dropped by
    NoOpSink. Neither ciguard_core nor ciguard_telemetry know about the CLI
    config format.
    """
    from ciguard_telemetry.noop import NoOpSink

    token = config.get("axiom_token")
    if not token:
        return NoOpSink()

    from ciguard_telemetry.axiom import AxiomSink

    return AxiomSink(token=token, url=config["telemetry_url"])


@click.group()
@click.version_option(
    version=importlib.metadata.version("ciguard"),
    prog_name="ciguard",
)
@click.option(
    "--config",
    "config_path",
    default=".ciguard.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="CIGUARD_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """CI helpers for Terraform plan comments, coverage gating and curl retries."""
    from ciguard_core.config import load_config
    from ciguard_cli.logs import configure_logging

    configure_logging(verbose)
    ctx.ensure_object(dict)

    config = load_config(config_path)
    sink = _build_sink(config)
    ctx.obj["config"] = config
    ctx.obj["sink"] = sink
    ctx.call_on_close(sink.close)


main.add_command(classify_cmd)
main.add_command(plan_comment_cmd)
main.add_command(coverage_gate_cmd)
main.add_command(curl_retry_cmd)
