"""Command line interface entry point."""

from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

import click

from simple_iac_deployer.configuration import (
    DEFAULT_CONFIG_FILENAME,
    ConfigurationError,
    resolve_configuration,
    write_placeholder_configuration,
)
from simple_iac_deployer.operator_prompts import ClickPrompter
from simple_iac_deployer.results_writing import ReportContext, format_summary_table
from simple_iac_deployer.run_execution import (
    DEFAULT_LOCATION,
    ENVIRONMENTS,
    DeploymentRequest,
    RunOutcome,
    execute_deployment_run,
)
from simple_iac_deployer.tool_invocation import SubprocessToolRunner


class CliError(Exception):
    """Custom CLI error."""


class RunFailed(Exception):
    """Raised after a deployment run that ended with errors."""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="simple-iac-deployer")
def cli() -> None:
    """Terraform deployment orchestrator for Azure environments."""


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML deployment configuration to write",
)
def generate_config(output_path: str) -> None:
    """Generate a commented YAML deployment configuration."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


# pylint: disable=too-many-arguments
@cli.command(name="deploy")
@click.option(
    "--environment",
    "-e",
    type=click.Choice(ENVIRONMENTS),
    default="dev",
    show_default=True,
    help="Target environment; scopes backend names and resource tags",
)
@click.option(
    "--location",
    "-l",
    default=DEFAULT_LOCATION,
    show_default=True,
    help="Azure region for the backend and the deployment",
)
@click.option(
    "--subscription-id",
    "-s",
    required=False,
    help="Subscription id or name. Prompts for a choice when omitted.",
)
@click.option(
    "--auto-approve",
    "--unattended",
    "unattended",
    is_flag=True,
    default=False,
    help="Never prompt; apply right after a successful plan.",
)
@click.option(
    "--skip-backend",
    is_flag=True,
    default=False,
    help="Do not create the remote state backend; use the one Terraform already knows.",
)
@click.option(
    "--report-only",
    is_flag=True,
    default=False,
    help="Skip plan and apply; only collect outputs and resources into a report.",
)
@click.option(
    "--config",
    "config_path",
    required=False,
    type=click.Path(path_type=str),
    help=f"Path to the YAML deployment configuration (default: ./{DEFAULT_CONFIG_FILENAME})",
)
@click.option(
    "--report-dir",
    required=False,
    type=click.Path(path_type=str),
    help="Directory for the HTML run report",
)
@click.option(
    "--log-dir",
    required=False,
    type=click.Path(path_type=str),
    help="Directory for the session log file",
)
@click.option("--no-open", is_flag=True, default=False, help="Do not open the report afterwards.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Show debug messages.")
def deploy(
    environment: str,
    location: str,
    subscription_id: str | None,
    unattended: bool,
    skip_backend: bool,
    report_only: bool,
    config_path: str | None,
    report_dir: str | None,
    log_dir: str | None,
    no_open: bool,
    verbose: bool,
) -> None:
    """Plan and apply the Terraform definitions, then write a run report."""
    try:
        configuration = resolve_configuration(config_path)
    except ConfigurationError as exc:
        raise CliError(str(exc)) from exc

    output = configuration.output
    if report_dir:
        output = replace(output, report_dir=Path(report_dir).resolve())
    if log_dir:
        output = replace(output, log_dir=Path(log_dir).resolve())
    if no_open:
        output = replace(output, open_report=False)
    configuration = replace(configuration, output=output)

    request = DeploymentRequest(
        environment=environment,
        location=location,
        subscription_id=subscription_id,
        unattended=unattended,
        skip_backend=skip_backend,
        report_only=report_only,
        verbose=verbose,
        configuration=configuration,
    )
    outcome = execute_deployment_run(
        request,
        runner=SubprocessToolRunner(),
        prompter=None if unattended else ClickPrompter(),
    )
    _present_outcome(request, outcome)
    if outcome.exit_code != 0:
        raise RunFailed(f"Deployment {outcome.status.value}. See {outcome.log_path}")


# pylint: enable=too-many-arguments


def _present_outcome(request: DeploymentRequest, outcome: RunOutcome) -> None:
    context = ReportContext(
        environment=request.environment,
        location=request.location,
        mode=request.mode,
        log_path=outcome.log_path,
    )
    click.echo("")
    click.echo(format_summary_table(outcome.state, context, outcome.report_path))
    if outcome.report_path is None:
        return
    if request.unattended or not request.configuration.output.open_report:
        return
    click.launch(str(outcome.report_path))


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except RunFailed as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
