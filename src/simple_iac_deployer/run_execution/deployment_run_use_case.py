"""Deployment run use-case service.

Runs the fixed pipeline

    Prerequisites -> Select subscription -> [Ensure backend] -> Terraform init
    -> Terraform plan -> (Confirmation) -> Terraform apply -> Collect results

and writes the report afterwards, whatever happened before. A failing step
stops the remaining provisioning steps; the report always sees the partial
state.
"""

from __future__ import annotations

import random
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from simple_iac_deployer.account_selection import Account, AccountSelector
from simple_iac_deployer.deployment_errors import DeploymentError, RunCancelled, UnexpectedError
from simple_iac_deployer.operator_prompts import ClickPrompter, Prompter
from simple_iac_deployer.prerequisites import check_prerequisites, required_tools
from simple_iac_deployer.provisioning import PlanApplyDriver
from simple_iac_deployer.remote_state import BackendConfig, BackendCredentials, BackendProvisioner
from simple_iac_deployer.result_collection import ResultCollector
from simple_iac_deployer.results_writing import ReportContext, write_run_report
from simple_iac_deployer.run_logging import RunLogger, create_session_logger, session_log_path
from simple_iac_deployer.run_tracking import RunState, StepStatus
from simple_iac_deployer.tool_invocation import SubprocessToolRunner, ToolRunner

from .run_contracts import DeploymentRequest, RunOutcome

INTERRUPTED_MESSAGE = (
    "Interrupted by operator. A tool may have been stopped mid-operation; "
    "inspect the Terraform state and backend before the next run."
)


@dataclass
class _RunResources:
    """What the pipeline learned so far. Read by the report in every exit path."""

    account: Account | None = None
    backend: BackendConfig | None = None
    credentials: BackendCredentials | None = None


def execute_deployment_run(  # pylint: disable=too-many-arguments
    request: DeploymentRequest,
    *,
    runner: ToolRunner | None = None,
    prompter: Prompter | None = None,
    logger: RunLogger | None = None,
    rng: random.Random | None = None,
    state: RunState | None = None,
) -> RunOutcome:
    """Execute one deployment run and return its outcome. Never raises for step failures."""
    run_state = state or RunState()
    settings = request.configuration
    log_path = session_log_path(settings.output.log_dir, request.environment, run_state.started_at)
    run_logger = logger or create_session_logger(log_path, verbose=request.verbose)
    tool_runner = runner or SubprocessToolRunner()
    operator = None if request.unattended else (prompter or ClickPrompter())
    resources = _RunResources()

    run_logger.info(
        f"Starting {request.mode} run for environment '{request.environment}' "
        f"in {request.location}"
    )
    try:
        _run_pipeline(
            request=request,
            state=run_state,
            resources=resources,
            runner=tool_runner,
            prompter=operator,
            logger=run_logger,
            rng=rng,
        )
    except DeploymentError as exc:
        _record_failure(run_state, run_logger, f"{type(exc).__name__}: {exc}")
    except RunCancelled as exc:
        run_state.cancelled = True
        run_logger.warning(f"Run cancelled: {exc}")
    except KeyboardInterrupt:
        _record_failure(
            run_state, run_logger, f"{UnexpectedError.__name__}: {INTERRUPTED_MESSAGE}"
        )
    except Exception as exc:  # pylint: disable=broad-exception-caught
        _record_failure(
            run_state, run_logger, f"{UnexpectedError.__name__}: {type(exc).__name__}: {exc}"
        )
    finally:
        run_state.finalize()
        report_path = _write_report(request, run_state, resources, run_logger, log_path)

    _log_final_status(run_state, run_logger)
    return RunOutcome(state=run_state, report_path=report_path, log_path=log_path)


def _run_pipeline(  # pylint: disable=too-many-arguments
    *,
    request: DeploymentRequest,
    state: RunState,
    resources: _RunResources,
    runner: ToolRunner,
    prompter: Prompter | None,
    logger: RunLogger,
    rng: random.Random | None,
) -> None:
    settings = request.configuration
    az_binary = settings.azure.binary

    with _pipeline_step(state, logger, "Check prerequisites"):
        check_prerequisites(
            runner, logger, required_tools(az_binary, settings.terraform.binary)
        )

    with _pipeline_step(state, logger, "Select subscription"):
        selector = AccountSelector(runner, logger, prompter=prompter, az_binary=az_binary)
        account = selector.select_account(request.subscription_id)
        resources.account = account

    tool_env = {
        "ARM_SUBSCRIPTION_ID": account.id,
        "ARM_TENANT_ID": account.tenant_id,
    }

    if request.report_only:
        logger.info("Report-only mode: skipping backend, plan and apply")
    else:
        _provision(
            request=request,
            state=state,
            resources=resources,
            runner=runner,
            prompter=prompter,
            logger=logger,
            rng=rng,
            tool_env=tool_env,
        )

    with _pipeline_step(state, logger, "Collect results"):
        collector = ResultCollector(
            runner,
            logger,
            terraform_dir=settings.terraform.working_dir,
            terraform_binary=settings.terraform.binary,
            az_binary=az_binary,
            tool_env=tool_env,
        )
        state.outputs = collector.collect_outputs()
        state.resources = collector.collect_resources(request.environment)
        for warning in collector.warnings:
            state.record_warning(warning)


def _provision(  # pylint: disable=too-many-arguments
    *,
    request: DeploymentRequest,
    state: RunState,
    resources: _RunResources,
    runner: ToolRunner,
    prompter: Prompter | None,
    logger: RunLogger,
    rng: random.Random | None,
    tool_env: dict[str, str],
) -> None:
    settings = request.configuration
    if request.skip_backend:
        state.skip_step("Ensure backend")
        logger.info("Skipping backend provisioning; using the backend Terraform already knows")
    else:
        with _pipeline_step(state, logger, "Ensure backend"):
            provisioner = BackendProvisioner(
                runner,
                logger,
                settings=settings.backend,
                az_binary=settings.azure.binary,
                rng=rng,
            )
            resources.backend, resources.credentials = provisioner.ensure_backend(
                request.environment, request.location
            )

    driver = PlanApplyDriver(
        runner,
        logger,
        settings.terraform,
        environment=request.environment,
        location=request.location,
        tool_env=tool_env,
    )
    with _pipeline_step(state, logger, "Terraform init"):
        driver.init(resources.backend, resources.credentials)
    with _pipeline_step(state, logger, "Terraform plan"):
        driver.plan()
    if prompter is not None:
        with _pipeline_step(state, logger, "Confirmation"):
            if not driver.confirm(prompter):
                raise RunCancelled("Deployment declined by operator; nothing was applied.")
    with _pipeline_step(state, logger, "Terraform apply"):
        driver.apply()


@contextmanager
def _pipeline_step(state: RunState, logger: RunLogger, name: str) -> Iterator[None]:
    step = state.start_step(name)
    logger.info(f"== {name}")
    try:
        yield
    except RunCancelled:
        step.status = StepStatus.SKIPPED
        step.finished_at = state.clock()
        raise
    except BaseException:
        state.fail_step(step)
        raise
    state.complete_step(step)


def _record_failure(state: RunState, logger: RunLogger, message: str) -> None:
    state.record_error(message)
    logger.error(message)


def _write_report(
    request: DeploymentRequest,
    state: RunState,
    resources: _RunResources,
    logger: RunLogger,
    log_path: Path,
) -> Path | None:
    context = ReportContext(
        environment=request.environment,
        location=request.location,
        mode=request.mode,
        log_path=log_path,
    )
    try:
        report_path = write_run_report(
            request.configuration.output.report_dir,
            state,
            context,
            account=resources.account,
            backend=resources.backend,
        )
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.error(f"Could not write run report: {exc}")
        return None
    logger.info(f"Report written to {report_path}")
    return report_path


def _log_final_status(state: RunState, logger: RunLogger) -> None:
    if state.errors:
        logger.error(f"Deployment FAILED with {len(state.errors)} error(s)")
    elif state.cancelled:
        logger.warning("Deployment CANCELLED")
    else:
        logger.success("Deployment completed successfully")
