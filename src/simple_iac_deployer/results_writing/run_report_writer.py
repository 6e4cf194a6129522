"""HTML run report and console summary rendering."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from simple_iac_deployer.account_selection import Account
from simple_iac_deployer.remote_state import BackendConfig
from simple_iac_deployer.run_tracking import RunState

from .report_models import ReportContext

TEMPLATES_DIR = Path(__file__).parent / "templates"
REPORT_TEMPLATE = "run_report.html.j2"


def _format_timestamp(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def _format_duration(seconds: float | None) -> str:
    if seconds is None:
        return "-"
    minutes, remainder = divmod(int(round(seconds)), 60)
    if minutes:
        return f"{minutes}m {remainder:02d}s"
    return f"{remainder}s"


def _build_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "j2"]),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["timestamp"] = _format_timestamp
    env.filters["duration"] = _format_duration
    return env


_ENVIRONMENT = _build_environment()


def render_run_report(
    state: RunState,
    context: ReportContext,
    account: Account | None = None,
    backend: BackendConfig | None = None,
) -> str:
    """Render the self-contained HTML report. Absent inputs omit their sections."""
    template = _ENVIRONMENT.get_template(REPORT_TEMPLATE)
    return template.render(
        state=state,
        status=state.status.value,
        context=context,
        account=account,
        backend=backend,
        outputs=state.outputs,
        resources=state.resources,
        generated_at=datetime.now(UTC),
    )


def report_path_for(output_dir: Path, environment: str, started_at: datetime) -> Path:
    return output_dir / f"deployment-report-{environment}-{started_at:%Y%m%d-%H%M%S}.html"


def write_run_report(
    output_dir: Path | str,
    state: RunState,
    context: ReportContext,
    account: Account | None = None,
    backend: BackendConfig | None = None,
) -> Path:
    """Render the run report and write it under `output_dir`."""
    output = report_path_for(Path(output_dir), context.environment, state.started_at)
    html = render_run_report(state, context, account=account, backend=backend)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(html, encoding="utf-8")
    return output.resolve()


def format_summary_table(
    state: RunState,
    context: ReportContext,
    report_path: Path | None = None,
) -> str:
    """Plain-text post-run summary for the console."""
    rows: list[tuple[str, str]] = [
        ("Status", state.status.value),
        ("Environment", context.environment),
        ("Location", context.location),
        ("Mode", context.mode),
        ("Duration", _format_duration(state.duration_seconds)),
        ("Steps", str(len(state.steps))),
        ("Resources", str(len(state.resources))),
        ("Outputs", str(len(state.outputs))),
        ("Errors", str(len(state.errors))),
        ("Warnings", str(len(state.warnings))),
    ]
    if context.log_path is not None:
        rows.append(("Log file", str(context.log_path)))
    if report_path is not None:
        rows.append(("Report", str(report_path)))

    label_width = max(len(label) for label, _ in rows)
    value_width = max(len(value) for _, value in rows)
    border = f"+-{'-' * label_width}-+-{'-' * value_width}-+"
    lines = [border]
    for label, value in rows:
        lines.append(f"| {label.ljust(label_width)} | {value.ljust(value_width)} |")
    lines.append(border)
    for step in state.steps:
        lines.append(
            f"  {step.status.value:<9} {step.name} ({_format_duration(step.duration_seconds)})"
        )
    for error in state.errors:
        lines.append(f"  ERROR: {error}")
    return "\n".join(lines)
