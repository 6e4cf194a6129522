"""CLI orchestration integration tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner
from simple_iac_deployer import cli as cli_module
from simple_iac_deployer.cli import cli


def _write_config(tmp_path: Path) -> Path:
    (tmp_path / "infra").mkdir()
    path = tmp_path / "deploy.yaml"
    path.write_text(
        """
terraform:
  working_dir: infra
backend:
  storage_account_name: sttfstatedev001
output:
  report_dir: reports
  log_dir: logs
""",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def patched_tools(monkeypatch, healthy_runner):
    launched: list[str] = []
    monkeypatch.setattr(cli_module, "SubprocessToolRunner", lambda: healthy_runner)
    monkeypatch.setattr(cli_module.click, "launch", launched.append)
    return healthy_runner, launched


def test_generate_config_command_writes_scaffold(tmp_path: Path) -> None:
    output_path = tmp_path / "deploy.yaml"

    result = CliRunner().invoke(cli, ["generate-config", "--output", str(output_path)])

    assert result.exit_code == 0
    assert output_path.exists()
    assert "terraform:" in output_path.read_text(encoding="utf-8")


def test_unattended_deploy_writes_report_and_summary(tmp_path: Path, patched_tools) -> None:
    tool_runner, launched = patched_tools
    config_path = _write_config(tmp_path)

    result = CliRunner().invoke(
        cli, ["deploy", "-e", "dev", "--auto-approve", "--config", str(config_path)]
    )

    assert result.exit_code == 0, result.output
    assert "| Status" in result.output
    assert "SUCCESS" in result.output
    reports = list((tmp_path / "reports").glob("deployment-report-dev-*.html"))
    assert len(reports) == 1
    assert list((tmp_path / "logs").glob("deploy-dev-*.log"))
    assert tool_runner.count("terraform", "apply") == 1
    assert launched == []


def test_interactive_deploy_reads_answers_and_opens_report(
    tmp_path: Path, patched_tools
) -> None:
    tool_runner, launched = patched_tools
    config_path = _write_config(tmp_path)

    result = CliRunner().invoke(
        cli,
        ["deploy", "--config", str(config_path)],
        input="1\nyes\n",
    )

    assert result.exit_code == 0, result.output
    assert "Select a subscription" in result.output
    assert tool_runner.count("terraform", "apply") == 1
    assert len(launched) == 1
    assert launched[0].endswith(".html")


def test_declined_deploy_exits_cleanly_without_apply(tmp_path: Path, patched_tools) -> None:
    tool_runner, _ = patched_tools
    config_path = _write_config(tmp_path)

    result = CliRunner().invoke(
        cli,
        ["deploy", "--config", str(config_path), "--no-open"],
        input="1\nno\n",
    )

    assert result.exit_code == 0, result.output
    assert "CANCELLED" in result.output
    assert not tool_runner.called("terraform", "apply")


@pytest.mark.parametrize(
    "selection",
    [["-s", "Contoso Dev"], []],
    ids=["at-confirmation", "at-subscription-choice"],
)
def test_closed_input_cancels_deploy_without_apply(
    tmp_path: Path, patched_tools, selection
) -> None:
    tool_runner, _ = patched_tools
    config_path = _write_config(tmp_path)

    result = CliRunner().invoke(
        cli,
        ["deploy", "--config", str(config_path), "--no-open", *selection],
        input="",
    )

    assert result.exit_code == 0, result.output
    assert "CANCELLED" in result.output
    assert "UnexpectedError" not in result.output
    assert not tool_runner.called("terraform", "apply")


def test_failed_plan_returns_non_zero_exit_code(tmp_path: Path, patched_tools, capsys) -> None:
    tool_runner, _ = patched_tools
    tool_runner.on("terraform", "plan", returncode=1, stderr="Error: Invalid reference")
    config_path = _write_config(tmp_path)

    exit_code = cli_module.main(["deploy", "--auto-approve", "--config", str(config_path)])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "ERROR: PlanFailed" in captured.out
    assert "Deployment FAILED" in captured.err
    assert list((tmp_path / "reports").glob("*.html"))
