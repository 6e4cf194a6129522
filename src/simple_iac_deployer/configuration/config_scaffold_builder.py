"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "deploy.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Deployment configuration for simple-iac-deployer.
# Every setting is optional. Relative paths resolve against this file's directory.

terraform:
  # Directory holding the Terraform definitions (*.tf).
  working_dir: "."
  binary: "terraform"
  # Saved plan artifact passed from plan to apply.
  plan_file: "tfplan"
  # Extra -var entries. environment and location are always supplied.
  variables: {}

azure:
  binary: "az"

backend:
  # Defaults to rg-tfstate-<environment>.
  resource_group_name: null
  # Set this to reuse the same state storage on every run.
  # When empty, a new randomized name is generated per run.
  storage_account_name: null
  container_name: "tfstate"

output:
  report_dir: "reports"
  log_dir: "logs"
  # Open the HTML report in the default viewer after interactive runs.
  open_report: true
"""


def build_placeholder_configuration() -> str:
    """Build a YAML deployment configuration with defaults and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the deployment configuration scaffold to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
