"""Configuration domain exports."""

from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .loader import ConfigurationError, load_configuration, resolve_configuration
from .runtime_settings import (
    AzureSettings,
    BackendSettings,
    Configuration,
    OutputSettings,
    TerraformSettings,
)

__all__ = [
    "AzureSettings",
    "BackendSettings",
    "Configuration",
    "OutputSettings",
    "TerraformSettings",
    "ConfigurationError",
    "load_configuration",
    "resolve_configuration",
    "DEFAULT_CONFIG_FILENAME",
    "build_placeholder_configuration",
    "write_placeholder_configuration",
]
