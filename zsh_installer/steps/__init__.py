from .step_10_package_manager import EnsurePackageManagerStep
from .step_20_shell import EnsureShellStep
from .step_30_framework import EnsureFrameworkStep
from .step_40_plugins import EnsurePluginStep
from .step_50_configure_plugins import ConfigurePluginsStep
from .step_60_default_shell import DefaultShellStep
from .step_70_reload_config import ReloadConfigStep

__all__ = [
    "EnsurePackageManagerStep",
    "EnsureShellStep",
    "EnsureFrameworkStep",
    "EnsurePluginStep",
    "ConfigurePluginsStep",
    "DefaultShellStep",
    "ReloadConfigStep",
]
