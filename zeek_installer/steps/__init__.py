from .step_10_check_system import CheckSystemStep
from .step_20_disable_legacy import DisableLegacyStep
from .step_30_check_unmanaged import CheckUnmanagedStep
from .step_40_install_runtime import InstallRuntimeStep
from .step_50_install_agent import InstallAgentStep
from .step_60_cleanup import CleanupStep

__all__ = [
    "CheckSystemStep",
    "DisableLegacyStep",
    "CheckUnmanagedStep",
    "InstallRuntimeStep",
    "InstallAgentStep",
    "CleanupStep",
]
