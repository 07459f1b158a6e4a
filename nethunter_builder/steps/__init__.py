from .step_00_prepare_workspace import PrepareWorkspaceStep
from .step_10_fetch_sources import FetchSourcesStep
from .step_20_provision_toolchain import ProvisionToolchainStep
from .step_30_resolve_config import ResolveConfigStep
from .step_40_build_kernel import BuildKernelStep
from .step_50_package_kernel import PackageKernelStep
from .step_60_assemble_installer import AssembleInstallerStep
from .step_90_report import ReportStep

__all__ = [
    "PrepareWorkspaceStep",
    "FetchSourcesStep",
    "ProvisionToolchainStep",
    "ResolveConfigStep",
    "BuildKernelStep",
    "PackageKernelStep",
    "AssembleInstallerStep",
    "ReportStep",
]
