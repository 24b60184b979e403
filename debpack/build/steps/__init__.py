"""构建步骤"""

from .build_step import BuildStep
from .data_archive_step import DataArchiveStep
from .control_archive_step import ControlArchiveStep
from .package_assembly_step import PackageAssemblyStep

__all__ = [
    "BuildStep",
    "DataArchiveStep",
    "ControlArchiveStep",
    "PackageAssemblyStep",
]
