"""
数据模型层 - 定义系统核心数据结构

所有模块通过这些模型交互，实现解耦：
- ExportOptions: 导出预设选项（只读）
- IOSConfigData: 标记替换所需的派生字符串
- PluginContribution: 导出插件贡献
- ExportedAsset: 复制进输出目录的资产
- ExportJob: 任务状态与生命周期
"""

from .asset import ExportedAsset
from .config_data import IOSConfigData, PluginContribution
from .job import ExportJob, JobArtifacts, JobProgress, JobStatus
from .options import (
    EXPORT_METHODS,
    SUPPORTED_ARCHITECTURES,
    ExportOptions,
    is_bundle_identifier_valid,
)

__all__ = [
    "ExportOptions",
    "EXPORT_METHODS",
    "SUPPORTED_ARCHITECTURES",
    "is_bundle_identifier_valid",
    "IOSConfigData",
    "PluginContribution",
    "ExportedAsset",
    "ExportJob",
    "JobArtifacts",
    "JobProgress",
    "JobStatus",
]
