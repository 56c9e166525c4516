"""
流水线模块 - 导出编排与任务管理

子模块：
- stages: 流水线各阶段定义
- executor: 流水线执行器
- job_manager: 任务管理
"""

from .stages import EXPORT_STAGES, PipelineStage, StageEnum
from .executor import ExportExecutor
from .job_manager import JobManager

__all__ = [
    "PipelineStage",
    "StageEnum",
    "EXPORT_STAGES",
    "ExportExecutor",
    "JobManager",
]
