"""
流水线阶段定义

职责：
1. 定义各阶段的名称、进度区间
2. 标记依赖外部工具链的阶段（非macOS或未请求打包时跳过）

阶段严格顺序执行，取消只在阶段之间生效。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StageEnum(str, Enum):
    """流水线阶段枚举"""
    PREPARE = "PREPARE"
    EXTRACT_TEMPLATE = "EXTRACT_TEMPLATE"
    EXPORT_ICONS = "EXPORT_ICONS"
    EXPORT_ASSETS = "EXPORT_ASSETS"
    PATCH_PROJECT = "PATCH_PROJECT"
    CODESIGN_DYLIBS = "CODESIGN_DYLIBS"
    MAKE_ARCHIVE = "MAKE_ARCHIVE"
    MAKE_IPA = "MAKE_IPA"


@dataclass
class PipelineStage:
    """流水线阶段"""
    name: str
    progress_start: int  # 进度起点（0-100）
    progress_end: int    # 进度终点
    requires_toolchain: bool = False


# iOS导出流水线各阶段配置
EXPORT_STAGES: list[PipelineStage] = [
    PipelineStage(StageEnum.PREPARE.value, 0, 5),
    PipelineStage(StageEnum.EXTRACT_TEMPLATE.value, 5, 40),
    PipelineStage(StageEnum.EXPORT_ICONS.value, 40, 45),
    PipelineStage(StageEnum.EXPORT_ASSETS.value, 45, 60),
    PipelineStage(StageEnum.PATCH_PROJECT.value, 60, 65),
    PipelineStage(StageEnum.CODESIGN_DYLIBS.value, 65, 70, requires_toolchain=True),
    PipelineStage(StageEnum.MAKE_ARCHIVE.value, 70, 90, requires_toolchain=True),
    PipelineStage(StageEnum.MAKE_IPA.value, 90, 100, requires_toolchain=True),
]
