"""
任务模型 - 定义导出任务状态与生命周期

一次导出动作对应一个任务；输出路径决定目标目录与二进制名：
    /out/MyGame.ipa -> dest_dir=/out, binary_name=MyGame
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from .config_data import PluginContribution
from .options import ExportOptions


class JobStatus(str, Enum):
    """任务状态枚举"""
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class JobArtifacts(BaseModel):
    """任务产物路径"""
    project_dir: Path | None = None
    project_file: Path | None = None
    iconset_dir: Path | None = None
    archive_path: Path | None = None
    ipa_dir: Path | None = None
    exported_assets: int = 0
    signed_dylibs: list[Path] = Field(default_factory=list)


class JobProgress(BaseModel):
    """任务进度"""
    stage: str = "INIT"
    percent: int = 0
    current_file: str | None = None
    message: str = ""
    details: dict[str, int | str | float] = Field(default_factory=dict)


class ExportJob(BaseModel):
    """导出任务实体"""
    job_id: str = Field(..., description="UUID")

    # 输入
    export_path: Path
    debug: bool = False
    options: ExportOptions = Field(default_factory=ExportOptions)
    plugins: list[PluginContribution] = Field(default_factory=list)
    libraries: list[str] = Field(default_factory=list, description="GDNative动态库路径")
    project_dir: Path = Path(".")
    project_name: str = ""
    build_package: bool = True

    # 状态
    status: JobStatus = JobStatus.QUEUED
    progress: JobProgress = Field(default_factory=JobProgress)

    # 产物
    artifacts: JobArtifacts = Field(default_factory=JobArtifacts)

    # 结果
    flags: list[str] = Field(default_factory=list, description="告警标记")
    errors: list[str] = Field(default_factory=list, description="错误信息")

    # 时间戳
    created_at: datetime = Field(default_factory=datetime.now)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    # === 输出路径 ===

    @property
    def dest_dir(self) -> Path:
        return self.export_path.parent

    @property
    def binary_name(self) -> str:
        return self.export_path.stem

    @property
    def core_path(self) -> Path:
        """<dest>/<binary>：工程源码目录"""
        return self.dest_dir / self.binary_name

    @property
    def xcodeproj_path(self) -> Path:
        return self.dest_dir / f"{self.binary_name}.xcodeproj"

    @property
    def archive_path(self) -> Path:
        return self.dest_dir / f"{self.binary_name}.xcarchive"

    @property
    def export_options_plist(self) -> Path:
        kind = "ad_hoc" if self.debug else "app_store"
        return self.core_path / f"export_options_{kind}.plist"

    # === 生命周期 ===

    @property
    def is_cancelled(self) -> bool:
        return self.status == JobStatus.CANCELLED

    def mark_running(self, stage: str = "PREPARE") -> None:
        """标记为运行中"""
        self.status = JobStatus.RUNNING
        self.started_at = datetime.now()
        self.progress.stage = stage

    def mark_succeeded(self) -> None:
        """标记为成功"""
        self.status = JobStatus.SUCCEEDED
        self.finished_at = datetime.now()
        self.progress.percent = 100

    def mark_failed(self, error: str) -> None:
        """标记为失败"""
        self.status = JobStatus.FAILED
        self.finished_at = datetime.now()
        self.errors.append(error)

    def mark_cancelled(self) -> None:
        self.status = JobStatus.CANCELLED
        self.finished_at = datetime.now()

    def add_flag(self, flag: str) -> None:
        """添加告警标记（不中断）"""
        if flag not in self.flags:
            self.flags.append(flag)
