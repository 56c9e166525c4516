"""
任务管理器 - 任务创建/查询/更新/取消

职责：
1. 创建导出任务并分配ID
2. 任务状态持久化（storage/jobs/<id>/job.json）
3. 任务查询与取消（执行器在阶段之间检查取消状态）
"""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..config import RuntimeConfig, get_config
from ..interfaces import ConfigValidationError, IJobManager
from ..models import ExportJob, ExportOptions, JobStatus, PluginContribution


class JobManager(IJobManager):
    """任务管理器实现"""

    def __init__(self, config: RuntimeConfig | None = None):
        self.config = config or get_config()
        self._jobs: dict[str, ExportJob] = {}  # 内存缓存

    def create_job(
        self,
        export_path: Path,
        debug: bool,
        options: ExportOptions | dict[str, Any] | None = None,
        plugins: list[PluginContribution] | None = None,
        libraries: list[str] | None = None,
        project_dir: Path | None = None,
        project_name: str = "",
        build_package: bool = True,
    ) -> ExportJob:
        """创建任务"""
        if isinstance(options, dict):
            try:
                options = ExportOptions.from_preset(options)
            except ValidationError as e:
                messages = [
                    f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
                ]
                raise ConfigValidationError("导出预设无效:\n" + "\n".join(messages)) from e

        job = ExportJob(
            job_id=str(uuid.uuid4()),
            export_path=Path(export_path),
            debug=debug,
            options=options or ExportOptions(),
            plugins=plugins or [],
            libraries=libraries or [],
            project_dir=project_dir or Path("."),
            project_name=project_name,
            build_package=build_package,
        )

        self._jobs[job.job_id] = job
        self._persist_job(job)
        return job

    def get_job(self, job_id: str) -> ExportJob | None:
        """获取任务"""
        if job_id in self._jobs:
            return self._jobs[job_id]

        job = self._load_job(job_id)
        if job:
            self._jobs[job_id] = job
        return job

    def update_job(self, job: ExportJob) -> None:
        """更新任务状态"""
        self._jobs[job.job_id] = job
        self._persist_job(job)

    def cancel_job(self, job_id: str) -> bool:
        """取消任务（运行中的任务在当前阶段结束后停止）"""
        job = self.get_job(job_id)
        if not job:
            return False

        if job.status in [JobStatus.QUEUED, JobStatus.RUNNING]:
            job.status = JobStatus.CANCELLED
            self.update_job(job)
            return True

        return False

    def list_jobs(
        self,
        status: JobStatus | None = None,
        limit: int = 100,
    ) -> list[ExportJob]:
        """列出任务"""
        jobs = list(self._jobs.values())

        if status:
            jobs = [j for j in jobs if j.status == status]

        # 按创建时间降序
        jobs.sort(key=lambda j: j.created_at, reverse=True)

        return jobs[:limit]

    def _persist_job(self, job: ExportJob) -> None:
        """持久化任务"""
        job_dir = self.config.get_job_dir(job.job_id)
        job_dir.mkdir(parents=True, exist_ok=True)

        job_file = job_dir / "job.json"
        with open(job_file, "w", encoding="utf-8") as f:
            json.dump(job.model_dump(mode="json"), f, ensure_ascii=False, indent=2, default=str)

    def _load_job(self, job_id: str) -> ExportJob | None:
        """从磁盘加载任务"""
        job_file = self.config.get_job_dir(job_id) / "job.json"

        if not job_file.exists():
            return None

        try:
            with open(job_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            return ExportJob(**data)
        except (OSError, ValueError):
            return None
