"""
流水线执行器 - 编排一次iOS导出

职责：
1. 按顺序执行各阶段（单线程、同步阻塞）
2. 更新任务进度并持久化 job.json
3. 阶段之间检查取消
4. 任一阶段失败即终止整个导出（不回滚已写出的文件）

数据流：
    PREPARE 组装配置数据 -> EXTRACT_TEMPLATE 解压并保留工程文件
    -> EXPORT_ICONS / EXPORT_ASSETS -> PATCH_PROJECT 补丁并落盘
    -> CODESIGN_DYLIBS -> MAKE_ARCHIVE -> MAKE_IPA

测试要点：
- test_execute_full_pipeline: 完整流水线执行
- test_missing_library_fails_after_extraction: 引擎库缺失
- test_validation_failure: 选项校验失败
- test_cancel_between_stages: 阶段间取消
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..config import RuntimeConfig, TemplateLayout, get_config, load_layout
from ..interfaces import (
    ConfigValidationError,
    ExportCancelled,
    IToolchain,
    PathCreationError,
    TemplateNotFoundError,
)
from ..models import IOSConfigData
from ..template import TemplateExtractor, TokenSubstitutionEngine
from ..xcode import (
    AssetExporter,
    IconCatalogGenerator,
    PbxIdAllocator,
    ProjectGraphPatcher,
    XcodeToolchain,
)
from .stages import EXPORT_STAGES, PipelineStage, StageEnum

if TYPE_CHECKING:
    from ..models import ExportJob

logger = logging.getLogger(__name__)


class ExportExecutor:
    """流水线执行器"""

    def __init__(
        self,
        config: RuntimeConfig | None = None,
        layout: TemplateLayout | None = None,
        toolchain: IToolchain | None = None,
    ):
        self.config = config or get_config()
        self.layout = layout or load_layout(self.config.templates.layout_path)
        self.engine = TokenSubstitutionEngine()
        self.extractor = TemplateExtractor(self.layout, self.engine)
        self.toolchain = toolchain or XcodeToolchain(self.config)

    def execute(self, job: ExportJob) -> None:
        """执行流水线"""
        if job.is_cancelled:
            logger.warning(f"[{job.job_id}] 任务已取消，不再执行")
            job.mark_cancelled()
            self._update_progress(job, message="导出已取消")
            raise ExportCancelled(f"导出已取消: {job.job_id}")

        job.mark_running()
        self._update_progress(job, message="导出开始")

        try:
            context: dict[str, Any] = {}
            for stage in EXPORT_STAGES:
                if job.is_cancelled:
                    raise ExportCancelled(f"导出已取消: {job.job_id}")
                self._execute_stage(job, stage, context)

            job.mark_succeeded()
            self._update_progress(job, message="导出完成")

        except ExportCancelled:
            logger.warning(f"[{job.job_id}] 导出在阶段 {job.progress.stage} 之前被取消")
            job.mark_cancelled()
            self._update_progress(job, message="导出已取消")
            raise

        except Exception as e:
            logger.exception(f"导出失败: {job.job_id}")
            job.mark_failed(str(e))
            self._update_progress(job, message=f"导出失败: {e}")
            raise

    def _execute_stage(self, job: ExportJob, stage: PipelineStage, context: dict) -> None:
        """执行单个阶段"""
        job.progress.stage = stage.name
        job.progress.percent = stage.progress_start
        logger.info(f"[{job.job_id}] 开始阶段: {stage.name}")
        self._update_progress(job, message=f"开始阶段: {stage.name}")

        if stage.requires_toolchain and not self._should_build(job):
            logger.warning(f"[{job.job_id}] 跳过阶段: {stage.name}（未启用打包或工具链）")
            job.add_flag("未构建ipa")
        else:
            try:
                if stage.name == StageEnum.PREPARE.value:
                    self._stage_prepare(job, context)

                elif stage.name == StageEnum.EXTRACT_TEMPLATE.value:
                    self._stage_extract(job, context)

                elif stage.name == StageEnum.EXPORT_ICONS.value:
                    self._stage_icons(job, context)

                elif stage.name == StageEnum.EXPORT_ASSETS.value:
                    self._stage_assets(job, context)

                elif stage.name == StageEnum.PATCH_PROJECT.value:
                    self._stage_patch_project(job, context)

                elif stage.name == StageEnum.CODESIGN_DYLIBS.value:
                    self._stage_codesign(job, context)

                elif stage.name == StageEnum.MAKE_ARCHIVE.value:
                    self._stage_archive(job, context)

                elif stage.name == StageEnum.MAKE_IPA.value:
                    self._stage_ipa(job, context)

            except Exception as e:
                logger.error(f"[{job.job_id}] 阶段失败 {stage.name}: {e}")
                job.add_flag(f"阶段失败:{stage.name}")
                raise

        job.progress.percent = stage.progress_end
        self._update_progress(job, message=f"完成阶段: {stage.name}")

    def _should_build(self, job: ExportJob) -> bool:
        return job.build_package and self.config.toolchain.enabled

    # === 阶段实现 ===

    def _stage_prepare(self, job: ExportJob, context: dict) -> None:
        """校验选项、定位模板、清理上次导出、组装配置数据"""
        errors = job.options.validate_for_export()
        if errors:
            raise ConfigValidationError("\n".join(errors))

        context["template_path"] = self._resolve_template(job)

        if not job.dest_dir.is_dir():
            raise PathCreationError(f"导出目录不存在: {job.dest_dir}")

        # 清理上次导出的残留，避免不再需要的文件干扰
        for leftover in (job.xcodeproj_path, job.core_path):
            if leftover.exists():
                logger.info(f"清理上次导出: {leftover}")
                shutil.rmtree(leftover)

        try:
            job.core_path.mkdir(exist_ok=True)
        except OSError as e:
            raise PathCreationError(f"无法创建目录 '{job.core_path}': {e}") from e

        config_data = IOSConfigData.build(
            job.options,
            binary_name=job.binary_name,
            plugins=job.plugins,
            project_name=job.project_name,
        )
        for module in self.layout.modules:
            enabled = job.options.get_capability(module.name)
            if enabled:
                logger.info(f"添加模块: {module.name}")
            config_data = config_data.with_module(module.name, enabled, module.file_id, module.build_id)
        context["config_data"] = config_data

    def _resolve_template(self, job: ExportJob) -> Path:
        """自定义模板优先，否则使用模板目录下的官方模板"""
        custom = job.options.custom_package(job.debug)
        if custom:
            template_path = Path(custom)
        else:
            template_path = self.config.get_template_path(self.layout.template_name)

        if not template_path.exists():
            raise TemplateNotFoundError(
                f"未找到导出模板: {template_path}（请下载官方模板或指定自定义模板路径）"
            )
        return template_path

    def _stage_extract(self, job: ExportJob, context: dict) -> None:
        """解压并配置Xcode工程"""
        self._update_progress(job, current_file=context["template_path"].name, message="解压模板中")
        result = self.extractor.extract(
            context["template_path"],
            job.dest_dir,
            options=job.options,
            config_data=context["config_data"],
            debug=job.debug,
        )
        # 必须在整个归档遍历完成后检查
        result.ensure_complete()

        context["extraction"] = result
        job.artifacts.project_dir = job.core_path
        job.progress.details.update({
            "files_written": len(result.written_files),
            "bytes_written": result.total_size,
        })

    def _stage_icons(self, job: ExportJob, context: dict) -> None:
        """导出图标"""
        iconset_dir = job.core_path / self.layout.iconset_dir
        logger.info(f"写入图标目录: {iconset_dir}")
        try:
            iconset_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PathCreationError(f"无法创建目录 '{iconset_dir}': {e}") from e

        IconCatalogGenerator(job.project_dir).export_icons(job.options, iconset_dir)
        job.artifacts.iconset_dir = iconset_dir

    def _stage_assets(self, job: ExportJob, context: dict) -> None:
        """导出插件与动态库资产"""
        exporter = AssetExporter(job.project_dir, self.layout.dylibs_dir)
        assets = exporter.export_all(job.core_path, job.plugins, job.libraries)
        context["assets"] = assets
        job.artifacts.exported_assets = len(assets)

    def _stage_patch_project(self, job: ExportJob, context: dict) -> None:
        """补丁工程文件并落盘"""
        patcher = ProjectGraphPatcher(PbxIdAllocator(self.layout.graph_id_seed))
        project_data = patcher.patch(
            context["extraction"].project_file_data,
            context.pop("assets"),
        )

        project_file = job.dest_dir / self.layout.rename(self.layout.project_file, job.binary_name)
        try:
            project_file.parent.mkdir(parents=True, exist_ok=True)
            project_file.write_bytes(project_data)
        except OSError as e:
            raise PathCreationError(f"无法写入 '{project_file}': {e}") from e

        job.artifacts.project_file = project_file

    def _stage_codesign(self, job: ExportJob, context: dict) -> None:
        """签名动态库"""
        dylibs_dir = job.core_path / self.layout.dylibs_dir
        signed = self.toolchain.codesign_dylibs(dylibs_dir, job.options.sign_identity(job.debug))
        job.artifacts.signed_dylibs = signed

    def _stage_archive(self, job: ExportJob, context: dict) -> None:
        """生成 .xcarchive"""
        self.toolchain.archive(job.xcodeproj_path, job.binary_name, job.debug, job.archive_path)
        job.artifacts.archive_path = job.archive_path

    def _stage_ipa(self, job: ExportJob, context: dict) -> None:
        """导出 .ipa"""
        self.toolchain.export_ipa(job.archive_path, job.export_options_plist, job.dest_dir)
        job.artifacts.ipa_dir = job.dest_dir

    # === 进度 ===

    def _update_progress(
        self,
        job: ExportJob,
        *,
        message: str | None = None,
        current_file: str | None = None,
    ) -> None:
        if message is not None:
            job.progress.message = message
        if current_file is not None:
            job.progress.current_file = current_file
        self._persist_job(job)

    def _persist_job(self, job: ExportJob) -> None:
        job_dir = self.config.get_job_dir(job.job_id)
        job_dir.mkdir(parents=True, exist_ok=True)
        job_file = job_dir / "job.json"
        with open(job_file, "w", encoding="utf-8") as f:
            json.dump(job.model_dump(mode="json"), f, ensure_ascii=False, indent=2, default=str)
