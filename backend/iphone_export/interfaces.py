"""
模块接口契约 - 定义各模块的抽象接口

设计原则：
1. 模块间通过接口通信，不直接依赖具体实现
2. 每个接口定义清晰的输入输出类型
3. 便于单元测试和mock替换

使用方式：
    from iphone_export.interfaces import IAssetExporter

    class MyAssetExporter(IAssetExporter):
        def export_assets(self, out_dir, assets, is_framework) -> list[ExportedAsset]:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import ExportedAsset, ExportJob, ExportOptions, IOSConfigData


# ============================================================================
# 模板处理接口
# ============================================================================

class ISubstitutionEngine(ABC):
    """标记替换引擎接口 - 向工程/配置文件注入配置"""

    @abstractmethod
    def fix_config_file(
        self,
        data: bytes,
        options: ExportOptions,
        config_data: IOSConfigData,
        debug: bool,
    ) -> bytes:
        """
        逐行替换 $marker 标记

        Args:
            data: 原始文件内容（UTF-8）
            options: 导出选项
            config_data: 本次导出的配置数据
            debug: 是否为调试构建

        Returns:
            替换后的文件内容
        """
        ...

    @abstractmethod
    def append_to_file(
        self,
        data: bytes,
        options: ExportOptions,
        config_data: IOSConfigData,
        debug: bool,
    ) -> bytes:
        """在文件末尾追加 xcconfig 构建设置"""
        ...


class ITemplateExtractor(ABC):
    """模板解压器接口 - 逐条目解压并路由"""

    @abstractmethod
    def extract(
        self,
        template_path: Path,
        dest_dir: Path,
        options: ExportOptions | None = None,
        config_data: IOSConfigData | None = None,
        debug: bool = False,
    ) -> Any:
        """
        解压模板归档到目标目录

        Args:
            template_path: 模板zip路径
            dest_dir: 输出目录
            options: 导出选项
            config_data: 本次导出的配置数据
            debug: 是否为调试构建

        Returns:
            解压结果（含工程文件内容与引擎库命中标记）

        Raises:
            TemplateNotFoundError: 模板不存在或不是zip
            PathCreationError: 目录或文件无法创建
        """
        ...


# ============================================================================
# Xcode 工程接口
# ============================================================================

class IAssetExporter(ABC):
    """资产导出器接口 - 复制插件/动态库资产"""

    @abstractmethod
    def export_assets(
        self, out_dir: Path, assets: list[str], is_framework: bool
    ) -> list[ExportedAsset]:
        """
        复制项目内资产到输出目录

        Args:
            out_dir: 输出根目录（<dest>/<binary>）
            assets: 资产路径（res:// 为项目相对路径，其余原样透传）
            is_framework: 是否为链接期产物

        Returns:
            每个输入对应一个 ExportedAsset

        Raises:
            AssetNotFoundError: 项目内资产不存在
            PathCreationError: 目录无法创建或复制失败
        """
        ...


class IIconCatalogGenerator(ABC):
    """图标目录生成器接口"""

    @abstractmethod
    def export_icons(self, options: ExportOptions, iconset_dir: Path) -> Path:
        """
        复制图标并写出 Contents.json 与 sizes

        Returns:
            Contents.json 路径
        """
        ...


class IProjectPatcher(ABC):
    """工程图补丁接口"""

    @abstractmethod
    def patch(self, project_data: bytes, assets: list[ExportedAsset]) -> bytes:
        """向 project.pbxproj 插入资产的构建/引用条目"""
        ...


class IToolchain(ABC):
    """外部工具链接口 - 签名/归档/导出ipa"""

    @abstractmethod
    def codesign(self, file_path: Path, identity: str) -> None:
        """对单个文件签名"""
        ...

    @abstractmethod
    def codesign_dylibs(self, dylibs_dir: Path, identity: str) -> list[Path]:
        """递归签名目录下全部动态库，返回已签名文件"""
        ...

    @abstractmethod
    def archive(self, project_path: Path, scheme: str, debug: bool, archive_path: Path) -> None:
        """生成 .xcarchive"""
        ...

    @abstractmethod
    def export_ipa(self, archive_path: Path, export_options_plist: Path, export_path: Path) -> None:
        """从 .xcarchive 导出 .ipa"""
        ...


# ============================================================================
# 流水线与任务管理接口
# ============================================================================

class IJobManager(ABC):
    """任务管理器接口"""

    @abstractmethod
    def create_job(self, export_path: Path, debug: bool, **kwargs: Any) -> ExportJob:
        """创建任务"""
        ...

    @abstractmethod
    def get_job(self, job_id: str) -> ExportJob | None:
        """获取任务"""
        ...

    @abstractmethod
    def update_job(self, job: ExportJob) -> None:
        """更新任务状态"""
        ...

    @abstractmethod
    def cancel_job(self, job_id: str) -> bool:
        """取消任务"""
        ...


# ============================================================================
# 异常定义
# ============================================================================

class ExportError(Exception):
    """基础异常"""
    pass


class TemplateNotFoundError(ExportError):
    """模板不存在或无法打开"""
    pass


class AssetNotFoundError(ExportError):
    """声明的项目资产不存在"""
    pass


class PathCreationError(ExportError):
    """目录或文件无法创建"""
    pass


class TemplateIntegrityError(ExportError):
    """模板缺少所需的引擎库"""
    pass


class ConfigValidationError(ExportError):
    """导出选项校验失败"""
    pass


class IconExportError(ExportError):
    """图标导出失败"""

    def __init__(self, message: str, source_path: str):
        super().__init__(message)
        self.source_path = source_path


class ToolchainError(ExportError):
    """外部工具返回非零或超时"""

    def __init__(self, message: str, tool: str, detail: str = ""):
        super().__init__(message)
        self.tool = tool
        self.detail = detail


class ExportCancelled(ExportError):
    """任务在阶段之间被取消"""
    pass
