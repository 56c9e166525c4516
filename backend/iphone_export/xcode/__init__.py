"""
Xcode 工程模块 - 工程图补丁/资产/图标/工具链

子模块：
- pbx_id: 96位工程图ID与分配器
- project_patcher: project.pbxproj 资产条目插入
- assets: 插件与动态库资产导出
- icons: AppIcon.appiconset 生成
- toolchain: codesign/xcodebuild 调用
"""

from .assets import AssetExporter, resolve_project_path
from .icons import ICON_INFOS, IconCatalogGenerator, IconDescriptor
from .pbx_id import PbxId, PbxIdAllocator
from .project_patcher import PbxFragments, ProjectGraphPatcher, file_type_for
from .toolchain import ToolResult, XcodeToolchain

__all__ = [
    "PbxId",
    "PbxIdAllocator",
    "ProjectGraphPatcher",
    "PbxFragments",
    "file_type_for",
    "AssetExporter",
    "resolve_project_path",
    "IconCatalogGenerator",
    "IconDescriptor",
    "ICON_INFOS",
    "XcodeToolchain",
    "ToolResult",
]
