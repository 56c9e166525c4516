"""
工程图补丁 - 向 project.pbxproj 插入额外资产

职责：
1. 每个资产分配两个ID（构建ID、引用ID）
2. 按扩展名确定 lastKnownFileType
3. 生成 PBXBuildFile/PBXFileReference 声明
4. 按 framework/资源 分别累积构建ID列表与引用ID列表
5. 替换模板中的五个标记

标记：
- $additional_pbx_files: 全部声明
- $additional_pbx_frameworks_build / $additional_pbx_frameworks_refs
- $additional_pbx_resources_build / $additional_pbx_resources_refs

测试要点：
- test_framework_and_resource_split: framework与资源进入不同累积串
- test_file_types: 扩展名映射
- test_patch_markers: 标记替换
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass

from ..interfaces import IProjectPatcher
from ..models import ExportedAsset
from .pbx_id import PbxIdAllocator

logger = logging.getLogger(__name__)

FILE_TYPES: tuple[tuple[str, str], ...] = (
    (".framework", "wrapper.framework"),
    (".dylib", "compiled.mach-o.dylib"),
    (".a", "archive.ar"),
)

FILE_INFO_FORMAT = (
    "{build_id} = {{isa = PBXBuildFile; fileRef = {ref_id}; }};\n"
    "{ref_id} = {{isa = PBXFileReference; lastKnownFileType = {file_type}; name = {name}; "
    "path = \"{file_path}\"; sourceTree = \"<group>\"; }};\n"
)


def file_type_for(path: str) -> str:
    for ext, file_type in FILE_TYPES:
        if path.endswith(ext):
            return file_type
    return "file"


@dataclass
class PbxFragments:
    """补丁片段累积"""
    files: str = ""
    frameworks_build: str = ""
    frameworks_refs: str = ""
    resources_build: str = ""
    resources_refs: str = ""

    def add(self, build_id: str, ref_id: str, is_framework: bool) -> None:
        kind = "frameworks" if is_framework else "resources"
        build = getattr(self, f"{kind}_build")
        refs = getattr(self, f"{kind}_refs")
        if build:
            build += ",\n"
            refs += ",\n"
        setattr(self, f"{kind}_build", build + build_id)
        setattr(self, f"{kind}_refs", refs + ref_id)

    def markers(self) -> dict[str, str]:
        return {
            "$additional_pbx_files": self.files,
            "$additional_pbx_frameworks_build": self.frameworks_build,
            "$additional_pbx_frameworks_refs": self.frameworks_refs,
            "$additional_pbx_resources_build": self.resources_build,
            "$additional_pbx_resources_refs": self.resources_refs,
        }


class ProjectGraphPatcher(IProjectPatcher):
    """工程图补丁实现"""

    def __init__(self, allocator: PbxIdAllocator | None = None):
        self.allocator = allocator or PbxIdAllocator()

    def build_fragments(self, assets: list[ExportedAsset]) -> PbxFragments:
        fragments = PbxFragments()
        for asset in assets:
            build_id = str(self.allocator.next())
            ref_id = str(self.allocator.next())

            fragments.add(build_id, ref_id, asset.is_framework)
            fragments.files += FILE_INFO_FORMAT.format(
                build_id=build_id,
                ref_id=ref_id,
                file_type=file_type_for(asset.exported_path),
                name=posixpath.basename(asset.exported_path.rstrip("/")),
                file_path=asset.exported_path,
            )
        return fragments

    def apply(self, project_data: bytes, fragments: PbxFragments) -> bytes:
        text = project_data.decode("utf-8")
        for marker, value in fragments.markers().items():
            text = text.replace(marker, value)
        return text.encode("utf-8")

    def patch(self, project_data: bytes, assets: list[ExportedAsset]) -> bytes:
        """向工程文件插入资产条目"""
        fragments = self.build_fragments(assets)
        logger.info(f"工程图补丁: {len(assets)} 个资产, 当前ID {self.allocator.current}")
        return self.apply(project_data, fragments)
