"""
资产导出器 - 复制插件/动态库资产到输出目录

职责：
1. res:// 开头的项目资产复制到输出目录（保持相对目录结构）
2. 其他路径（SDK内置或模板自带）原样透传
3. framework 中的 .dylib 放入 dylibs/ 子目录
4. 每个输入返回一个 ExportedAsset

测试要点：
- test_passthrough_sdk_asset: SDK路径透传
- test_copy_resource: 资源复制
- test_dylib_into_dylibs_dir: 动态库放入dylibs
- test_missing_asset: 资产不存在
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path, PurePosixPath

from ..interfaces import AssetNotFoundError, IAssetExporter, PathCreationError
from ..models import ExportedAsset, PluginContribution

logger = logging.getLogger(__name__)

RESOURCE_PREFIX = "res://"


def is_project_path(path: str) -> bool:
    return path.startswith(RESOURCE_PREFIX)


def resolve_project_path(path: str, project_dir: Path) -> Path:
    """res:// 路径解析为项目目录下的实际路径"""
    if is_project_path(path):
        return project_dir / path[len(RESOURCE_PREFIX):]
    return Path(path)


class AssetExporter(IAssetExporter):
    """资产导出器实现"""

    def __init__(self, project_dir: Path, dylibs_dir: str = "dylibs"):
        self.project_dir = project_dir
        self.dylibs_dir = dylibs_dir

    def export_assets(
        self, out_dir: Path, assets: list[str], is_framework: bool
    ) -> list[ExportedAsset]:
        """复制项目资产"""
        exported = []
        for asset in assets:
            if not is_project_path(asset):
                # SDK内置或模板自带
                exported.append(ExportedAsset(exported_path=asset, is_framework=is_framework))
                continue

            source = resolve_project_path(asset, self.project_dir)
            if not source.exists():
                raise AssetNotFoundError(f"资产不存在: {asset}")

            relative = PurePosixPath(asset[len(RESOURCE_PREFIX):])
            destination_dir = out_dir
            if is_framework and asset.endswith(".dylib"):
                destination_dir = destination_dir / self.dylibs_dir
            destination_dir = destination_dir.joinpath(*relative.parent.parts)

            if not destination_dir.exists():
                try:
                    destination_dir.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    raise PathCreationError(f"无法创建目录 '{destination_dir}': {e}") from e

            destination = destination_dir / relative.name
            try:
                if source.is_dir():
                    shutil.copytree(source, destination, dirs_exist_ok=True)
                else:
                    shutil.copyfile(source, destination)
            except OSError as e:
                raise PathCreationError(f"复制资产失败 '{asset}' -> '{destination}': {e}") from e

            logger.debug(f"导出资产: {asset} -> {destination}")
            exported.append(
                ExportedAsset(exported_path=destination.as_posix(), is_framework=is_framework)
            )

        return exported

    def export_all(
        self,
        out_dir: Path,
        plugins: list[PluginContribution],
        libraries: list[str],
    ) -> list[ExportedAsset]:
        """导出全部插件framework/资源文件与GDNative库"""
        exported: list[ExportedAsset] = []
        for plugin in plugins:
            exported += self.export_assets(out_dir, plugin.frameworks, True)
            exported += self.export_assets(out_dir, plugin.bundle_files, False)

        exported += self.export_assets(out_dir, libraries, True)
        logger.info(f"已导出 {len(exported)} 个额外资产到: {out_dir}")
        return exported
