"""
图标目录生成器 - 写出 AppIcon.appiconset

职责：
1. 遍历固定图标表，读取每个槽位的用户图标路径（未设置则跳过）
2. 复制图标为固定导出文件名
3. 写出 Contents.json（images 数组）与 sizes（每行一个边长）

测试要点：
- test_export_single_icon: 单图标导出
- test_unset_icon_skipped: 未设置跳过
- test_copy_failure: 复制失败携带源路径
"""

from __future__ import annotations

import json
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from ..interfaces import IconExportError, IIconCatalogGenerator, PathCreationError
from ..models import ExportOptions
from .assets import resolve_project_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IconDescriptor:
    """图标槽位"""
    preset_key: str
    idiom: str
    export_name: str
    side_length: str
    scale: str
    unscaled_size: str


ICON_INFOS: tuple[IconDescriptor, ...] = (
    IconDescriptor("application/icon_1024x1024", "ios-marketing", "Icon-1024.png", "1024", "1x", "1024x1024"),
)


class IconCatalogGenerator(IIconCatalogGenerator):
    """图标目录生成器实现"""

    def __init__(self, project_dir: Path | None = None, icon_infos: tuple[IconDescriptor, ...] = ICON_INFOS):
        self.project_dir = project_dir or Path(".")
        self.icon_infos = icon_infos

    def export_icons(self, options: ExportOptions, iconset_dir: Path) -> Path:
        """导出图标并生成清单"""
        try:
            iconset_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PathCreationError(f"无法创建目录 '{iconset_dir}': {e}") from e

        images = []
        sizes = ""
        for info in self.icon_infos:
            icon_path = options.get(info.preset_key)
            if not icon_path:
                continue
            logger.info(f"找到AppIcon: {icon_path}")

            source = resolve_project_path(icon_path, self.project_dir)
            try:
                shutil.copyfile(source, iconset_dir / info.export_name)
            except OSError as e:
                raise IconExportError(f"图标导出失败: {icon_path}", source_path=icon_path) from e

            sizes += f"{info.side_length}\n"
            images.append({
                "idiom": info.idiom,
                "size": info.unscaled_size,
                "scale": info.scale,
                "filename": info.export_name,
            })

        contents_path = iconset_dir / "Contents.json"
        try:
            with open(contents_path, "w", encoding="utf-8") as f:
                json.dump({"images": images}, f, ensure_ascii=False, separators=(",", ":"))
            (iconset_dir / "sizes").write_text(sizes, encoding="utf-8")
        except OSError as e:
            raise PathCreationError(f"无法写入图标清单 '{iconset_dir}': {e}") from e
        return contents_path
