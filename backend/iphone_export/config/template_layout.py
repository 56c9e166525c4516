"""
模板布局 - 描述导出模板归档的内部结构

职责：
- 定义需要标记替换/追加的文件集合
- 定义引擎静态库与可选模块库的命名规则
- 定义工程图ID种子、图标目录等固定位置
- 支持从YAML覆盖（缓存加载结果）

使用方式：
    layout = load_layout()                       # 内置布局
    layout = load_layout("config/layout.yaml")   # 自定义模板
    layout.library_for(debug=True)  # "libgodot.iphone.debug.fat.a"
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field


class ModuleLibrary(BaseModel):
    """可选模块静态库（随能力开关启用）"""
    name: str
    file_id: str
    build_id: str

    @property
    def archive_prefix(self) -> str:
        return f"libgodot_{self.name}"

    @property
    def output_name(self) -> str:
        return f"libgodot_{self.name}_module.a"


def _default_modules() -> list[ModuleLibrary]:
    return [
        ModuleLibrary(name="arkit", file_id="F9B95E6E2391205500AF0000", build_id="F9C95E812391205C00BF0000"),
        ModuleLibrary(name="camera", file_id="F9B95E6E2391205500AF0001", build_id="F9C95E812391205C00BF0001"),
    ]


class TemplateLayout(BaseModel):
    """模板归档布局"""

    template_name: str = "iphone.zip"
    platform_prefix: str = "iphone/"
    project_placeholder: str = "godot_ios"
    project_file: str = "godot_ios.xcodeproj/project.pbxproj"

    files_to_parse: list[str] = Field(default_factory=lambda: [
        "godot_ios/Info.plist",
        "godot_ios.xcodeproj/project.pbxproj",
        "godot_ios/dummy.cpp",
        "godot_ios.xcodeproj/project.xcworkspace/contents.xcworkspacedata",
        "godot_ios.xcodeproj/xcshareddata/xcschemes/godot_ios.xcscheme",
    ])
    files_to_append: list[str] = Field(default_factory=lambda: ["godot_ios/godot.xcconfig"])

    # 引擎静态库（每个构建模式一个fat包）
    library_prefix: str = "libgodot.iphone"
    library_name: str = "libgodot.iphone.{mode}.fat.a"
    library_output: str = "godot_ios.a"

    # 可选模块静态库
    modules: list[ModuleLibrary] = Field(default_factory=_default_modules)
    module_suffix: str = "{mode}.fat.a"

    # 工程图ID种子（避开模板中已有ID）
    graph_id_seed: str = "589384010000000000000000"

    iconset_dir: str = "Images.xcassets/AppIcon.appiconset"
    dylibs_dir: str = "dylibs"

    # === 便捷访问方法 ===

    @staticmethod
    def mode_name(debug: bool) -> str:
        return "debug" if debug else "release"

    def library_for(self, debug: bool) -> str:
        """获取本次构建模式应使用的引擎库条目名"""
        return self.library_name.format(mode=self.mode_name(debug))

    def module_suffix_for(self, debug: bool) -> str:
        return self.module_suffix.format(mode=self.mode_name(debug))

    def strip_prefix(self, name: str) -> str:
        """去除平台目录前缀"""
        if name.startswith(self.platform_prefix):
            return name[len(self.platform_prefix):]
        return name

    def rename(self, name: str, binary_name: str) -> str:
        """占位工程名替换为用户二进制名"""
        return name.replace(self.project_placeholder, binary_name)


@lru_cache(maxsize=8)
def _load_layout_file(path: str) -> TemplateLayout:
    layout_path = Path(path)
    if not layout_path.exists():
        raise FileNotFoundError(f"模板布局文件不存在: {layout_path}")

    with open(layout_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    return TemplateLayout(**data.get("template_layout", data))


def load_layout(layout_path: str | Path | None = None) -> TemplateLayout:
    """加载模板布局（未指定时使用内置布局）"""
    if layout_path is None:
        return TemplateLayout()
    return _load_layout_file(str(layout_path))
