"""
pytest 配置与公共 fixtures

使用方式：
    def test_something(options, make_template):
        template = make_template(SAMPLE_ENTRIES)
"""

from __future__ import annotations

import tempfile
import zipfile
from pathlib import Path
from typing import Callable, Generator

import pytest

from iphone_export.config import RuntimeConfig, TemplateLayout
from iphone_export.config.runtime_config import TemplatesConfig, ToolchainConfig
from iphone_export.models import ExportOptions, IOSConfigData


# ============================================================================
# 模板内容
# ============================================================================

INFO_PLIST = """<?xml version="1.0" encoding="UTF-8"?>
<plist version="1.0">
<dict>
\t<key>CFBundleDisplayName</key>
\t<string>$name</string>
\t<key>CFBundleExecutable</key>
\t<string>$binary</string>
\t<key>CFBundleIdentifier</key>
\t<string>$identifier</string>
\t<key>UIFileSharingEnabled</key>
\t$docs_sharing
\t<key>UIRequiredDeviceCapabilities</key>
\t<array>
\t$required_device_capabilities
\t</array>
\t<key>UISupportedInterfaceOrientations</key>
\t<array>
\t$interface_orientations
\t</array>
\t<key>NSCameraUsageDescription</key>
\t<string>$camera_usage_description</string>
$additional_plist_content
</dict>
</plist>
"""

PROJECT_PBXPROJ = """// !$*UTF8*$!
{
\tobjects = {
/* Begin PBXBuildFile section */
\t\t$modules_buildfile
\t\t$additional_pbx_files
/* End PBXBuildFile section */
/* Begin PBXFileReference section */
\t\t$modules_fileref
\t\tD0BCFE3418AEBDA2004A7AAE /* $binary.app */ = {isa = PBXFileReference; };
/* End PBXFileReference section */
\t\tfiles = (
\t\t\t\t$modules_buildphase
\t\t\t\t$additional_pbx_frameworks_build
\t\t);
\t\tchildren = (
\t\t\t\t$modules_buildgrp
\t\t\t\t$additional_pbx_frameworks_refs
\t\t);
\t\tresources = (
\t\t\t\t$additional_pbx_resources_build
\t\t);
\t\tresource_children = (
\t\t\t\t$additional_pbx_resources_refs
\t\t);
\t};
}
"""

XCCONFIG = "// godot.xcconfig\nGODOT_DEFAULT_LDFLAGS = -lz;\n"

DUMMY_CPP = '#include <stdio.h>\n$cpp_code\n'

MAIN_M = b"#import <UIKit/UIKit.h>\nint main(int argc, char *argv[]) { return 0; }\n"


def sample_entries() -> dict[str, bytes]:
    """最小可用的iOS导出模板"""
    return {
        "iphone/godot_ios/Info.plist": INFO_PLIST.encode("utf-8"),
        "iphone/godot_ios.xcodeproj/project.pbxproj": PROJECT_PBXPROJ.encode("utf-8"),
        "iphone/godot_ios/godot.xcconfig": XCCONFIG.encode("utf-8"),
        "iphone/godot_ios/dummy.cpp": DUMMY_CPP.encode("utf-8"),
        "iphone/godot_ios/main.m": MAIN_M,
        "iphone/godot_ios/export_options_app_store.plist": b"<plist/>\n",
        "iphone/libgodot.iphone.debug.fat.a": b"\x00DEBUG-LIB",
        "iphone/libgodot.iphone.release.fat.a": b"\x00RELEASE-LIB",
        "iphone/libgodot_arkit_module.debug.fat.a": b"\x00ARKIT-DEBUG",
        "iphone/libgodot_arkit_module.release.fat.a": b"\x00ARKIT-RELEASE",
        "iphone/libgodot_camera_module.debug.fat.a": b"\x00CAMERA-DEBUG",
        "iphone/libgodot_camera_module.release.fat.a": b"\x00CAMERA-RELEASE",
    }


# ============================================================================
# 文件 Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """临时目录"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_template(temp_dir: Path) -> Callable[..., Path]:
    """按给定顺序写出模板zip"""

    def _make(entries: dict[str, bytes | str], name: str = "iphone.zip") -> Path:
        template_dir = temp_dir / "templates"
        template_dir.mkdir(exist_ok=True)
        path = template_dir / name
        with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
            zf.writestr("iphone/", b"")
            for entry, data in entries.items():
                zf.writestr(entry, data)
        return path

    return _make


@pytest.fixture
def out_dir(temp_dir: Path) -> Path:
    path = temp_dir / "out"
    path.mkdir()
    return path


# ============================================================================
# 配置 Fixtures
# ============================================================================

@pytest.fixture
def runtime_config(temp_dir: Path) -> RuntimeConfig:
    """运行期配置（工具链关闭，存储在临时目录）"""
    return RuntimeConfig(
        storage_dir=temp_dir / "storage",
        templates=TemplatesConfig(templates_dir=str(temp_dir / "templates")),
        toolchain=ToolchainConfig(enabled=False),
    )


@pytest.fixture
def layout() -> TemplateLayout:
    return TemplateLayout()


@pytest.fixture
def options() -> ExportOptions:
    """示例导出选项"""
    return ExportOptions.from_preset({
        "application/name": "Example Game",
        "application/identifier": "com.example.game",
        "application/app_store_team_id": "ABC123",
        "application/copyright": "Example Studio",
        "privacy/camera_usage_description": "Scan QR codes",
    })


@pytest.fixture
def config_data(options: ExportOptions) -> IOSConfigData:
    """示例配置数据（模块均未启用）"""
    data = IOSConfigData.build(options, binary_name="MyGame")
    data = data.with_module("arkit", False, "F9B95E6E2391205500AF0000", "F9C95E812391205C00BF0000")
    return data.with_module("camera", False, "F9B95E6E2391205500AF0001", "F9C95E812391205C00BF0001")


@pytest.fixture
def info_plist() -> str:
    return INFO_PLIST


@pytest.fixture
def template_entries() -> dict[str, bytes]:
    return sample_entries()
