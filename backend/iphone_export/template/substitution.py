"""
标记替换引擎 - 向工程/配置文件注入导出配置

职责：
1. 逐行扫描 $marker 标记并替换为配置值（markers模式）
2. 生成 xcconfig 构建设置并追加到文件末尾（append模式）

规则：
- 标记集合封闭，按 MARKERS 顺序匹配，每行只替换第一个命中的标记
- 无标记的行原样输出（含行尾）
- 布尔选项转为 <true/>/<false/> 或 1/0；多个布尔选项拼接为固定片段
- 导出方式为 0..3 的枚举，查表得到字符串

测试要点：
- test_replace_identity_markers: 身份字段替换
- test_unmarked_lines_verbatim: 无标记行原样输出
- test_idempotent: 二次替换结果不变
- test_orientation_fragment: 方向片段拼接顺序稳定
- test_append_xcconfig: 追加模式
"""

from __future__ import annotations

import logging

from ..interfaces import ISubstitutionEngine
from ..models import ExportOptions, IOSConfigData

logger = logging.getLogger(__name__)

MARKERS: tuple[str, ...] = (
    "$binary",
    "$modules_buildfile",
    "$modules_fileref",
    "$modules_buildphase",
    "$modules_buildgrp",
    "$name",
    "$info",
    "$identifier",
    "$copyright",
    "$export_method",
    "$code_sign_identity_debug",
    "$code_sign_identity_release",
    "$additional_plist_content",
    "$linker_flags",
    "$cpp_code",
    "$docs_in_place",
    "$docs_sharing",
    "$in_app_purchases",
    "$push_notifications",
    "$required_device_capabilities",
    "$interface_orientations",
    "$camera_usage_description",
    "$microphone_usage_description",
    "$photolibrary_usage_description",
)

# (选项键, 片段)；顺序固定
DEVICE_CAPABILITY_FRAGMENTS: tuple[tuple[str, str], ...] = (
    ("capabilities/arkit", "<string>arkit</string>"),
)

ORIENTATION_FRAGMENTS: tuple[tuple[str, str], ...] = (
    ("orientation/portrait", "<string>UIInterfaceOrientationPortrait</string>"),
    ("orientation/landscape_left", "<string>UIInterfaceOrientationLandscapeLeft</string>"),
    ("orientation/landscape_right", "<string>UIInterfaceOrientationLandscapeRight</string>"),
    ("orientation/portrait_upside_down", "<string>UIInterfaceOrientationPortraitUpsideDown</string>"),
)


def make_xcconfig_setting(key: str, value: object) -> str:
    return f"{key} = {value};\n"


def _plist_bool(value: bool) -> str:
    return "<true/>" if value else "<false/>"


def _fragments(options: ExportOptions, table: tuple[tuple[str, str], ...]) -> str:
    return "\n".join(fragment for key, fragment in table if options.get(key))


class TokenSubstitutionEngine(ISubstitutionEngine):
    """标记替换引擎（不持有文件相关状态）"""

    def marker_values(
        self, options: ExportOptions, config_data: IOSConfigData, debug: bool
    ) -> dict[str, str]:
        """计算所有标记的替换值"""
        return {
            "$binary": config_data.binary_name,
            "$modules_buildfile": config_data.modules_buildfile,
            "$modules_fileref": config_data.modules_fileref,
            "$modules_buildphase": config_data.modules_buildphase,
            "$modules_buildgrp": config_data.modules_buildgrp,
            "$name": config_data.pkg_name,
            "$info": options.info,
            "$identifier": options.identifier,
            "$copyright": options.copyright,
            "$export_method": options.export_method(debug),
            "$code_sign_identity_debug": options.sign_identity(debug=True),
            "$code_sign_identity_release": options.sign_identity(debug=False),
            "$additional_plist_content": config_data.plist_content,
            "$linker_flags": config_data.linker_flags,
            "$cpp_code": config_data.cpp_code,
            "$docs_in_place": _plist_bool(options.accessible_from_files_app),
            "$docs_sharing": _plist_bool(options.accessible_from_itunes_sharing),
            "$in_app_purchases": "1" if options.in_app_purchases else "0",
            "$push_notifications": "1" if options.push_notifications else "0",
            "$required_device_capabilities": _fragments(options, DEVICE_CAPABILITY_FRAGMENTS),
            "$interface_orientations": _fragments(options, ORIENTATION_FRAGMENTS),
            "$camera_usage_description": options.camera_usage_description,
            "$microphone_usage_description": options.microphone_usage_description,
            "$photolibrary_usage_description": options.photolibrary_usage_description,
        }

    def substitute_line(self, line: str, values: dict[str, str]) -> str:
        for marker in MARKERS:
            if marker in line:
                return line.replace(marker, values[marker])
        return line

    def fix_config_file(
        self,
        data: bytes,
        options: ExportOptions,
        config_data: IOSConfigData,
        debug: bool,
    ) -> bytes:
        """逐行替换标记"""
        values = self.marker_values(options, config_data, debug)
        lines = data.decode("utf-8").split("\n")
        return "\n".join(self.substitute_line(line, values) for line in lines).encode("utf-8")

    def build_xcconfig_settings(
        self, options: ExportOptions, config_data: IOSConfigData
    ) -> str:
        """生成追加到 xcconfig 的构建设置"""
        settings = make_xcconfig_setting("PRODUCT_BUNDLE_IDENTIFIER", options.identifier)
        settings += make_xcconfig_setting("DEVELOPMENT_TEAM", options.app_store_team_id)

        # 构建参数
        settings += make_xcconfig_setting("ARCHS", config_data.architectures)
        settings += make_xcconfig_setting(
            "FRAMEWORK_SEARCH_PATHS", f"$(inherited) {config_data.binary_name}"
        )
        settings += make_xcconfig_setting(
            "OTHER_LDFLAGS", f"$(inherited) $(GODOT_DEFAULT_LDFLAGS) {config_data.linker_flags}"
        )

        # 推送通知需要开发环境(sandbox) APNS entitlements
        if options.push_notifications:
            settings += make_xcconfig_setting(
                "CODE_SIGN_ENTITLEMENTS[config=Debug][sdk=iphoneos*]",
                f"{config_data.binary_path}.entitlements",
            )

        settings += make_xcconfig_setting("GODOT_BUILD_NUMBER", options.build_number)
        settings += make_xcconfig_setting("GODOT_VERSION_NAME", options.version)
        return settings

    def append_to_file(
        self,
        data: bytes,
        options: ExportOptions,
        config_data: IOSConfigData,
        debug: bool,
    ) -> bytes:
        """在文件末尾追加构建设置"""
        content = data.decode("utf-8")
        if content and not content.endswith("\n"):
            content += "\n"

        settings = self.build_xcconfig_settings(options, config_data)
        logger.debug(f"追加xcconfig设置:\n{settings}")
        return (content + settings).encode("utf-8")
