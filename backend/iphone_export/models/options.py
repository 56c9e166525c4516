"""
导出选项 - 用户在导出预设中填写的全部选项

选项以 "分组/名称" 作为键（如 application/identifier），
通过字段别名映射为类型安全的属性。整个导出过程中只读。
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# (架构名, 是否默认启用)；armv7 不在官方模板中，默认关闭
SUPPORTED_ARCHITECTURES: list[tuple[str, bool]] = [
    ("armv7", False),
    ("arm64", True),
]

EXPORT_METHODS = ("app-store", "development", "ad-hoc", "enterprise")


def is_bundle_identifier_valid(identifier: str) -> tuple[bool, str]:
    """校验 Bundle Identifier 语法，返回 (是否有效, 错误信息)"""
    if len(identifier) == 0:
        return False, "Identifier is missing."
    if len(identifier) < 2:
        return False, "Identifier is too short. Must be at least 2 characters."
    if len(identifier) > 255:
        return False, "Identifier is too long. Must be less than 255 characters."

    first = True
    for c in identifier:
        if c == ".":
            if first:
                return False, "Identifier segments must be of non-zero length."
            first = True
            continue
        if not (c.isascii() and (c.isalnum() or c == "-")):
            return False, f"The character '{c}' is not allowed in Identifier."
        if first and c.isdigit():
            return False, "A digit cannot be the first character in a Identifier segment."
        if first and c == "-":
            return False, f"The character '{c}' cannot be the first character in a Identifier segment."
        first = False

    if first:
        return False, "Identifier segments must be of non-zero length."
    return True, ""


class ExportOptions(BaseModel):
    """导出预设选项"""

    # === 自定义模板 ===
    custom_package_debug: str = Field("", alias="custom_package/debug")
    custom_package_release: str = Field("", alias="custom_package/release")

    # === 应用与签名 ===
    app_store_team_id: str = Field("", alias="application/app_store_team_id")
    code_sign_identity_debug: str = Field("iPhone Developer", alias="application/code_sign_identity_debug")
    export_method_debug: int = Field(1, ge=0, le=3, alias="application/export_method_debug")
    code_sign_identity_release: str = Field("iPhone Distribution", alias="application/code_sign_identity_release")
    export_method_release: int = Field(0, ge=0, le=3, alias="application/export_method_release")

    name: str = Field("", alias="application/name")
    info: str = Field("Made with Godot Engine", alias="application/info")
    identifier: str = Field("", alias="application/identifier")
    build_number: str = Field("1", alias="application/build_number")
    version: str = Field("1.0.0", alias="application/version")
    copyright: str = Field("", alias="application/copyright")
    icon_1024x1024: str = Field("", alias="application/icon_1024x1024")

    # === 能力（须与描述文件一致） ===
    arkit: bool = Field(False, alias="capabilities/arkit")
    camera: bool = Field(False, alias="capabilities/camera")
    in_app_purchases: bool = Field(False, alias="capabilities/in_app_purchases")
    push_notifications: bool = Field(False, alias="capabilities/push_notifications")

    # === 用户数据 ===
    accessible_from_files_app: bool = Field(False, alias="user_data/accessible_from_files_app")
    accessible_from_itunes_sharing: bool = Field(False, alias="user_data/accessible_from_itunes_sharing")

    # === 隐私说明 ===
    camera_usage_description: str = Field("", alias="privacy/camera_usage_description")
    microphone_usage_description: str = Field("", alias="privacy/microphone_usage_description")
    photolibrary_usage_description: str = Field("", alias="privacy/photolibrary_usage_description")

    # === 屏幕方向 ===
    portrait: bool = Field(True, alias="orientation/portrait")
    portrait_upside_down: bool = Field(True, alias="orientation/portrait_upside_down")
    landscape_left: bool = Field(True, alias="orientation/landscape_left")
    landscape_right: bool = Field(True, alias="orientation/landscape_right")

    # === 架构 ===
    architectures_armv7: bool = Field(False, alias="architectures/armv7")
    architectures_arm64: bool = Field(True, alias="architectures/arm64")

    model_config = {"populate_by_name": True, "frozen": True}

    @classmethod
    def from_preset(cls, preset: dict[str, Any]) -> ExportOptions:
        """从 "分组/名称" 键的预设字典构建"""
        return cls.model_validate(preset)

    def get(self, key: str) -> Any:
        """按选项键读取（如 application/icon_1024x1024）"""
        for field_name, info in type(self).model_fields.items():
            if info.alias == key:
                return getattr(self, field_name)
        raise KeyError(key)

    def get_capability(self, name: str) -> bool:
        return bool(self.get(f"capabilities/{name}"))

    def enabled_architectures(self) -> list[str]:
        """按支持列表顺序返回已启用的架构"""
        return [
            arch for arch, _ in SUPPORTED_ARCHITECTURES
            if self.get(f"architectures/{arch}")
        ]

    def export_method(self, debug: bool) -> str:
        method = self.export_method_debug if debug else self.export_method_release
        return EXPORT_METHODS[method]

    def sign_identity(self, debug: bool) -> str:
        """当前构建模式的签名身份（为空时回退到默认值）"""
        if debug:
            return self.code_sign_identity_debug or "iPhone Developer"
        return self.code_sign_identity_release or "iPhone Distribution"

    def custom_package(self, debug: bool) -> str:
        return self.custom_package_debug if debug else self.custom_package_release

    def validate_for_export(self) -> list[str]:
        """导出前校验，返回全部错误信息（空列表表示通过）"""
        errors = []
        if not self.app_store_team_id:
            errors.append("App Store Team ID not specified - cannot configure the project.")

        valid, message = is_bundle_identifier_valid(self.identifier)
        if not valid:
            errors.append(f"Invalid Identifier: {message}")

        return errors
