"""
运行期配置 - 读取 config/iphone_export.yaml

职责：
- 加载模板目录/工具链/超时等运行参数
- 提供环境变量覆盖机制
- 类型安全的配置访问
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class TemplatesConfig(BaseModel):
    """导出模板配置"""

    templates_dir: str = "templates"
    layout_path: str | None = None


class ToolchainConfig(BaseModel):
    """Xcode工具链配置"""

    enabled: bool = sys.platform == "darwin"
    codesign_path: str = "codesign"
    xcodebuild_path: str = "xcodebuild"
    allow_provisioning_updates: bool = True


class TimeoutConfig(BaseModel):
    """超时配置"""

    codesign_sec: int = 120
    archive_sec: int = 3600
    export_ipa_sec: int = 1200


class LoggingConfig(BaseModel):
    """日志配置"""

    log_level: str = "INFO"


class RuntimeConfig(BaseSettings):
    """运行期配置（支持环境变量覆盖）"""

    # 基础路径
    base_dir: Path = Path(".")
    storage_dir: Path = Path("storage")
    runtime_spec_path: Path = Path("config/iphone_export.yaml")

    # 各子配置
    templates: TemplatesConfig = Field(default_factory=TemplatesConfig)
    toolchain: ToolchainConfig = Field(default_factory=ToolchainConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "IPHONE_EXPORT_",
        "env_nested_delimiter": "__",
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> RuntimeConfig:
        """从YAML文件加载配置"""
        path = Path(yaml_path)
        if not path.exists():
            return cls()

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        runtime_opts = data.get("runtime_options", {})

        config = cls(
            templates=TemplatesConfig(**cls._extract(runtime_opts, "templates")),
            toolchain=ToolchainConfig(**cls._extract(runtime_opts, "toolchain")),
            timeouts=TimeoutConfig(**cls._extract(runtime_opts, "timeouts")),
            logging=LoggingConfig(**cls._extract(runtime_opts, "logging")),
        )
        if "storage_dir" in runtime_opts:
            config.storage_dir = Path(runtime_opts["storage_dir"])

        config._resolve_paths(base_dir=path.parent)
        return config

    @staticmethod
    def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
        """提取并展平配置"""
        section = data.get(key) or {}
        result = {}
        for k, v in section.items():
            if isinstance(v, dict) and "default" in v:
                result[k] = v["default"]
            elif not isinstance(v, dict):
                result[k] = v
        return result

    def _resolve_paths(self, base_dir: Path) -> None:
        """解析相对路径配置为绝对路径（基于配置文件所在目录）"""
        templates_dir = Path(self.templates.templates_dir)
        if not templates_dir.is_absolute():
            self.templates.templates_dir = str((base_dir / templates_dir).resolve())
        if self.templates.layout_path:
            layout_path = Path(self.templates.layout_path)
            if not layout_path.is_absolute():
                self.templates.layout_path = str((base_dir / layout_path).resolve())
        if not self.storage_dir.is_absolute():
            self.storage_dir = (base_dir / self.storage_dir).resolve()

    def get_template_path(self, template_name: str) -> Path:
        """获取官方导出模板路径"""
        return Path(self.templates.templates_dir) / template_name

    def get_job_dir(self, job_id: str) -> Path:
        """获取任务工作目录"""
        return self.storage_dir / "jobs" / job_id


# 全局配置实例
_config: RuntimeConfig | None = None


def get_config() -> RuntimeConfig:
    """获取全局配置（惰性加载）"""
    global _config
    if _config is None:
        _config = RuntimeConfig.from_yaml(Path("config/iphone_export.yaml"))
    return _config


def reload_config(yaml_path: str | Path | None = None) -> RuntimeConfig:
    """重新加载配置"""
    global _config
    path = yaml_path or "config/iphone_export.yaml"
    _config = RuntimeConfig.from_yaml(path)
    return _config
