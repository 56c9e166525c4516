"""
配置数据 - 每次导出组装一次的派生字符串

标记替换引擎只消费这个结构：
- 显示名/二进制名/架构列表/链接参数/注册代码
- 四段模块工程图片段（构建文件/文件引用/构建阶段/分组）

模块注册阶段逐个追加片段，解压开始后只读。
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from .options import ExportOptions


class PluginContribution(BaseModel):
    """导出插件对iOS工程的贡献"""
    name: str = ""
    frameworks: list[str] = Field(default_factory=list)
    bundle_files: list[str] = Field(default_factory=list)
    plist_content: str = ""
    linker_flags: str = ""
    cpp_code: str = ""


class IOSConfigData(BaseModel):
    """导出配置数据（不可变，注册模块时返回新实例）"""

    pkg_name: str
    binary_name: str
    plist_content: str = ""
    architectures: str = ""
    linker_flags: str = ""
    cpp_code: str = ""
    modules_buildfile: str = ""
    modules_fileref: str = ""
    modules_buildphase: str = ""
    modules_buildgrp: str = ""

    model_config = {"frozen": True}

    @classmethod
    def build(
        cls,
        options: ExportOptions,
        binary_name: str,
        plugins: list[PluginContribution] | None = None,
        project_name: str = "",
    ) -> IOSConfigData:
        """由导出选项与插件贡献组装"""
        plugins = plugins or []
        pkg_name = options.name or project_name or "Unnamed"

        return cls(
            pkg_name=pkg_name,
            binary_name=binary_name,
            plist_content="".join(p.plist_content for p in plugins),
            architectures=" ".join(options.enabled_architectures()),
            linker_flags=cls._join_linker_flags(plugins),
            cpp_code="".join(p.cpp_code for p in plugins),
        )

    @staticmethod
    def _join_linker_flags(plugins: list[PluginContribution]) -> str:
        flags = " ".join(p.linker_flags for p in plugins if p.linker_flags)
        # 写入时会被双引号包裹
        return flags.replace('"', '\\"')

    @property
    def binary_path(self) -> str:
        """工程内二进制相对路径"""
        return f"{self.binary_name}/{self.binary_name}"

    def with_module(self, name: str, enabled: bool, file_id: str, build_id: str) -> IOSConfigData:
        """
        注册可选模块

        启用：追加静态库的四段工程图片段
        禁用：追加注册/反注册桩函数
        """
        lib = f"libgodot_{name}_module.a"
        if enabled:
            return self.model_copy(update={
                "modules_buildfile": self.modules_buildfile
                + f"{build_id} /* {lib} in Frameworks */ = {{isa = PBXBuildFile; fileRef = {file_id} /* {lib} */; }};\n\t\t",
                "modules_fileref": self.modules_fileref
                + f"{file_id} /* {lib} */ = {{isa = PBXFileReference; lastKnownFileType = archive.ar; "
                f"name = godot_{name}_module ; path = \"{lib}\"; sourceTree = \"<group>\"; }};\n\t\t",
                "modules_buildphase": self.modules_buildphase + f"{build_id} /* {lib} */,\n\t\t\t\t",
                "modules_buildgrp": self.modules_buildgrp + f"{file_id} /* {lib} */,\n\t\t\t\t",
            })

        stubs = (
            f"void register_{name}_types() {{ /*stub*/ }};\n"
            f"void unregister_{name}_types() {{ /*stub*/ }};\n"
        )
        return self.model_copy(update={"cpp_code": self.cpp_code + stubs})
