"""
Xcode 工具链 - 签名/归档/导出ipa

职责：
- 调用 codesign 对 dylibs 目录下的动态库签名
- 调用 xcodebuild 生成 .xcarchive
- 调用 xcodebuild -exportArchive 导出 .ipa
- 处理超时和非零退出（均为致命错误）

依赖：
- macOS 上的 Xcode 命令行工具（路径由运行期配置指定）

测试要点：
- test_codesign_dylibs: 只签名 .dylib
- test_archive_args: 归档参数
- test_tool_failure: 非零退出
- test_tool_timeout: 超时处理
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from ..config import RuntimeConfig, get_config
from ..interfaces import IToolchain, ToolchainError

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    """外部工具执行结果"""
    tool: str
    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class XcodeToolchain(IToolchain):
    """Xcode 命令行工具封装"""

    def __init__(self, config: RuntimeConfig | None = None):
        config = config or get_config()
        self.codesign_path = config.toolchain.codesign_path
        self.xcodebuild_path = config.toolchain.xcodebuild_path
        self.allow_provisioning_updates = config.toolchain.allow_provisioning_updates
        self.timeouts = config.timeouts

    def _run(self, tool: str, args: list[str], timeout: int) -> ToolResult:
        cmd = [tool, *args]
        logger.info(f"执行: {' '.join(cmd)}")
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError as e:
            raise ToolchainError(f"工具不存在: {tool}", tool=tool) from e
        except subprocess.TimeoutExpired as e:
            raise ToolchainError(f"{tool} 执行超时", tool=tool) from e

        result = ToolResult(tool=tool, returncode=proc.returncode, output=proc.stderr or proc.stdout or "")
        if not result.ok:
            raise ToolchainError(
                f"{tool} 执行失败 (exit {result.returncode}): {result.output}",
                tool=tool,
                detail=result.output,
            )
        return result

    def codesign(self, file_path: Path, identity: str) -> None:
        """对单个文件签名"""
        logger.info(f"签名: {file_path}")
        self._run(
            self.codesign_path,
            ["-f", "-s", identity, str(file_path)],
            self.timeouts.codesign_sec,
        )

    def codesign_dylibs(self, dylibs_dir: Path, identity: str) -> list[Path]:
        """递归签名目录下全部 .dylib"""
        if not dylibs_dir.is_dir():
            return []

        signed = []
        for path in sorted(dylibs_dir.rglob("*.dylib")):
            if path.is_file():
                self.codesign(path, identity)
                signed.append(path)
        return signed

    def archive(self, project_path: Path, scheme: str, debug: bool, archive_path: Path) -> None:
        """生成 .xcarchive"""
        args = [
            "-project", str(project_path),
            "-scheme", scheme,
            "-sdk", "iphoneos",
            "-configuration", "Debug" if debug else "Release",
            "-destination", "generic/platform=iOS",
            "archive",
            "-archivePath", str(archive_path),
        ]
        if self.allow_provisioning_updates:
            args.append("-allowProvisioningUpdates")
        self._run(self.xcodebuild_path, args, self.timeouts.archive_sec)

    def export_ipa(self, archive_path: Path, export_options_plist: Path, export_path: Path) -> None:
        """从 .xcarchive 导出 .ipa"""
        args = [
            "-exportArchive",
            "-archivePath", str(archive_path),
            "-exportOptionsPlist", str(export_options_plist),
        ]
        if self.allow_provisioning_updates:
            args.append("-allowProvisioningUpdates")
        args += ["-exportPath", str(export_path)]
        self._run(self.xcodebuild_path, args, self.timeouts.export_ipa_sec)
