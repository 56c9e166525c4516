"""
模板解压器 - 流式解压导出模板并按条目路由

职责：
1. 按归档顺序逐条读取模板zip（每条只读一次）
2. 去除平台前缀，分类为 解析/追加/引擎库/模块库/原样复制
3. 引擎库只保留本次构建模式对应的fat包；模块库随能力开关与模式保留
4. 占位工程名替换为二进制名后写入目标目录
5. 工程描述文件只保留在内存中，等待补丁后再落盘

失败策略：
- 目录/文件创建失败立即终止（已写出的文件不回滚）
- 引擎库未命中不在解压中报错，由调用方在解压结束后检查 found_library

测试要点：
- test_extract_verbatim_roundtrip: 普通条目原样输出
- test_extract_parse_and_append: 解析/追加路由
- test_library_variant_filter: 引擎库按模式过滤
- test_module_library_filter: 模块库按能力过滤
- test_project_file_retained: 工程文件保留在内存
"""

from __future__ import annotations

import logging
import os
import zipfile
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from ..config import TemplateLayout
from ..interfaces import (
    ISubstitutionEngine,
    ITemplateExtractor,
    PathCreationError,
    TemplateIntegrityError,
    TemplateNotFoundError,
)
from ..models import ExportOptions, IOSConfigData
from .substitution import TokenSubstitutionEngine

logger = logging.getLogger(__name__)


class EntryAction(str, Enum):
    """条目路由"""
    PARSE = "parse"
    APPEND = "append"
    LIBRARY = "library"
    MODULE = "module"
    COPY = "copy"


@dataclass
class ExtractionResult:
    """解压结果"""
    library_name: str
    found_library: bool = False
    project_file_data: bytes | None = None
    written_files: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    total_size: int = 0

    def ensure_complete(self) -> None:
        """解压结束后的完整性检查"""
        if not self.found_library:
            raise TemplateIntegrityError(
                f"模板中缺少所需引擎库 '{self.library_name}'，导出模板zip可能不完整"
            )
        if self.project_file_data is None:
            raise TemplateIntegrityError("模板中缺少工程描述文件 project.pbxproj")


def iter_entries(template_path: Path) -> Iterator[tuple[str, bytes]]:
    """按归档顺序逐条读取（跳过目录条目）"""
    if not template_path.exists():
        raise TemplateNotFoundError(f"导出模板不存在: {template_path}")

    try:
        zf = zipfile.ZipFile(template_path)
    except zipfile.BadZipFile as e:
        raise TemplateNotFoundError(f"无法打开导出模板（不是zip文件？）: {template_path}") from e

    with zf:
        for info in zf.infolist():
            if info.is_dir():
                continue
            yield info.filename, zf.read(info)


class TemplateExtractor(ITemplateExtractor):
    """导出模板解压器实现"""

    def __init__(
        self,
        layout: TemplateLayout | None = None,
        engine: ISubstitutionEngine | None = None,
    ):
        self.layout = layout or TemplateLayout()
        self.engine = engine or TokenSubstitutionEngine()
        self._parse = set(self.layout.files_to_parse)
        self._append = set(self.layout.files_to_append)

    def classify(self, name: str) -> EntryAction:
        """对去除前缀后的条目路径分类"""
        if name in self._parse:
            return EntryAction.PARSE
        if name in self._append:
            return EntryAction.APPEND
        if name.startswith(self.layout.library_prefix):
            return EntryAction.LIBRARY
        if self._match_module(name) is not None:
            return EntryAction.MODULE
        return EntryAction.COPY

    def extract(
        self,
        template_path: Path,
        dest_dir: Path,
        options: ExportOptions | None = None,
        config_data: IOSConfigData | None = None,
        debug: bool = False,
    ) -> ExtractionResult:
        """解压模板到目标目录"""
        options = options or ExportOptions()
        if config_data is None:
            config_data = IOSConfigData(pkg_name="Unnamed", binary_name=self.layout.project_placeholder)

        library_to_use = self.layout.library_for(debug)
        logger.info(f"引擎静态库: {library_to_use}")
        result = ExtractionResult(library_name=library_to_use)
        dest_root = dest_dir.resolve()

        logger.info(f"解压模板: {template_path}")
        for raw_name, data in iter_entries(template_path):
            name = self.layout.strip_prefix(raw_name)
            action = self.classify(name)
            executable = False

            if action in (EntryAction.PARSE, EntryAction.APPEND):
                data = self._transform(raw_name, action, data, options, config_data, debug)
            elif action == EntryAction.LIBRARY:
                if name != library_to_use:
                    result.skipped.append(raw_name)
                    continue
                result.found_library = True
                executable = True
                name = self.layout.library_output
            elif action == EntryAction.MODULE:
                module = self._match_module(name)
                if not (
                    options.get_capability(module.name)
                    and name.endswith(self.layout.module_suffix_for(debug))
                ):
                    result.skipped.append(raw_name)
                    continue
                name = module.output_name

            if name == self.layout.project_file:
                # 补丁后统一落盘
                result.project_file_data = data
                continue

            out_name = self.layout.rename(name, config_data.binary_name)
            out_path = self._write_entry(dest_root, out_name, data, executable)
            result.written_files.append(out_path)
            result.total_size += len(data)
            logger.debug(f"写入: {out_name} size: {len(data)}")

        logger.info(
            f"解压完成: {len(result.written_files)} 个文件, {result.total_size} 字节, "
            f"跳过 {len(result.skipped)} 个条目"
        )
        return result

    def _transform(
        self,
        raw_name: str,
        action: EntryAction,
        data: bytes,
        options: ExportOptions,
        config_data: IOSConfigData,
        debug: bool,
    ) -> bytes:
        try:
            if action == EntryAction.PARSE:
                return self.engine.fix_config_file(data, options, config_data, debug)
            return self.engine.append_to_file(data, options, config_data, debug)
        except UnicodeDecodeError as e:
            raise TemplateIntegrityError(f"模板条目不是有效的UTF-8文本: {raw_name} ({e})") from e

    def _match_module(self, name: str):
        for module in self.layout.modules:
            if name.startswith(module.archive_prefix):
                return module
        return None

    def _write_entry(self, dest_root: Path, name: str, data: bytes, executable: bool) -> Path:
        out_path = (dest_root / name).resolve()
        if dest_root not in out_path.parents:
            raise PathCreationError(f"模板条目路径越界: {name}")

        dir_name = out_path.parent
        if not dir_name.exists():
            logger.debug(f"创建目录: {dir_name}")
            try:
                dir_name.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise PathCreationError(f"无法创建目录 '{dir_name}': {e}") from e

        try:
            out_path.write_bytes(data)
        except OSError as e:
            raise PathCreationError(f"无法写入 '{out_path}': {e}") from e

        if executable and os.name == "posix":
            out_path.chmod(0o755)
        return out_path
