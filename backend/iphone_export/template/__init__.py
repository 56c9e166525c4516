"""
模板处理模块 - 导出模板解压与标记替换

子模块：
- substitution: $marker 标记替换与 xcconfig 追加
- extractor: 模板zip流式解压与条目路由
"""

from .extractor import EntryAction, ExtractionResult, TemplateExtractor, iter_entries
from .substitution import MARKERS, TokenSubstitutionEngine, make_xcconfig_setting

__all__ = [
    "TokenSubstitutionEngine",
    "MARKERS",
    "make_xcconfig_setting",
    "TemplateExtractor",
    "ExtractionResult",
    "EntryAction",
    "iter_entries",
]
