"""
配置层 - 加载运行期配置与模板布局

职责：
- 加载运行期参数（模板目录/工具链/超时/日志）
- 加载模板布局（解析/追加文件集合、引擎库命名、模块库）
- 提供类型安全的配置访问接口
"""

from .runtime_config import RuntimeConfig, get_config, reload_config
from .template_layout import ModuleLibrary, TemplateLayout, load_layout

__all__ = [
    "TemplateLayout",
    "ModuleLibrary",
    "load_layout",
    "RuntimeConfig",
    "get_config",
    "reload_config",
]
