"""
iOS 导出流水线 - 后端核心模块

模块结构：
- config/     运行期配置与模板布局
- models/     数据模型定义（导出选项/配置数据/资产/任务）
- template/   模板归档解压与标记替换
- xcode/      Xcode工程补丁/资产导出/图标目录/工具链调用
- pipeline/   流水线编排与任务管理
"""

__version__ = "0.1.0"
