"""
导出资产 - 复制进输出目录的额外文件
"""

from __future__ import annotations

from pydantic import BaseModel


class ExportedAsset(BaseModel):
    """单个导出资产"""
    exported_path: str
    is_framework: bool  # 链接进二进制的为framework，否则为资源

    model_config = {"frozen": True}
