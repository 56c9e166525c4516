"""
工程图ID - Xcode工程对象的96位标识

以单个96位计数器实现，输出时按 high/mid/low 三段各8位十六进制（大写）拼接。
自增在low段溢出时向mid、high进位，整体96位回绕。
"""

from __future__ import annotations

from dataclasses import dataclass

_SEGMENT_BITS = 32
_SEGMENT_MASK = (1 << _SEGMENT_BITS) - 1
_ID_BITS = 96
_ID_MASK = (1 << _ID_BITS) - 1


@dataclass(frozen=True, order=True)
class PbxId:
    """96位工程图ID"""
    value: int

    @classmethod
    def from_segments(cls, high: int, mid: int, low: int) -> PbxId:
        return cls(
            ((high & _SEGMENT_MASK) << 64) | ((mid & _SEGMENT_MASK) << 32) | (low & _SEGMENT_MASK)
        )

    @classmethod
    def from_hex(cls, text: str) -> PbxId:
        return cls(int(text, 16) & _ID_MASK)

    @property
    def high_bits(self) -> int:
        return (self.value >> 64) & _SEGMENT_MASK

    @property
    def mid_bits(self) -> int:
        return (self.value >> 32) & _SEGMENT_MASK

    @property
    def low_bits(self) -> int:
        return self.value & _SEGMENT_MASK

    def incremented(self) -> PbxId:
        return PbxId((self.value + 1) & _ID_MASK)

    def __str__(self) -> str:
        return f"{self.high_bits:08X}{self.mid_bits:08X}{self.low_bits:08X}"


class PbxIdAllocator:
    """
    单次导出内的ID分配器

    先自增再返回，种子本身不会被分配。
    """

    def __init__(self, seed: PbxId | str = "589384010000000000000000"):
        self._current = PbxId.from_hex(seed) if isinstance(seed, str) else seed

    @property
    def current(self) -> PbxId:
        return self._current

    def next(self) -> PbxId:
        self._current = self._current.incremented()
        return self._current
