# watermarker/models.py
"""
流水线中各阶段之间传递的数据结构

图片本身直接使用 PIL.Image(RGB 或 RGBA),这里只定义方向标记、水印参数、
缩放策略和合成结果。所有结构都是不可变的。
"""
from dataclasses import dataclass
from enum import IntEnum

from PIL import Image

from watermarker.errors import ConfigError


class Orientation(IntEnum):
    """EXIF Orientation 标记 (0x0112) 的八个合法取值"""
    TOP_LEFT = 1
    TOP_RIGHT = 2
    BOTTOM_RIGHT = 3
    BOTTOM_LEFT = 4
    LEFT_TOP = 5
    RIGHT_TOP = 6
    RIGHT_BOTTOM = 7
    LEFT_BOTTOM = 8

    @classmethod
    def parse(cls, value):
        """
        把原始标记值转换为 Orientation

        参数:
            value: EXIF 中读到的原始值,可能为 None、整数或长度为 1 的序列

        返回:
            Orientation 或 None(缺失/未知取值都视为 None,不抛异常)
        """
        if isinstance(value, (tuple, list)):
            value = value[0] if value else None
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return None


@dataclass(frozen=True)
class WatermarkSpec:
    """
    水印参数

    raster: 水印图片 (RGBA),整个批次共享,只读
    scale_factor_percent: 水印缩放百分比,100 表示原尺寸
    opacity: 不透明度 0..1,超出范围直接报错而不是截断
    margin_right / margin_bottom: 距右边/下边的像素边距
    """
    raster: Image.Image
    scale_factor_percent: float = 100.0
    opacity: float = 0.5
    margin_right: int = 0
    margin_bottom: int = 0

    def __post_init__(self):
        check_watermark_options(
            self.scale_factor_percent, self.opacity, self.margin_right, self.margin_bottom
        )


def check_watermark_options(scale_factor_percent, opacity, margin_right, margin_bottom):
    if scale_factor_percent < 0:
        raise ConfigError(f"水印缩放比例不能为负数: {scale_factor_percent}")
    if not 0.0 <= opacity <= 1.0:
        raise ConfigError(f"水印不透明度必须在 0.0 到 1.0 之间: {opacity}")
    if margin_right < 0 or margin_bottom < 0:
        raise ConfigError(f"水印边距不能为负数: right={margin_right}, bottom={margin_bottom}")


# === 缩放策略 ===

@dataclass(frozen=True)
class NoResize:
    pass


@dataclass(frozen=True)
class MaxDimension:
    """最长边缩放到 size,保持宽高比"""
    size: int

    def __post_init__(self):
        if self.size <= 0:
            raise ConfigError(f"最大尺寸必须大于 0: {self.size}")


@dataclass(frozen=True)
class ExplicitSize:
    """指定宽高;其中一个为 0 时按另一个保持宽高比"""
    width: int = 0
    height: int = 0

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ConfigError(f"目标宽高不能为负数: {self.width}x{self.height}")


def resize_policy_from_options(max_dimension=0, width=0, height=0):
    """
    根据命令行/配置中的三个选项构造缩放策略

    max_dimension 与 width/height 互斥,同时设置视为配置错误。
    """
    if max_dimension and (width or height):
        raise ConfigError("max_dimension 与 width/height 只能设置其中一种")
    if max_dimension:
        return MaxDimension(max_dimension)
    if width or height:
        return ExplicitSize(width, height)
    return NoResize()


@dataclass(frozen=True)
class CompositeResult:
    """合成结果:最终图片 + 输出扩展名(来自源文件)"""
    image: Image.Image
    extension: str = ""
