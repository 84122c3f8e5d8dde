# watermarker/watermark.py
import math

from PIL import Image

from watermarker.image_io import resample


def scaled_size(size, scale_factor_percent):
    """按百分比缩放尺寸,结果向下取整"""
    w, h = size
    factor = scale_factor_percent / 100.0
    return int(math.floor(w * factor)), int(math.floor(h * factor))


def scale_watermark(watermark, scale_factor_percent):
    """
    返回按百分比缩放后的水印副本 (RGBA)

    参数:
        watermark: 共享的水印图片,不会被修改
        scale_factor_percent: 缩放百分比,宽高分别乘以 scale/100 后向下取整

    任一边缩放后为 0 时返回空图片,合成时不会覆盖任何像素。
    """
    if watermark.mode != 'RGBA':
        watermark = watermark.convert('RGBA')
    new_w, new_h = scaled_size(watermark.size, scale_factor_percent)
    if new_w <= 0 or new_h <= 0:
        return Image.new('RGBA', (0, 0))
    # Lanczos 避免非整数倍缩放时的锯齿
    return resample(watermark, new_w, new_h)
