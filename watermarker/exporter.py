# watermarker/exporter.py
import logging

import numpy as np
from PIL import Image

from watermarker.image_io import normalize_mode, resample
from watermarker.models import CompositeResult, ExplicitSize, MaxDimension
from watermarker.watermark import scale_watermark

logger = logging.getLogger(__name__)


def _proportional_size(width, height, max_dimension):
    # 最长边为 max_dimension,短边向下取整,至少 1 像素
    if height > width:
        return max(1, max_dimension * width // height), max_dimension
    return max_dimension, max(1, max_dimension * height // width)


def target_size(size, policy):
    """
    根据缩放策略计算输出尺寸

    参数:
        size: 转正后源图片的 (宽, 高)
        policy: NoResize / MaxDimension / ExplicitSize

    返回:
        (宽, 高);不需要缩放时返回原尺寸
    """
    width, height = size
    if isinstance(policy, MaxDimension):
        return _proportional_size(width, height, policy.size)
    if isinstance(policy, ExplicitSize):
        if policy.width and policy.height:
            return policy.width, policy.height
        if policy.width:
            return policy.width, max(1, policy.width * height // width)
        if policy.height:
            return max(1, policy.height * width // height), policy.height
    return width, height


def resize_image(img, policy):
    """按缩放策略返回新图片(尺寸不变时返回副本)"""
    new_size = target_size(img.size, policy)
    if new_size == img.size:
        return img.copy()
    return resample(img, *new_size)


def overlay_anchor(image_size, watermark_size, margin_right, margin_bottom):
    """
    水印左上角在目标图片上的坐标

    不做任何截断:水印加边距超出图片时坐标为负,超出部分被裁掉。
    """
    iw, ih = image_size
    ww, wh = watermark_size
    return iw - ww - margin_right, ih - wh - margin_bottom


def blend(base, watermark, position, opacity):
    """
    把水印按 alpha 混合到 base 上,返回新图片

    out = src * (1 - a) + wm * a,其中 a = 水印像素 alpha / 255 * opacity。
    只混合颜色通道,base 自身的 alpha 通道保持不变;
    水印覆盖范围以外(以及画布以外)的像素不受影响。
    """
    base = normalize_mode(base)
    if watermark.mode != 'RGBA':
        watermark = watermark.convert('RGBA')

    iw, ih = base.size
    ww, wh = watermark.size
    left, top = position

    # 水印区域与画布的交集
    x0, y0 = max(left, 0), max(top, 0)
    x1, y1 = min(left + ww, iw), min(top + wh, ih)
    if x0 >= x1 or y0 >= y1:
        return base.copy()

    dst = np.array(base)
    wm = np.asarray(watermark)[y0 - top:y1 - top, x0 - left:x1 - left]

    roi = dst[y0:y1, x0:x1, :3].astype(np.float64)
    alpha = (wm[:, :, 3:4].astype(np.float64) / 255.0) * opacity
    mixed = roi * (1.0 - alpha) + wm[:, :, :3].astype(np.float64) * alpha
    dst[y0:y1, x0:x1, :3] = np.clip(np.rint(mixed), 0, 255).astype(np.uint8)

    return Image.fromarray(dst)


def composite(img, spec, resize_policy, extension=""):
    """
    把水印合成到一张已转正的图片上

    参数:
        img: 转正后的源图片,不会被修改
        spec: WatermarkSpec
        resize_policy: 输出尺寸策略
        extension: 源文件扩展名,原样放入结果

    返回:
        CompositeResult

    顺序很重要:先缩放水印,再缩放源图,最后根据缩放后的尺寸计算位置。
    """
    watermark = scale_watermark(spec.raster, spec.scale_factor_percent)
    base = resize_image(img, resize_policy)

    position = overlay_anchor(base.size, watermark.size, spec.margin_right, spec.margin_bottom)
    logger.debug(
        "图片尺寸 %sx%s, 水印尺寸 %sx%s, 位置 %s",
        base.width, base.height, watermark.width, watermark.height, position,
    )

    composed = blend(base, watermark, position, spec.opacity)
    return CompositeResult(image=composed, extension=extension)
