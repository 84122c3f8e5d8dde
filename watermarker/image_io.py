# watermarker/image_io.py
import io
import logging
import os

from PIL import Image, UnidentifiedImageError

from watermarker.errors import PerItemError, SharedResourceError
from watermarker.models import Orientation

logger = logging.getLogger(__name__)

SUPPORTED_EXTS = {'.jpg', '.jpeg', '.png', '.bmp', '.tif', '.tiff'}

ORIENTATION_TAG = 0x0112

# 扩展名 -> Pillow 保存格式,未列出的扩展名按 JPEG 输出
SAVE_FORMATS = {
    '.png': 'PNG',
    '.jpg': 'JPEG',
    '.jpeg': 'JPEG',
    '.bmp': 'BMP',
    '.tif': 'TIFF',
    '.tiff': 'TIFF',
}


def is_image_file(path):
    name = os.path.basename(path)
    if name.startswith('.'):
        return False
    _, ext = os.path.splitext(name.lower())
    return ext in SUPPORTED_EXTS


def normalize_mode(img):
    """把任意模式的图片转换为 RGB 或 RGBA"""
    if img.mode in ('RGB', 'RGBA'):
        return img
    if 'A' in img.getbands() or 'transparency' in img.info:
        return img.convert('RGBA')
    return img.convert('RGB')


def decode_image(data):
    """
    解码图片字节

    参数:
        data: 原始文件内容

    返回:
        PIL.Image (RGB 或 RGBA),像素已全部载入内存

    异常:
        PerItemError: 无法识别或数据损坏
    """
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise PerItemError(f"无法解码图片: {e}") from e
    return normalize_mode(img)


def read_orientation(data):
    """
    读取 EXIF 方向标记

    没有 EXIF 段或没有 Orientation 标记都是正常情况,返回 None。
    只有元数据存在但无法解析时才抛出 PerItemError。
    """
    try:
        img = Image.open(io.BytesIO(data))
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise PerItemError(f"无法读取图片元数据: {e}") from e
    try:
        exif = img.getexif()
    except (OSError, ValueError, SyntaxError) as e:
        raise PerItemError(f"EXIF 数据损坏: {e}") from e
    if not exif:
        logger.debug("未找到 EXIF 数据")
        return None
    value = exif.get(ORIENTATION_TAG)
    if value is None:
        logger.debug("EXIF 中没有 Orientation 标记")
    return Orientation.parse(value)


def resample(img, width, height):
    """Lanczos 重采样到指定尺寸,返回新图片"""
    return img.resize((width, height), Image.LANCZOS)


def encode_image(img, extension, jpeg_quality=90):
    """
    按扩展名编码图片

    PNG/TIFF 保留 alpha 通道;JPEG/BMP 不支持 alpha,先转为 RGB。
    """
    fmt = SAVE_FORMATS.get(extension.lower(), 'JPEG')
    buf = io.BytesIO()
    if fmt == 'JPEG':
        img.convert('RGB').save(buf, 'JPEG', quality=jpeg_quality, optimize=True)
    elif fmt == 'PNG':
        img.save(buf, 'PNG', compress_level=6)
    elif fmt == 'BMP':
        img.convert('RGB').save(buf, 'BMP')
    else:
        img.save(buf, fmt)
    return buf.getvalue()


def load_watermark(path):
    """
    加载水印图片并转换为 RGBA

    水印在整个批次中共享,加载失败是致命错误。
    """
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise SharedResourceError(f"无法打开水印文件 {path}: {e}") from e
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise SharedResourceError(f"无法解码水印文件 {path}: {e}") from e
    return img.convert('RGBA')
