# watermarker/batch_worker.py
import logging
import os
import pathlib
import random
import tempfile
from dataclasses import dataclass, field

from watermarker.config import SUFFIX_COUNT
from watermarker.errors import ConfigError, PerItemError
from watermarker.exporter import composite
from watermarker.image_io import (
    decode_image, encode_image, is_image_file, load_watermark, read_orientation,
)
from watermarker.models import WatermarkSpec
from watermarker.orientation import resolve

logger = logging.getLogger(__name__)


@dataclass
class BatchReport:
    """一次批处理的结果汇总"""
    processed: list = field(default_factory=list)   # (源路径, 输出路径)
    skipped: list = field(default_factory=list)     # 非图片文件
    failed: list = field(default_factory=list)      # (源路径, 错误信息)

    @property
    def total(self):
        return len(self.processed) + len(self.failed)


def make_suffix(naming, count, rng=random):
    if naming.suffix_mode == SUFFIX_COUNT:
        return f"{count:03d}"
    return f"{rng.randint(0, 999999):06d}"


def ensure_output_path(src_path, out_dir, naming, count, rng=random):
    """
    计算输出路径

    参数:
        src_path: 源文件路径
        out_dir: 输出文件夹
        naming: NamingPolicy
        count: 当前成功处理的序号(从 1 开始)

    保留原名时输出与源文件同名;否则为 filename + 后缀 + 源扩展名。
    已存在的同名文件会被覆盖。
    """
    src = pathlib.Path(src_path)
    if naming.keep_name:
        new_name = src.name
    else:
        new_name = f"{naming.filename}{make_suffix(naming, count, rng)}{src.suffix}"
    return str(pathlib.Path(out_dir) / new_name)


def list_source_files(source_directory):
    """
    列出源文件夹中的文件,按文件名排序

    返回:
        (图片路径列表, 跳过的路径列表)
    """
    images, skipped = [], []
    with os.scandir(source_directory) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        if not entry.is_file() or entry.name.startswith('.'):
            continue
        if is_image_file(entry.name):
            images.append(entry.path)
        else:
            skipped.append(entry.path)
    return images, skipped


def current_umask():
    umask = os.umask(0)
    os.umask(umask)
    return umask


def write_atomic(dst_path, data):
    """
    先写临时文件再重命名,失败时不留下不完整的输出

    mkstemp 创建的文件权限为 0600,重命名前改回普通文件的 0666 & ~umask。
    """
    out_dir = os.path.dirname(dst_path) or '.'
    fd, tmp_path = tempfile.mkstemp(prefix='.wm-', suffix='.tmp', dir=out_dir)
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
        os.chmod(tmp_path, 0o666 & ~current_umask())
        os.replace(tmp_path, dst_path)
    except OSError:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def process_image(src_path, dst_path, spec, resize_policy, jpeg_quality=90):
    """
    处理单张图片:读取 -> 转正 -> 合成 -> 编码 -> 写出

    异常:
        PerItemError: 该图片失败,调用方记录后继续下一张
    """
    try:
        with open(src_path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise PerItemError(f"无法打开文件: {e}", src_path) from e

    try:
        orientation = read_orientation(data)
        img = decode_image(data)
    except PerItemError as e:
        raise e.for_path(src_path) from e
    if orientation is None:
        logger.debug("%s 没有方向信息,按原样处理", src_path)

    upright = resolve(img, orientation)
    result = composite(upright, spec, resize_policy, extension=pathlib.Path(src_path).suffix)
    try:
        payload = encode_image(result.image, result.extension, jpeg_quality=jpeg_quality)
    except (OSError, ValueError) as e:
        raise PerItemError(f"无法编码图片: {e}", src_path) from e

    try:
        write_atomic(dst_path, payload)
    except OSError as e:
        raise PerItemError(f"无法写出文件 {dst_path}: {e}", src_path) from e
    return dst_path


def run_batch(config, progress_callback=None, rng=random):
    """
    按配置处理整个文件夹

    参数:
        config: BatchConfig
        progress_callback(done, total, message): 每处理完一张(成功或失败)调用一次
        rng: 随机后缀使用的随机数源

    返回:
        BatchReport

    配置错误 (ConfigError) 和水印加载失败 (SharedResourceError) 直接抛出;
    单张图片的错误只记录日志,不会中断批次。
    """
    config.validate()
    resize_policy = config.resize_policy()
    naming = config.naming_policy()

    # 水印只加载一次,所有图片共享
    spec = WatermarkSpec(
        raster=load_watermark(config.watermark_image_file),
        scale_factor_percent=config.watermark_scale_factor,
        opacity=config.watermark_opacity,
        margin_right=config.watermark_margin_right,
        margin_bottom=config.watermark_margin_bottom,
    )

    try:
        os.makedirs(config.target_directory, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"无法创建输出文件夹 {config.target_directory}: {e}") from e
    logger.info("开始处理文件夹 %s ...", config.source_directory)

    report = BatchReport()
    try:
        sources, report.skipped = list_source_files(config.source_directory)
    except OSError as e:
        raise ConfigError(f"无法读取源文件夹 {config.source_directory}: {e}") from e
    for path in report.skipped:
        logger.info("跳过 %s: 不支持的文件类型", path)

    total = len(sources)
    count = 1
    for done, src_path in enumerate(sources, start=1):
        dst_path = ensure_output_path(src_path, config.target_directory, naming, count, rng)
        try:
            process_image(src_path, dst_path, spec, resize_policy, config.jpeg_quality)
        except PerItemError as e:
            logger.warning("处理失败 %s", e)
            report.failed.append((src_path, e.message))
            message = f"错误 ({os.path.basename(src_path)}): {e.message}"
        else:
            logger.info("已保存: %s", dst_path)
            report.processed.append((src_path, dst_path))
            message = f"已保存: {dst_path}"
            count += 1
        if progress_callback:
            progress_callback(done, total, message)

    logger.info(
        "处理完成: 成功 %d, 失败 %d, 跳过 %d",
        len(report.processed), len(report.failed), len(report.skipped),
    )
    return report
