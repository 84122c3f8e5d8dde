# watermarker/cli.py
"""
图片水印批处理工具主程序
功能:把一张带透明通道的水印图片批量叠加到文件夹中的所有照片上,
按 EXIF 方向转正,可选缩放,并按指定规则命名输出文件
"""

# 标准库导入
import argparse
import logging
import sys

# 本地模块导入
from watermarker.batch_worker import run_batch
from watermarker.config import SUFFIX_MODES, BatchConfig, load_config_file
from watermarker.errors import WatermarkerError
from watermarker.log import configure_logging

# 全局常量
APP_NAME = "watermark-to-image"
VERSION = "1.0.0"

logger = logging.getLogger(APP_NAME)


def build_parser():
    """
    创建命令行解析器

    每个选项同时接受 Python 风格的长选项和旧版的驼峰写法(如 -sourceDirectory)。
    未在命令行给出的选项为 None,由配置文件或默认值补齐。
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="为文件夹中的图片批量添加图片水印",
    )
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {VERSION}")
    parser.add_argument("--config", help="JSON 配置文件路径,命令行选项优先")
    parser.add_argument("--log-level", help="日志级别 (DEBUG, INFO, WARNING, ERROR)")

    parser.add_argument("--source-directory", "-sourceDirectory", dest="source_directory",
                        help="原图所在文件夹(必填)")
    parser.add_argument("--target-directory", "-targetDirectory", dest="target_directory",
                        help="输出文件夹(必填)")
    parser.add_argument("--watermark-image-file", "-watermarkImageFile", dest="watermark_image_file",
                        help="水印 PNG 图片路径(必填)")
    parser.add_argument("--watermark-scale-factor", "-watermarkScaleFactor", dest="watermark_scale_factor",
                        type=float, help="水印缩放百分比,默认 100")
    parser.add_argument("--watermark-opacity", "-watermarkOpacity", dest="watermark_opacity",
                        type=float, help="水印不透明度 0.0 到 1.0,默认 0.5")
    parser.add_argument("--watermark-margin-right", "-watermarkMarginRight", dest="watermark_margin_right",
                        type=int, help="水印距右边的像素,默认 20")
    parser.add_argument("--watermark-margin-bottom", "-watermarkMarginBottom", dest="watermark_margin_bottom",
                        type=int, help="水印距下边的像素,默认 20")
    parser.add_argument("--max-dimension", "-targetWatermarkedImageMaxDimension", dest="max_dimension",
                        type=int, help="输出图片最长边,保持宽高比;不能与 --width/--height 同时使用")
    parser.add_argument("--width", "-targetWatermarkedImageWidth", dest="width",
                        type=int, help="输出宽度;未指定高度时保持宽高比")
    parser.add_argument("--height", "-targetWatermarkedImageHeight", dest="height",
                        type=int, help="输出高度;未指定宽度时保持宽高比")
    parser.add_argument("--filename", "-targetWatermarkedImageFilename", dest="filename",
                        help="统一重命名输出文件,留空则保留原文件名")
    parser.add_argument("--filename-suffix", "-targetWatermarkedImageFilenameSuffix", dest="filename_suffix",
                        choices=SUFFIX_MODES,
                        help="文件名后缀:3DIGITSCOUNT 三位计数, RAND 六位随机数")
    parser.add_argument("--jpeg-quality", dest="jpeg_quality", type=int,
                        help="JPEG 输出质量 1..100,默认 90")
    return parser


def config_from_args(args):
    """合并配置文件与命令行选项"""
    base = load_config_file(args.config) if args.config else BatchConfig()
    overrides = {
        k: v for k, v in vars(args).items()
        if k not in ("config", "log_level")
    }
    return base.merged(**overrides)


def on_progress(done, total, message):
    print(f"[{done}/{total}] {message}")


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = config_from_args(args)
        report = run_batch(config, progress_callback=on_progress)
    except WatermarkerError as e:
        logger.error("错误: %s", e)
        return 1

    if report.failed:
        logger.warning("%d 张图片处理失败", len(report.failed))
    return 0


if __name__ == "__main__":
    sys.exit(main())
