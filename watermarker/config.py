# watermarker/config.py
"""
批处理配置

BatchConfig 取代了原来散落的全局变量,在进入流水线前一次性校验。
配置既可以来自命令行,也可以来自 JSON 文件(键名与字段名一致),命令行优先。
"""
import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

from watermarker.errors import ConfigError
from watermarker.models import check_watermark_options, resize_policy_from_options

SUFFIX_COUNT = "3DIGITSCOUNT"
SUFFIX_RANDOM = "RAND"
SUFFIX_MODES = (SUFFIX_COUNT, SUFFIX_RANDOM)


@dataclass(frozen=True)
class NamingPolicy:
    """
    输出文件命名

    filename 为空时保留源文件名;否则输出为 filename + 后缀 + 源扩展名,
    后缀为三位计数 (3DIGITSCOUNT) 或六位随机数 (RAND)。
    """
    filename: str = ""
    suffix_mode: str = SUFFIX_COUNT

    def __post_init__(self):
        if self.suffix_mode not in SUFFIX_MODES:
            raise ConfigError(
                f"未知的文件名后缀模式 '{self.suffix_mode}',可选值: {', '.join(SUFFIX_MODES)}"
            )

    @property
    def keep_name(self):
        return not self.filename


@dataclass(frozen=True)
class BatchConfig:
    source_directory: str = ""
    target_directory: str = ""
    watermark_image_file: str = ""
    watermark_scale_factor: float = 100.0
    watermark_opacity: float = 0.5
    watermark_margin_right: int = 20
    watermark_margin_bottom: int = 20
    max_dimension: int = 0
    width: int = 0
    height: int = 0
    filename: str = ""
    filename_suffix: str = SUFFIX_COUNT
    jpeg_quality: int = 90

    def validate(self):
        """检查所有选项,任何问题都抛出 ConfigError"""
        self.check_types()
        missing = [
            name for name in ("source_directory", "target_directory", "watermark_image_file")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigError(f"缺少必填选项: {', '.join(missing)}")

        check_watermark_options(
            self.watermark_scale_factor,
            self.watermark_opacity,
            self.watermark_margin_right,
            self.watermark_margin_bottom,
        )
        self.resize_policy()
        self.naming_policy()

        if not 1 <= self.jpeg_quality <= 100:
            raise ConfigError(f"JPEG 质量必须在 1 到 100 之间: {self.jpeg_quality}")

        if not os.path.isdir(self.source_directory):
            raise ConfigError(f"源文件夹不存在: {self.source_directory}")
        # 保留原文件名时会覆盖原图,禁止导出到原文件夹
        if os.path.abspath(self.source_directory) == os.path.abspath(self.target_directory):
            raise ConfigError("禁止导出到原文件夹,请选择其他输出文件夹")
        return self

    def check_types(self):
        """字段类型必须与默认值一致(float 字段也接受 int),JSON 中的字符串数字不会被自动转换"""
        for f in fields(self):
            value = getattr(self, f.name)
            expected = type(f.default)
            if isinstance(value, bool):
                ok = expected is bool
            elif expected is float:
                ok = isinstance(value, (int, float))
            else:
                ok = isinstance(value, expected)
            if not ok:
                raise ConfigError(
                    f"配置项 {f.name} 的类型应为 {expected.__name__},实际为 {type(value).__name__}: {value!r}"
                )
        return self

    def resize_policy(self):
        return resize_policy_from_options(self.max_dimension, self.width, self.height)

    def naming_policy(self):
        return NamingPolicy(self.filename, self.filename_suffix)

    def merged(self, **overrides):
        """返回用非 None 的值覆盖后的新配置"""
        values = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(values) - field_names()
        if unknown:
            raise ConfigError(f"未知的配置项: {', '.join(sorted(unknown))}")
        return replace(self, **values).check_types()


def field_names():
    return {f.name for f in fields(BatchConfig)}


def load_config_file(path):
    """
    从 JSON 文件加载配置

    返回:
        BatchConfig,文件中未出现的字段使用默认值
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"无法读取配置文件 {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"配置文件 {path} 不是合法的 JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"配置文件 {path} 的顶层必须是对象")
    return BatchConfig().merged(**data)
