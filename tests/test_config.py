"""Tests for batch configuration and option validation."""

from __future__ import annotations

import json

import pytest
from PIL import Image

from watermarker.config import BatchConfig, NamingPolicy, load_config_file
from watermarker.errors import ConfigError
from watermarker.models import (
    ExplicitSize,
    MaxDimension,
    NoResize,
    WatermarkSpec,
    resize_policy_from_options,
)


@pytest.fixture
def config(tmp_path) -> BatchConfig:
    (tmp_path / "src").mkdir()
    return BatchConfig(
        source_directory=str(tmp_path / "src"),
        target_directory=str(tmp_path / "out"),
        watermark_image_file=str(tmp_path / "wm.png"),
    )


def test_defaults() -> None:
    cfg = BatchConfig()

    assert cfg.watermark_scale_factor == 100.0
    assert cfg.watermark_opacity == 0.5
    assert cfg.watermark_margin_right == 20
    assert cfg.watermark_margin_bottom == 20
    assert cfg.filename_suffix == "3DIGITSCOUNT"
    assert isinstance(cfg.resize_policy(), NoResize)
    assert cfg.naming_policy().keep_name


def test_valid_config_passes(config) -> None:
    assert config.validate() is config


def test_missing_required_options() -> None:
    with pytest.raises(ConfigError, match="source_directory"):
        BatchConfig().validate()


@pytest.mark.parametrize("opacity", [-0.01, 1.01, 5])
def test_opacity_out_of_range_is_rejected(config, opacity: float) -> None:
    with pytest.raises(ConfigError):
        config.merged(watermark_opacity=opacity).validate()


def test_resize_options_are_mutually_exclusive(config) -> None:
    with pytest.raises(ConfigError):
        config.merged(max_dimension=500, width=300).validate()


def test_unknown_suffix_mode(config) -> None:
    with pytest.raises(ConfigError):
        config.merged(filename="photo", filename_suffix="HEX").validate()


def test_target_equal_to_source_is_rejected(config) -> None:
    with pytest.raises(ConfigError):
        config.merged(target_directory=config.source_directory).validate()


def test_missing_source_directory(config, tmp_path) -> None:
    with pytest.raises(ConfigError):
        config.merged(source_directory=str(tmp_path / "missing")).validate()


def test_jpeg_quality_range(config) -> None:
    with pytest.raises(ConfigError):
        config.merged(jpeg_quality=0).validate()


def test_merged_ignores_none_and_rejects_unknown(config) -> None:
    assert config.merged(width=None).width == 0
    with pytest.raises(ConfigError):
        config.merged(colour="red")


def test_load_config_file(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"watermark_opacity": 0.8, "max_dimension": 1200}), encoding="utf-8")

    cfg = load_config_file(path)

    assert cfg.watermark_opacity == 0.8
    assert cfg.resize_policy() == MaxDimension(1200)
    assert cfg.watermark_margin_right == 20


@pytest.mark.parametrize("content", ["{not json", "[1, 2]", '{"unknown_key": 1}'])
def test_load_config_file_errors(tmp_path, content: str) -> None:
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config_file(path)


def test_load_config_file_missing(tmp_path) -> None:
    with pytest.raises(ConfigError):
        load_config_file(tmp_path / "absent.json")


def test_resize_policy_from_options() -> None:
    assert resize_policy_from_options() == NoResize()
    assert resize_policy_from_options(max_dimension=500) == MaxDimension(500)
    assert resize_policy_from_options(width=300) == ExplicitSize(300, 0)
    assert resize_policy_from_options(height=200) == ExplicitSize(0, 200)
    with pytest.raises(ConfigError):
        resize_policy_from_options(max_dimension=500, height=10)
    with pytest.raises(ConfigError):
        resize_policy_from_options(max_dimension=-1)
    with pytest.raises(ConfigError):
        resize_policy_from_options(width=-5)


def test_watermark_spec_validation() -> None:
    raster = Image.new("RGBA", (2, 2))

    assert WatermarkSpec(raster=raster, opacity=1.0).opacity == 1.0
    with pytest.raises(ConfigError):
        WatermarkSpec(raster=raster, opacity=-0.1)
    with pytest.raises(ConfigError):
        WatermarkSpec(raster=raster, scale_factor_percent=-1)
    with pytest.raises(ConfigError):
        WatermarkSpec(raster=raster, margin_right=-1)


def test_naming_policy() -> None:
    assert NamingPolicy().keep_name
    assert not NamingPolicy("photo", "RAND").keep_name
    with pytest.raises(ConfigError):
        NamingPolicy("photo", "3DIGITS")


@pytest.mark.parametrize(
    "values",
    [
        {"watermark_opacity": "0.5"},
        {"max_dimension": 12.5},
        {"watermark_margin_right": True},
        {"filename": 7},
    ],
)
def test_load_config_file_rejects_wrong_types(tmp_path, values: dict) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(values), encoding="utf-8")

    with pytest.raises(ConfigError, match=next(iter(values))):
        load_config_file(path)


def test_integer_accepted_for_float_option(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"watermark_opacity": 1, "watermark_scale_factor": 50}), encoding="utf-8")

    cfg = load_config_file(path)

    assert cfg.watermark_opacity == 1
    assert cfg.watermark_scale_factor == 50
