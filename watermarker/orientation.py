# watermarker/orientation.py
"""
根据 EXIF Orientation 标记把图片转正

旋转均为逆时针;90 度整数倍的旋转和翻转都是无损的坐标置换,不做重采样。
标记 5..8 会交换宽高。
"""
from PIL import Image

from watermarker.models import Orientation

FLIP_H = Image.Transpose.FLIP_LEFT_RIGHT
FLIP_V = Image.Transpose.FLIP_TOP_BOTTOM

# 依次执行的步骤:整数表示逆时针旋转角度,其余为翻转
TRANSFORMS = {
    Orientation.TOP_LEFT: (),
    Orientation.TOP_RIGHT: (FLIP_H,),
    Orientation.BOTTOM_RIGHT: (180,),
    Orientation.BOTTOM_LEFT: (180, FLIP_H),
    Orientation.LEFT_TOP: (90, FLIP_V),
    Orientation.RIGHT_TOP: (270,),
    Orientation.RIGHT_BOTTOM: (270, FLIP_V),
    Orientation.LEFT_BOTTOM: (90,),
}

_QUARTER_TURNS = {
    90: Image.Transpose.ROTATE_90,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_270,
}

# 旋转后新露出区域的填充色:完全透明
FILL_COLOR = (0, 0, 0, 0)


def rotate(img, degrees):
    """
    逆时针旋转图片

    90 的整数倍用 transpose 完成,不会露出新区域;其他角度扩展画布,
    新露出的区域用完全透明填充(RGB 图片会先转为 RGBA)。
    """
    degrees %= 360
    if degrees == 0:
        return img.copy()
    if degrees in _QUARTER_TURNS:
        return img.transpose(_QUARTER_TURNS[degrees])
    if img.mode != 'RGBA':
        img = img.convert('RGBA')
    return img.rotate(degrees, resample=Image.BICUBIC, expand=True, fillcolor=FILL_COLOR)


def resolve(img, orientation):
    """
    返回转正后的新图片,不修改输入

    参数:
        img: 解码后的图片
        orientation: Orientation、原始标记值或 None

    未知或缺失的标记按原样处理(返回副本),不视为错误。
    """
    if not isinstance(orientation, Orientation):
        orientation = Orientation.parse(orientation)
    out = img.copy()
    for step in TRANSFORMS.get(orientation, ()):
        # Image.Transpose 本身是 IntEnum,必须先判断
        if isinstance(step, Image.Transpose):
            out = out.transpose(step)
        else:
            out = rotate(out, step)
    return out
