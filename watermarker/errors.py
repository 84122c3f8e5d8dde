# watermarker/errors.py
"""
批处理中的错误分类

ConfigError          配置错误,在处理任何图片之前抛出,致命
SharedResourceError  共享资源(水印图片)无法加载,致命,终止整个批次
PerItemError         单张图片失败(解码/EXIF/写出),记录日志后跳过,批次继续
"""


class WatermarkerError(Exception):
    """所有水印相关错误的基类"""


class ConfigError(WatermarkerError):
    pass


class SharedResourceError(WatermarkerError):
    pass


class PerItemError(WatermarkerError):
    def __init__(self, message, path=None):
        super().__init__(f"{path}: {message}" if path else message)
        self.message = message
        self.path = path

    def for_path(self, path):
        """返回带有文件路径的同一错误"""
        return PerItemError(self.message, path)
