# -*- coding: utf-8 -*-
"""
图片水印批处理工具主程序
命令行实现在 watermarker/cli.py,这里只是从源码目录直接运行的入口
"""
import sys

from watermarker.cli import main

if __name__ == "__main__":
    sys.exit(main())
