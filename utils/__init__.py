"""
工具函数入口：统一对外暴露常用方法。
"""

from .geojson import export_filename, parse_uploaded_geojson, result_to_feature

__all__ = [
    "export_filename",
    "parse_uploaded_geojson",
    "result_to_feature",
]
