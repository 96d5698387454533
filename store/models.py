"""
ORM 模型定义。
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class IsochroneRecord(Base):
    """
    等时圈分析历史（含导入的静态图层）
    """
    __tablename__ = "isochrone_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # "isochrone" 或 "layer"（导入的 GeoJSON）
    kind = Column(String(20), nullable=False, default="isochrone", index=True)

    # 分析参数 (lat, lng, mode, minutes)，图层为空
    params = Column(JSON, nullable=True)

    # GeoJSON geometry / 导入的原始 GeoJSON
    polygon = Column(JSON, nullable=False)

    # 简短描述 (e.g. "walking - 15m")
    description = Column(String(255), nullable=True)

    # AI 规划解读，后台生成
    narrative = Column(Text, nullable=True)
