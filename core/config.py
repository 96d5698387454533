"""
配置管理模块
使用Pydantic Settings从环境变量加载配置
"""

from pathlib import Path
from typing import Dict, List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    应用配置类
    从环境变量加载配置，支持类型转换和验证
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # 未声明的 env 变量忽略，不抛出校验错误
    )

    # 应用配置
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_base_url: str = "http://localhost:8000"

    # CORS跨域配置
    cors_origins: List[str] = ["*"]

    # SQLite 数据文件路径（分析历史）
    db_path: str = str(Path(__file__).resolve().parent.parent / "data" / "isochrone.db")

    # 路网数据（Overpass）
    overpass_endpoint: str = Field(
        "https://overpass-api.de/api/interpreter",
        validation_alias="OVERPASS_ENDPOINT",
        description="Overpass API interpreter URL",
    )
    overpass_timeout_s: int = Field(
        60,
        validation_alias="OVERPASS_TIMEOUT_S",
        description="Overpass request timeout (seconds)",
    )

    # 等时圈（Isochrone）参数
    transport_speeds: Dict[str, float] = Field(
        default_factory=lambda: {"walking": 5.0, "cycling": 15.0, "driving": 40.0},
        validation_alias="TRANSPORT_SPEEDS",
        description="Average speed per transport mode (km/h)",
    )
    isochrone_padding_factor: float = Field(
        1.5,
        validation_alias="ISOCHRONE_PADDING_FACTOR",
        gt=0,
        description="Fetch radius multiplier over the straight-line reach",
    )
    hull_max_edge_km: float = Field(
        0.1,
        validation_alias="HULL_MAX_EDGE_KM",
        gt=0,
        description="Concave hull max triangle edge (km)",
    )
    time_intervals: List[int] = [1, 5, 10, 15, 30, 45]
    default_center: List[float] = [-6.2088, 106.8456]  # Jakarta

    # 规划解读（Gemini）
    gemini_api_key: str = Field(
        "",
        validation_alias="GEMINI_API_KEY",
        description="Gemini API key; empty disables narrative generation",
    )
    gemini_model: str = Field(
        "gemini-3-flash-preview",
        validation_alias="GEMINI_MODEL",
    )
    gemini_timeout_s: int = Field(
        30,
        validation_alias="GEMINI_TIMEOUT_S",
    )

    @property
    def sqlalchemy_database_uri(self) -> str:
        return f"sqlite:///{Path(self.db_path).resolve()}"


settings = Settings()
