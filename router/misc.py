from datetime import datetime
from fastapi import APIRouter

from core.config import settings

router = APIRouter()


@router.get("/health", summary="健康检查")
async def health_check():
    """检查服务是否正常运行"""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": "1.0.0",
    }


@router.get("/", summary="根路径")
async def root():
    """返回欢迎信息"""
    return {
        "message": "NusaIsochrone API",
        "docs": f"{settings.app_base_url}/docs",
        "health": f"{settings.app_base_url}/health",
    }


@router.get("/api/v1/config", summary="获取前端配置")
async def get_frontend_config():
    """
    返回前端所需的配置信息 (速度表、时间档位、默认中心)
    """
    return {
        "transport_speeds": settings.transport_speeds,
        "time_intervals": settings.time_intervals,
        "default_center": settings.default_center,
        "narrative_enabled": bool(settings.gemini_api_key),
    }
