import logging

from fastapi import HTTPException, Request, status

from modules.isochrone import IsochroneService

logger = logging.getLogger(__name__)


async def get_isochrone_service(request: Request) -> IsochroneService:
    """
    取出启动时构建的等时圈服务实例
    """
    service = getattr(request.app.state, "isochrone_service", None)
    if service is None:
        logger.error("IsochroneService 未初始化")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Isochrone service not initialised",
        )
    return service
