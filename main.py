"""
FastAPI主应用入口
职责：创建应用实例、构建等时圈服务、集成中间件、挂载路由
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from core.config import settings
from core.exceptions import BizError
from modules.isochrone import GeminiNarrator, IsochroneService, OverpassFetcher
from router import analysis_router, misc_router
from store import init_db
import asyncio

# ==================== 配置日志 ====================
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(name)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_isochrone_service() -> IsochroneService:
    """组装等时圈服务（路网抓取 + 可选 AI 解读）"""
    fetcher = OverpassFetcher(settings.overpass_endpoint, timeout_s=settings.overpass_timeout_s)
    narrator = None
    if settings.gemini_api_key:
        narrator = GeminiNarrator(
            settings.gemini_api_key,
            settings.gemini_model,
            timeout_s=settings.gemini_timeout_s,
        )
    else:
        logger.info("GEMINI_API_KEY 未配置，跳过规划解读")
    return IsochroneService(
        fetcher,
        narrator=narrator,
        speeds=settings.transport_speeds,
        padding_factor=settings.isochrone_padding_factor,
        tightness=settings.hull_max_edge_km,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    logger.info("=" * 50)
    logger.info("应用启动中...")
    logger.info(f"基础URL: {settings.app_base_url}")
    logger.info(f"Overpass: {settings.overpass_endpoint}")
    logger.info("=" * 50)

    # 初始化数据库
    await asyncio.to_thread(init_db)

    app.state.isochrone_service = build_isochrone_service()

    try:
        yield
    finally:
        logger.info("应用关闭中...")
        logger.info("应用已关闭")

# ==================== 创建FastAPI应用 ====================
app = FastAPI(
    title="NusaIsochrone API",
    description="基于 OSM 路网与 Dijkstra 的等时圈分析服务",
    version="1.0.0",
    lifespan=lifespan,
)

# 配置CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 开启Gzip压缩
app.add_middleware(GZipMiddleware, minimum_size=500)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc):
    logger.error(f"Validation Error: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors())},
    )

@app.exception_handler(BizError)
async def biz_exception_handler(request, exc: BizError):
    logger.error(f"BizError: {exc.message} | Payload: {exc.payload}")
    return JSONResponse(
        status_code=exc.code,
        content={
            "status": "error",
            "message": exc.message,
            "detail": exc.payload
        },
    )

# ==================== API路由 ====================

app.include_router(misc_router)
app.include_router(analysis_router)

# ==================== 主入口 ====================

if __name__ == "__main__":
    import uvicorn

    logger.info("启动FastAPI应用...")
    logger.info(f"访问地址: http://localhost:{settings.app_port}")
    logger.info(f"API文档: http://localhost:{settings.app_port}/docs")

    uvicorn.run(
        "main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=True,
        log_level="info"
    )
