"""
FastAPI 主应用：中间件、异常处理、路由注册
"""
import logging
from pathlib import Path
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

from .api_views import router as api_router
from .config import GithubConfig, load_github_config
from .errors import PicserError

# 配置日志
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parents[2]  # 指向项目根目录
ENV_PATH = BASE_DIR / "backend" / ".env"
if ENV_PATH.exists():
    load_dotenv(dotenv_path=str(ENV_PATH))


def create_app(github_config: Optional[GithubConfig] = None) -> FastAPI:
    app = FastAPI(
        title="Picser",
        description="上传图片到 GitHub 仓库并返回 jsDelivr / raw / GitHub 链接",
        version="1.0.0",
    )
    # 单租户上传使用的仓库配置；为 None 时 /api/upload 返回 500
    app.state.github_config = github_config

    # CORS 中间件（上传 API 供任意前端调用）
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    @app.get("/health")
    def health_check():
        """健康检查端点"""
        return {"status": "ok", "service": "Picser"}

    @app.exception_handler(PicserError)
    async def picser_error_handler(request: Request, exc: PicserError):
        if exc.status_code >= 500:
            logger.error(f"{request.url.path} failed: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message, **exc.extra},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request body"},
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        """500 错误处理"""
        logger.error(f"Internal server error: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )

    return app


def _startup_config() -> Optional[GithubConfig]:
    try:
        return load_github_config()
    except ValueError as e:
        logger.warning(f"Single-tenant upload disabled: {e}")
        return None


app = create_app(_startup_config())
