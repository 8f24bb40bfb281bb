"""
FastAPI应用主入口
"""
from fastapi import FastAPI, Request
from starlette.responses import HTMLResponse
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from fastapi.openapi.docs import get_swagger_ui_html

from api.routes import charges as charges_routes
from api.middleware import RequestIDMiddleware, LoggingMiddleware, LocaleMiddleware
from core.config import settings
from core.exceptions import register_exception_handlers
from core.response import success_response
from core.i18n import t
from core.logging_config import get_logger, configure_logging
from infrastructure.database import create_tables
from infrastructure.external.payments import get_payment_gateway


# 在入口处显式配置日志，避免模块导入时的副作用
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 仅开发环境自动建表，生产使用 Alembic 迁移
    if settings.DEBUG:
        await create_tables()
        logger.info("database_initialized", message="Database tables created (development)")
    else:
        logger.info(
            "database_migrations_required",
            message="No auto-create in production, use Alembic migrations (alembic upgrade head)"
        )

    gateway = get_payment_gateway()
    app.state.payment_gateway = gateway
    if gateway is None:
        logger.warning("payment_gateway_disabled", message="PAYMENT__GATEWAY__SECRET_KEY not set, remote capture/cancel disabled")
    else:
        logger.info("payment_gateway_initialized", provider=gateway.provider)

    yield

    if gateway is not None:
        await gateway.aclose()
    logger.info("application_shutdown", message="Application shutdown")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    description="Charge ledger: capture, cancel and refund bookkeeping for gateway charges",
    docs_url=None,  # 自定义 Swagger UI 以支持国际化
    redoc_url="/redoc",
)

# 中间件注意顺序：后添加的先执行
app.add_middleware(LocaleMiddleware)
app.add_middleware(LoggingMiddleware)
# Request ID 最先执行，为日志提供 request_id
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(charges_routes.router, prefix="/api/v1")


@app.get("/", tags=["Root"])
async def root():
    """API根路径"""
    return success_response(
        data={
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": "/docs",
            "redoc": "/redoc"
        },
        message=t("app.welcome", name=settings.PROJECT_NAME)
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """健康检查端点"""
    return success_response(data={"status": "healthy"}, message=t("health.ok"))


def _map_locale_to_swagger_lang(locale: str) -> str:
    """将后端 locale 映射为 Swagger UI 支持的语言代码。"""
    tag = (locale or "en").replace("_", "-").lower()
    if tag in {"zh", "zh-cn", "zh-hans"}:
        return "zh-CN"
    if tag in {"pt", "pt-br"}:
        return "pt-BR"
    return "en"


@app.get("/docs", include_in_schema=False)
async def custom_swagger_ui_html(request: Request) -> HTMLResponse:
    lang = _map_locale_to_swagger_lang(str(getattr(request.state, "locale", None) or "en"))
    base = get_swagger_ui_html(
        openapi_url=app.openapi_url,
        title=f"{settings.PROJECT_NAME} - API Docs",
        swagger_ui_parameters={
            "lang": lang,
            "displayRequestDuration": True,
        },
    )
    # “Try it out” 请求附带语言头
    injection = (
        "requestInterceptor: function(req){\n"
        "  req.headers = req.headers || {};\n"
        "  req.headers['X-Lang'] = '%s';\n"
        "  return req;\n"
        "},"
    ) % (lang,)
    content = base.body.decode("utf-8").replace("SwaggerUIBundle({", "SwaggerUIBundle({\n  " + injection, 1)
    # 返回新的 HTMLResponse，避免沿用旧的 Content-Length 头
    return HTMLResponse(content=content, status_code=base.status_code)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info"
    )
