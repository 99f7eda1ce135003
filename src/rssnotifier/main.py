"""RSS Notifier 主应用入口."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rssnotifier.api import feeds, settings
from rssnotifier.config import get_settings
from rssnotifier.context import build_context, load_relay_config
from rssnotifier.models.database import close_db, init_db
from rssnotifier.scheduler import create_scheduler, shutdown_scheduler

# 配置日志
logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """应用生命周期管理."""
    app_settings = get_settings()

    # 启动时初始化，失败直接终止进程
    logger.info("正在初始化数据库...")
    session_factory = await init_db(app_settings.database_url)

    logger.info("正在加载邮件中继配置...")
    relay = await load_relay_config(session_factory, app_settings)

    ctx = build_context(app_settings, session_factory, relay)
    app.state.context = ctx
    ctx.pool.start()

    logger.info("正在启动定时任务...")
    create_scheduler(app_settings, ctx.dispatcher)

    logger.info("RSS Notifier 启动完成！")
    yield

    # 关闭时清理
    logger.info("正在关闭...")
    await shutdown_scheduler()
    await ctx.close()
    await close_db()
    logger.info("RSS Notifier 已关闭")


app = FastAPI(
    title="RSS Notifier",
    description="RSS 订阅更新邮件提醒",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type"],
)

# 注册路由
app.include_router(feeds.router)
app.include_router(settings.router)


@app.get("/")
async def root() -> dict:
    """根路径."""
    return {
        "name": "RSS Notifier",
        "version": "0.1.0",
        "description": "RSS 订阅更新邮件提醒",
    }


@app.get("/health")
async def health() -> dict:
    """健康检查."""
    return {"status": "ok"}


def run() -> None:
    """命令行入口."""
    import uvicorn

    app_settings = get_settings()
    uvicorn.run(
        "rssnotifier.main:app",
        host=app_settings.http_host,
        port=app_settings.http_port,
    )


if __name__ == "__main__":
    run()
