"""FastAPIアプリケーションのメインエントリーポイント."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from hero_catalog.common.exceptions import (
    HeroNotFoundError,
    StoreError,
    UpstreamError,
    UserNotFoundError,
)
from hero_catalog.favorite.router import router as favorite_router
from hero_catalog.hero.router import router as hero_router
from hero_catalog.infra.external.superhero_api_client import SuperheroApiClient
from hero_catalog.settings.settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """起動時にログ設定と外部カタログクライアントを準備し、終了時に閉じる."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app.state.catalog_client = SuperheroApiClient.from_settings(settings)
    logger.info(f"Starting hero catalog (environment={settings.environment})")
    yield
    await app.state.catalog_client.aclose()


def create_app() -> FastAPI:
    """ルーターと例外ハンドラーを登録したアプリケーションを生成する."""
    app = FastAPI(title="Hero Catalog", lifespan=lifespan)

    @app.exception_handler(HeroNotFoundError)
    @app.exception_handler(UserNotFoundError)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(UpstreamError)
    async def upstream_handler(request: Request, exc: UpstreamError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(StoreError)
    async def store_handler(request: Request, exc: StoreError) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path} store failure: {exc}")
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.get("/")
    async def root() -> dict[str, str]:
        """ヘルスチェック用エンドポイント."""
        return {"status": "ok"}

    app.include_router(hero_router)
    app.include_router(favorite_router)
    return app


app = create_app()
