import inspect
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from openai import AsyncOpenAI

from config import Settings
from dal.account_dal import AccountDAL
from dal.case_dal import CaseDAL
from dal.kv_store import KeyValueStore, SQLiteKeyValueStore
from dal.message_dal import MessageDAL
from dal.session_dal import SessionDAL
from routes.analysis_route import router as analysis_router
from routes.auth_route import router as auth_router
from routes.case_route import router as case_router
from routes.message_ws import router as message_ws_router
from services.account_service import AccountDirectory
from services.batch_analyzer import RemoteAnalyzer
from services.latency import LatencyHook
from services.openai.skin_analyzer import SkinAnalyzer
from utils.database_init import AsyncDatabaseInitializer

BASE_DIR = Path(__file__).resolve().parent
PUBLIC_DIR = BASE_DIR / "public"


def configure_services(
    app: FastAPI,
    store: KeyValueStore,
    settings: Settings,
    analyzer: Optional[RemoteAnalyzer] = None,
) -> None:
    """Build the directories over `store` and attach them to `app.state`."""
    app.state.settings = settings
    app.state.kv_store = store
    app.state.case_dal = CaseDAL(store)
    app.state.message_dal = MessageDAL(store)
    app.state.account_directory = AccountDirectory(
        AccountDAL(store),
        SessionDAL(store),
        latency=LatencyHook(settings.account_latency_seconds),
        reset_code_ttl_minutes=settings.reset_code_ttl_minutes,
    )
    app.state.skin_analyzer = analyzer


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the SQLite key-value store (at DATABASE_DIR/dermasight.db)
      - the OpenAI async client, when an API key is configured
    and attach them to `app.state`.
    """
    settings = Settings.from_env()

    db_initializer = AsyncDatabaseInitializer(settings.database_dir)
    await db_initializer.ensure_database()
    app.state.db_initializer = db_initializer

    openai_client = None
    if settings.openai_api_key:
        try:
            openai_client = AsyncOpenAI(api_key=settings.openai_api_key)
        except Exception as exc:
            raise RuntimeError("Failed to initialize OpenAI Async client") from exc
    app.state.openai_client = openai_client

    analyzer = SkinAnalyzer(openai_client, model=settings.openai_model) if openai_client else None
    configure_services(app, SQLiteKeyValueStore(db_initializer), settings, analyzer)

    try:
        yield
    finally:
        # Gracefully close the OpenAI client if it exposes a close/aclose method.
        client = getattr(app.state, "openai_client", None)
        if client is not None:
            aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
            if aclose is not None:
                try:
                    if inspect.iscoroutinefunction(aclose):
                        await aclose()
                    else:
                        result = aclose()
                        if inspect.isawaitable(result):
                            await result
                except Exception as exc:
                    logging.error("Error closing OpenAI client: %s", exc)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(title="DermaSight", lifespan=lifespan)

    # Serve static assets from the public directory, if it exists.
    if PUBLIC_DIR.exists():
        app.mount("/public", StaticFiles(directory=PUBLIC_DIR), name="public")

    @app.get("/", include_in_schema=False)
    async def serve_index():
        """
        Serve the frontend index page from the public directory.
        """
        index_path = PUBLIC_DIR / "index.html"
        if not index_path.exists():
            raise HTTPException(status_code=404, detail="Frontend not found")
        return FileResponse(index_path)

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check reporting store and analyzer availability.
        """
        has_store = getattr(request.app.state, "kv_store", None) is not None
        has_analyzer = getattr(request.app.state, "skin_analyzer", None) is not None
        return {"ok": True, "store_initialized": has_store, "analyzer_available": has_analyzer}

    app.include_router(auth_router)
    app.include_router(analysis_router)
    app.include_router(case_router)
    app.include_router(message_ws_router)

    return app


app = create_app()
