# backend/main.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .db import Base, make_engine, make_session_factory
from . import models  # noqa: F401  (registers tables on Base.metadata)
from .services.llm import LLMClient

# --- Routers ---
from .routes.auth import router as auth_router
from .routes.deals import router as deals_router
from .routes.contacts import router as contacts_router
from .routes.action_items import router as action_items_router
from .routes.deal_ai import router as deal_ai_router


def create_app(database_url: Optional[str] = None, llm: Optional[LLMClient] = None) -> FastAPI:
    """
    Build the API with its own engine / session factory and LLM client.
    Both live on app.state and reach handlers through get_db / get_llm.
    """
    if not logging.getLogger().handlers:
        logging.basicConfig()
    logging.getLogger().setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    engine = make_engine(database_url or settings.DATABASE_URL)
    # Create tables (dev). In prod, use migrations.
    Base.metadata.create_all(bind=engine)

    app = FastAPI(title="Deal Assistant API", version="0.1.0")
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.llm = llm or LLMClient()

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(auth_router)
    app.include_router(deals_router)
    app.include_router(contacts_router)
    app.include_router(action_items_router)
    app.include_router(deal_ai_router)

    # ========= health =========
    @app.get("/api/health")
    def health():
        return {"ok": True, "time": datetime.utcnow().isoformat() + "Z"}

    return app


app = create_app()
