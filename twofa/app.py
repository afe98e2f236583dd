# (c) Copyright Datacraft, 2026
"""Standalone application serving the 2FA endpoints."""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from .db import Base
from .db.engine import get_engine
from .router import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
	# Settings table of the SQL store
	Base.metadata.create_all(get_engine())
	logger.info("2FA settings store ready")
	yield


def create_app() -> FastAPI:
	app = FastAPI(title="twofa", lifespan=lifespan)
	app.include_router(router)
	return app
