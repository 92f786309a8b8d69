import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import config
from app.core.dependencies import get_llm_service, get_orchestrator
from app.core.error_handler import global_exception_handler
from app.core.middleware.request_id_middleware import RequestIDMiddleware
from app.core.db import models  # noqa: F401  registers tables on Base.metadata

from app.integrations.whatsapp.controller import router as whatsapp_router
from app.modules.advisor.controller import router as advisor_router
from app.modules.transactions.controller import router as transactions_router
from app.modules.users.controller import router as users_router

logging.basicConfig(
    level=config.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("ZapFin API starting")
    yield
    # Let in-flight messages reach a terminal state before exiting
    await get_orchestrator().shutdown()
    logger.info("ZapFin API stopped")


app = FastAPI(
    title="ZapFin API",
    description="Registers income and expenses sent over WhatsApp",
    version="1.0.0",
    lifespan=lifespan,
)

# Exception handlers share one {"error": {"message": ...}} shape
app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(HTTPException, global_exception_handler)
app.add_exception_handler(RequestValidationError, global_exception_handler)

# Middlewares
app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(whatsapp_router)
app.include_router(users_router)
app.include_router(transactions_router)
app.include_router(advisor_router)


@app.get("/health")
async def health(request: Request) -> dict:
    return {
        "status": "ok",
        "request_id": str(request.state.request_id),
        "llm": get_llm_service().get_model_info(),
    }
