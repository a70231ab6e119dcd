# src/api/main.py

import logging
from decimal import getcontext

import uvicorn
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.api.v1.router import router as v1_router
from src.core.config.settings import settings

logging.basicConfig(level=settings.LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(settings.APP_NAME)

# Replays use their own local context; this covers everything outside them
getcontext().prec = settings.DECIMAL_PRECISION

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG_MODE,
    description="Reconstructs per-security holdings, FIFO cost basis and realized profit/loss "
                "from brokerage transaction and bonus-issue records."
)

app.include_router(v1_router, prefix=settings.API_V1_STR)


@app.get("/", include_in_schema=False)
async def root():
    return RedirectResponse(url="/docs")


if __name__ == "__main__":
    logger.info(f"Serving {settings.APP_NAME} v{settings.APP_VERSION} (debug={settings.DEBUG_MODE}, precision={settings.DECIMAL_PRECISION}).")
    uvicorn.run(
        "src.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG_MODE,
        log_level=settings.LOG_LEVEL.lower()
    )
