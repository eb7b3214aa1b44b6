from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from articles import router as articles_router
from clusters import router as clusters_router
from core import config, db
from core.errors import JSON_MEDIA_TYPE, register_exception_handlers
from core.logging import configure_logging
from stories import router as stories_router
from teams import router as teams_router

configure_logging()


class JSONUTF8Response(JSONResponse):
    media_type = JSON_MEDIA_TYPE


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan, default_response_class=JSONUTF8Response)

# Public read API: browsers and mobile clients call it directly.
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_allow_origins(),
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

register_exception_handlers(app)

app.include_router(articles_router.router, tags=["articles"])
app.include_router(clusters_router.router, tags=["clusters"])
app.include_router(stories_router.router, tags=["stories"])
app.include_router(teams_router.router, tags=["teams"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
