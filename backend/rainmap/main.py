import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from .api.routes import geocode, routes
from .config import LOG_LEVEL

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Rain Map",
    version="0.1.0",
    description="Backend API for Rain Map – pick the driving route least likely to see rain.",
)


@app.get("/health", tags=["health"])
def health_check():
    """
    Basic health check endpoint used for monitoring and deployment.
    """
    return JSONResponse(content={"status": "ok"})


# ---- API Routers ----

app.include_router(
    routes.router,
    prefix="/routes",
    tags=["routes"],
)

app.include_router(
    geocode.router,
    prefix="/geocode",
    tags=["geocode"],
)
