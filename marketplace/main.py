"""Main FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from marketplace.api import discounts, health, menu, offers
from marketplace.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    yield
    # Shutdown
    pass


app = FastAPI(
    title="Marketplace Offers",
    description="Limited-time offer and restaurant discount pricing",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router, tags=["health"])
app.include_router(menu.router, tags=["menu"])
app.include_router(offers.router, tags=["offers"])
app.include_router(discounts.router, tags=["discounts"])


@app.get("/")
async def root():
    return {"message": "Marketplace Offers API", "version": "0.1.0"}
