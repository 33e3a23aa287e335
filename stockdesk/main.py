# stockdesk/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockdesk.api.error_handlers import register_exception_handlers
from stockdesk.api.routers import categories, products, stock_movements
from stockdesk.client import create_client
from stockdesk.core.config import settings
from stockdesk.core.logging import get_logger, setup_logging

logger = get_logger(__name__)

TAGS_METADATA = [
    {"name": "products", "description": "Products, stock levels and low-stock alerts."},
    {"name": "categories", "description": "Product categories per project."},
    {"name": "stock-movements", "description": "Stock in/out movements and bulk operations."},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if settings.supabase_configured and getattr(app.state, "supabase", None) is None:
        app.state.supabase = create_client()
        logger.info("Supabase client initialised", extra={"url": settings.SUPABASE_URL})
    elif not settings.supabase_configured:
        logger.warning("SUPABASE_URL / SUPABASE_ANON_KEY not set; data endpoints will answer 503")
    try:
        yield
    finally:
        client = getattr(app.state, "supabase", None)
        if client is not None:
            await client.aclose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    description="Inventory API for products, categories and stock movements.",
    openapi_tags=TAGS_METADATA,
    lifespan=lifespan,
)

# --- Middlewares ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# --- Routers ---
app.include_router(products.router, prefix=settings.API_V1_STR)
app.include_router(categories.router, prefix=settings.API_V1_STR)
app.include_router(stock_movements.router, prefix=settings.API_V1_STR)


@app.get("/", include_in_schema=False)
def root():
    return {"status": "ok", "docs_url": "/docs"}
