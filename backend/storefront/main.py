"""
Taksha Storefront - Backend API
Catalog, cart, wishlist, orders, Razorpay payments, blog and admin dashboard
"""
import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables before settings are read
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.api import admin, auth, blog, cart, orders, payment, products, users, wishlist
from storefront.core.config import settings
from storefront.core.database import check_database, init_db
from storefront.core.rate_limit import RateLimitMiddleware

logging.basicConfig(
    level=logging.DEBUG if settings.API_DEBUG else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup when AUTO_CREATE_TABLES is set"""
    if settings.AUTO_CREATE_TABLES:
        init_db()
    logger.info(f"{settings.API_TITLE} {settings.API_VERSION} started")
    yield


app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)
app.add_middleware(RateLimitMiddleware)

# Include API routers
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(products.router, prefix="/api/products", tags=["Products"])
app.include_router(cart.router, prefix="/api/cart", tags=["Cart"])
app.include_router(wishlist.router, prefix="/api/wishlist", tags=["Wishlist"])
app.include_router(orders.router, prefix="/api/orders", tags=["Orders"])
app.include_router(payment.router, prefix="/api/payment", tags=["Payment"])
app.include_router(blog.router, prefix="/api/blog", tags=["Blog"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])


@app.get("/")
async def root():
    return {
        "message": "Taksha Storefront API",
        "status": "online",
        "version": settings.API_VERSION
    }


@app.get("/health")
async def health():
    """Health check endpoint for monitoring - tests database connectivity"""
    start_time = time.time()
    database = check_database()

    return {
        "status": "healthy" if database["status"] == "connected" else "degraded",
        "service": "taksha-storefront",
        "version": settings.API_VERSION,
        "database": database,
        "total_latency_ms": round((time.time() - start_time) * 1000, 2)
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("storefront.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.API_DEBUG)
