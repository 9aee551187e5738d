import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from aura_store.config import settings
from aura_store.database import create_db_and_tables
from aura_store.pricing import CheckoutError
from aura_store.routes import (
    addresses,
    cart,
    coupons,
    health,
    orders,
    payments,
    pincodes,
    wallet,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.ENV == "local":
        create_db_and_tables()
    yield

app = FastAPI(title="Devid Aura Store API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CheckoutError)
async def checkout_error_handler(request: Request, exc: CheckoutError):
    logger.info(f"Checkout rejected on {request.url.path}: {exc.msg}")
    return JSONResponse(status_code=400, content={"success": False, "msg": exc.msg})


app.include_router(payments.router, prefix="/payments", tags=["Checkout"])
app.include_router(coupons.router, prefix="/coupons", tags=["Coupons"])
app.include_router(pincodes.router, prefix="/address/pincodes", tags=["Pincodes"])
app.include_router(addresses.router, prefix="/address", tags=["Addresses"])
app.include_router(cart.router, prefix="/cart", tags=["Cart"])
app.include_router(orders.router, prefix="/orders", tags=["Orders"])
app.include_router(orders.admin_router, prefix="/admin/orders", tags=["Admin Orders"])
app.include_router(wallet.router, prefix="/wallet", tags=["Wallet"])
app.include_router(wallet.admin_router, prefix="/admin/wallet", tags=["Admin Wallet"])
app.include_router(health.router, prefix="/health", tags=["Health"])
