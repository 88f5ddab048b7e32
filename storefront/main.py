import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from storefront.version import VERSION
from storefront.core.config import settings
from storefront.core.errors import APIError
from storefront.api import auth, stores, products, addresses, orders, cart, admin, webhooks
from storefront.kafka import consumer as payment_consumer

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_PREFIX = '/api/v1'

# Create instrumentator first
instrumentator = Instrumentator()

app = FastAPI(title='Storefront API', version=VERSION)

# Instrument the app BEFORE adding routes or middleware
instrumentator.instrument(app).expose(
    app,
    include_in_schema=False,
    endpoint="/metrics",
    should_gzip=True,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With", "Accept", "Origin"],
    max_age=86400,
)

@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    return JSONResponse(status_code=exc.status_code, content={'status': exc.status, 'message': exc.message})

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={'status': 'error', 'message': 'Something went wrong!'})

@app.get('/health')
def health(): return {'status': 'ok'}

@app.get('/v1/_info')
def info(): return {'service': 'storefront', 'version': VERSION}

@app.on_event("startup")
async def startup_event():
    logger.info("Storefront %s starting, %d routes", VERSION, len(app.routes))
    if settings.KAFKA_ENABLED:
        payment_consumer.start()

@app.on_event("shutdown")
async def shutdown_event():
    payment_consumer.stop()
    logger.info("Storefront shutting down")

app.include_router(auth.router,      prefix=f'{API_PREFIX}/auth',      tags=['auth'])
app.include_router(stores.router,    prefix=f'{API_PREFIX}/stores',    tags=['stores'])
app.include_router(products.router,  prefix=f'{API_PREFIX}/products',  tags=['products'])
app.include_router(addresses.router, prefix=f'{API_PREFIX}/addresses', tags=['addresses'])
app.include_router(orders.router,    prefix=f'{API_PREFIX}/orders',    tags=['orders'])
app.include_router(cart.router,      prefix=f'{API_PREFIX}/cart',      tags=['cart'])
app.include_router(admin.router,     prefix=f'{API_PREFIX}/admin',     tags=['admin'])
app.include_router(webhooks.router,  prefix='/webhooks',               tags=['webhooks'])
