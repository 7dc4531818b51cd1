# app/main.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .database import build_store
from .errors import setup_error_handling
from .handlers import ResourceHandler, handler_for
from .models import PRODUCTS, USERS, Product, User

logger = logging.getLogger(__name__)

# ---------------------------
# Health
# ---------------------------
health_router = APIRouter(tags=["Health"])

@health_router.get("/health")
async def health_check(request: Request):
    return {
        "status": "healthy",
        "service": request.app.state.service_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

# ---------------------------
# Product endpoints
# ---------------------------
product_router = APIRouter(prefix="/api/products", tags=["Products"])
products = handler_for(PRODUCTS)

@product_router.get("", response_model=List[Product])
async def list_products(
    category: Optional[str] = None,
    in_stock: Optional[bool] = Query(None, alias="inStock"),
    handler: ResourceHandler = Depends(products),
):
    return await handler.list({"category": category, "inStock": in_stock})

@product_router.post("", status_code=201, response_model=Product)
async def create_product(payload: Any = Body(None), handler: ResourceHandler = Depends(products)):
    return await handler.create(payload)

@product_router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str, handler: ResourceHandler = Depends(products)):
    return await handler.get(product_id)

@product_router.put("/{product_id}", response_model=Product)
async def update_product(product_id: str, payload: Any = Body(None), handler: ResourceHandler = Depends(products)):
    return await handler.update(product_id, payload)

# ---------------------------
# User endpoints
# ---------------------------
user_router = APIRouter(prefix="/api/users", tags=["Users"])
users = handler_for(USERS)

@user_router.get("", response_model=List[User])
async def list_users(email: Optional[str] = None, handler: ResourceHandler = Depends(users)):
    return await handler.list({"email": email})

@user_router.post("", status_code=201, response_model=User)
async def create_user(payload: Any = Body(None), handler: ResourceHandler = Depends(users)):
    return await handler.create(payload)

@user_router.get("/{user_id}", response_model=User)
async def get_user(user_id: str, handler: ResourceHandler = Depends(users)):
    return await handler.get(user_id)

@user_router.put("/{user_id}", response_model=User)
async def update_user(user_id: str, payload: Any = Body(None), handler: ResourceHandler = Depends(users)):
    return await handler.update(user_id, payload)

# ---------------------------
# App factory
# ---------------------------
SERVICES = {
    "product-service": (product_router, (PRODUCTS,)),
    "user-service": (user_router, (USERS,)),
}

def create_app(service: str = config.SERVICE_NAME, store=None) -> FastAPI:
    """
    Build the FastAPI app for one service.

    ``store`` is connected on startup and closed on shutdown; when omitted the
    backend selected by STORE_BACKEND is built at startup.
    """
    if service not in SERVICES:
        raise ValueError(f"Unknown service: {service!r}")
    router, kinds = SERVICES[service]

    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.store is None:
            app.state.store = build_store()
        await app.state.store.connect(kinds)
        logger.info("%s ready", service)
        try:
            yield
        finally:
            await app.state.store.close()

    app = FastAPI(title=service, lifespan=lifespan)
    app.state.service_name = service
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_error_handling(app)

    app.include_router(health_router)
    app.include_router(router)
    return app


product_app = create_app("product-service")
user_app = create_app("user-service")
app = create_app(config.SERVICE_NAME)


def run(service: Optional[str] = None):
    import uvicorn

    service = service or config.SERVICE_NAME
    logger.info("Starting %s on port %s", service, config.SERVICE_PORTS[service])
    uvicorn.run(create_app(service), host="0.0.0.0", port=config.SERVICE_PORTS[service])

def run_product_service():
    run("product-service")

def run_user_service():
    run("user-service")


if __name__ == "__main__":
    run()
