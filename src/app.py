"""Storefront Ordering FastAPI application.

Web server that processes commands synchronously via HTTP. Each request is
wrapped in the ordering domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay that is applied.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from ordering.domain import ordering
from ordering.utils.logging import bind_request_context, clear_request_context, configure_logging

configure_logging()
ordering.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront Ordering API",
    description="Catalogue stock, carts and orders",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the ordering domain context and bind request details to log lines."""
    bind_request_context(
        method=request.method,
        path=request.url.path,
        user_id=request.headers.get("x-user-id"),
    )
    try:
        with ordering.domain_context():
            response = await call_next(request)
        return response
    finally:
        clear_request_context()


# ---------------------------------------------------------------------------
# Routers and error handlers
# ---------------------------------------------------------------------------
from ordering.api.errors import register_error_handlers  # noqa: E402
from ordering.api.routes import cart_router, order_router, product_router  # noqa: E402

app.include_router(product_router)
app.include_router(cart_router)
app.include_router(order_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "ordering": {"name": ordering.name},
            },
        }
    )
