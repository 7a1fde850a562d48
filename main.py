from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from contextlib import asynccontextmanager
from dotenv import load_dotenv
import uvicorn
import os
import uuid
import logging

# Load environment variables before importing services so they see dataset paths
load_dotenv()


from routers import ingredients_router
from services.ingredient_lookup import DataUnavailable, get_ingredient_service
from services.timing_logger import TimingLogger

logger = logging.getLogger(__name__)


# === Request Timing Logger Middleware ===
class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Times each request and tags the response with its id and duration"""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id

        with TimingLogger(f"{request.method} {request.url.path}", request_id) as timer:
            if request.query_params:
                print(f"   🔍 [{request_id}] Query: {dict(request.query_params)}")
            response = await call_next(request)

        if response.status_code >= 400:
            logger.warning(f"[{request_id}] {request.method} {request.url.path} → {response.status_code}")

        response.headers["X-Request-Duration-Ms"] = f"{timer.duration_ms:.2f}"
        response.headers["X-Request-Id"] = request_id

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for startup and shutdown events"""
    # Startup: warm the ingredient index so the first analysis doesn't pay for the load
    print("🧪 Pre-loading ingredient dataset at startup...")
    try:
        await get_ingredient_service().load_index()
        print("✅ Ingredient dataset ready!")
    except DataUnavailable as e:
        logger.warning(f"Ingredient dataset failed to load: {e}")
        print("   Ingredient lookups will report 'not available' until the dataset is present")

    yield


# Create FastAPI app
app = FastAPI(
    title="Skincare Ingredient Service",
    description="Reference data for ingredients found on scanned skincare labels",
    version="1.0.0",
    lifespan=lifespan
)

# Timing middleware first so it captures total time including other middleware
app.add_middleware(RequestTimingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify your frontend domain
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)

app.include_router(ingredients_router, tags=["ingredients"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Skincare Ingredient Service",
        "version": "1.0.0",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "skincare-ingredients",
        "ingredients": get_ingredient_service().stats()
    }


if __name__ == "__main__":
    port = int(os.getenv("PORT", 8001))

    print(f"""
    ╔═══════════════════════════════════════════════════╗
    ║     Skincare Ingredient Service Starting...       ║
    ╠═══════════════════════════════════════════════════╣
    ║  • Loading ingredient dataset                     ║
    ║  • Starting server on port {port}                 ║
    ╚═══════════════════════════════════════════════════╝
    """)

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        reload=True,
        log_level="info"
    )
