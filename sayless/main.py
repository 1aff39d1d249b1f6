from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import health, sessions, tools
from .config import settings
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware

setup_logging()

app = FastAPI(
    title="Sayless API",
    description="Conversational wallet assistant: identifier confirmation and provider dispatch",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["Health"])
app.include_router(sessions.router, tags=["Sessions"])
app.include_router(tools.router, tags=["Tools"])


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "Sayless API",
        "version": "0.1.0",
        "description": "Conversational wallet assistant: identifier confirmation and provider dispatch",
        "docs": "/docs",
        "health": "/healthz",
        "tools": "/tools",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "sayless.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
