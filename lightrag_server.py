"""
LightRAG Plugin Server
Expõe as rotas do plugin LightRAG (upload, documentos, busca) para o LibreChat
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from lightrag_plugin import __version__, get_lightrag_config, resolve_target
from lightrag_plugin import lightrag_router

# Load environment variables
load_dotenv()

# Configurar logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("lightrag-server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle handler"""
    target = resolve_target(None, get_lightrag_config())
    logger.info(f"Starting LightRAG Plugin Server (default target: {target.base_url})...")
    yield
    logger.info("Shutting down LightRAG Plugin Server...")


def create_app() -> FastAPI:
    """Cria a aplicação FastAPI com as rotas do plugin"""
    app = FastAPI(
        title="LightRAG Plugin API",
        description="Proxy entre LibreChat e LightRAG",
        version=__version__,
        lifespan=lifespan
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(lightrag_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "ok",
            "service": "lightrag-plugin",
            "version": __version__
        }

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": "LightRAG Plugin API",
            "docs": "/docs",
            "health": "/api/lightrag/health"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8001"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting server on {host}:{port}")
    uvicorn.run(
        "lightrag_server:app",
        host=host,
        port=port,
        reload=False,
        log_level="info"
    )
