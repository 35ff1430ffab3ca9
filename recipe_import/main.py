# Recipe Import API Main Entry Point
import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .settings import settings
from .routers.ready import router as ready_router
from .routers.imports import router as imports_router
from .routers.ingredients import router as ingredients_router

# Configure structured logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("recipe_import")

app = FastAPI(title="Recipe Import API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ready_router, prefix="/api", tags=["ready"])
app.include_router(imports_router, prefix="/api/imports", tags=["imports"])
app.include_router(ingredients_router, prefix="/api/ingredients", tags=["ingredients"])
