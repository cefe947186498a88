import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from collage_api.errors import register_error_handlers
from collage_api.routers import posts
from collage_api.settings import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Collage API", description="Gallery posts stored on Cloudinary")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["content-type", "authorization"],
)
register_error_handlers(app)

app.include_router(posts.router)


@app.get("/")
async def root():
    return {"message": "Collage API is running"}
