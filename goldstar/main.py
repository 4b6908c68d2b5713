import os
from typing import Optional
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from goldstar.core.config import Settings, get_settings
from goldstar.core.errors import register_exception_handlers
from goldstar.core.logger import install_request_logging, setup_logging
from goldstar.db.session import make_engine, create_db_and_tables
from goldstar.services.email import Mailer
from goldstar.services.images import ImagePipeline

# Import models to ensure they are registered with SQLModel metadata
from goldstar.models.blog import BlogPost

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger = setup_logging(settings.LOG_LEVEL)

    os.makedirs(settings.BLOG_UPLOAD_DIR, exist_ok=True)

    app.state.engine = make_engine(settings.DATABASE_URL)
    create_db_and_tables(app.state.engine)
    logger.info("Connected to database")

    app.state.mailer = Mailer(settings)
    if settings.SMTP_VERIFY_ON_STARTUP:
        await run_in_threadpool(app.state.mailer.verify)

    yield

    app.state.engine.dispose()

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        lifespan=lifespan,
        description="Booking notifications and blog API for the Gold Star Bond Cleaning website"
    )
    app.state.settings = settings
    app.state.images = ImagePipeline(settings.IMAGE_MAX_WIDTH, settings.IMAGE_QUALITY)

    from goldstar.routers import blogs, booking, health

    app.include_router(health.router, tags=["health"])
    app.include_router(booking.router, prefix="/api", tags=["booking"])
    app.include_router(blogs.router, prefix="/api/blogs", tags=["blogs"])

    # Uploaded files, read-only. The directory is created on startup.
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")

    register_exception_handlers(app)
    install_request_logging(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.PORT)
