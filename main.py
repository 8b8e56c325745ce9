import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

import database
from config import Config, config
from errors import register_error_handlers
from routes import auth, cart, farmers, orders, products, users

log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    database.ensure_indexes(app.state.db)
    log.info("Farm marketplace API ready")
    yield


def create_app(config_class=Config, db=None) -> FastAPI:
    logging.basicConfig(
        level=config_class.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Farm Marketplace API", lifespan=lifespan)
    app.state.config = config_class
    app.state.db = db if db is not None else database.connect(config_class)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    for module in (auth, users, farmers, products, cart, orders):
        app.include_router(module.router)

    os.makedirs(config_class.UPLOAD_DIR, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=config_class.UPLOAD_DIR), name="uploads")

    @app.get("/")
    def root():
        return {"message": "Farm Marketplace API is running"}

    @app.get("/health")
    def health():
        return {"ok": True}

    return app


if __name__ == "__main__":
    import uvicorn

    # Also servable as: uvicorn main:create_app --factory
    app = create_app(config[os.getenv("APP_ENV", "default")])
    uvicorn.run(app, host="0.0.0.0", port=app.state.config.PORT)
