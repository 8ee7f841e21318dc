from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, get_settings
from database.conexion import Database
from services.ota_fetch import build_feed
from utils.logging_utils import configure_logging, log_event


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_file)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(settings.database_url, seed_rates=settings.seed_default_rates).open()
        app.state.database = database
        log_event("system", "system", "Database open", settings.database_url)
        try:
            yield
        finally:
            database.close()
            log_event("system", "system", "Database closed", "")

    app = FastAPI(title=settings.hotel_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.ota_feed = build_feed(settings)

    origins = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from endpoints import auth, bookings, ota, rates, reports
    app.include_router(auth.router)
    app.include_router(rates.router)
    app.include_router(bookings.router)
    app.include_router(ota.router)
    app.include_router(reports.router)

    @app.get("/")
    def read_root():
        return {"message": f"{settings.hotel_name} front desk"}

    return app


app = create_app()
