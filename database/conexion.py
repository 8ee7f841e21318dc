from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Declarative base
Base = declarative_base()


class Database:
    """
    Handle del almacenamiento local con ciclo de vida explícito.
    Se abre al iniciar el proceso y se cierra al apagarlo; nadie importa
    una conexión global, se inyecta donde hace falta.
    """

    def __init__(self, url: str, seed_rates: bool = True):
        self.url = url
        self.seed_rates = seed_rates
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    def open(self) -> "Database":
        if self.is_open:
            return self

        kwargs = {"pool_pre_ping": True}
        if self.url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            # In-memory databases live inside a single connection
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool

        self.engine = create_engine(self.url, **kwargs)
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        import models  # registra las tablas en Base.metadata
        Base.metadata.create_all(bind=self.engine)

        if self.seed_rates:
            from services.rate_store import seed_default_rates
            with self.session() as db:
                seed_default_rates(db)
        return self

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self._session_factory = None

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("Database is not open")
        return self._session_factory()


# Función para obtener la sesión
def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
