from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from academy_reservations.core.config import settings

engine_kwargs: dict = {"pool_pre_ping": True}

if settings.DATABASE_URL.startswith("sqlite"):
    # SQLite needs check_same_thread=False for FastAPI's threaded model
    engine_kwargs["connect_args"] = {"check_same_thread": False}

# The engine is the entry point to the database. It's configured with the
# database URL and handles the connection pooling.
engine = create_engine(settings.DATABASE_URL, **engine_kwargs)

# SessionLocal is a factory for creating new Session objects.
# Each reservation operation runs inside one of these as a single transaction.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        # Runs after the endpoint has finished, even if there was an error.
        db.close()
