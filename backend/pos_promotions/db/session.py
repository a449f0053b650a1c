from sqlmodel import create_engine
from pos_promotions.core.config import settings


connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    # SQLite + FastAPI threadpool
    connect_args = {"check_same_thread": False}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)
