from sqlmodel import Session
from pos_promotions.db.session import engine


def get_db():
    with Session(engine) as session:
        yield session
