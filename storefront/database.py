from sqlmodel import SQLModel, create_engine, Session
from storefront.config import settings


def build_engine(url: str):
    if url.startswith("sqlite"):
        # local runs and tests; one file or memory db shared across threads
        return create_engine(url, connect_args={"check_same_thread": False})

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=1800,
    )


engine = build_engine(settings.database_url)


def create_db_and_tables():
    from storefront import models  # noqa: F401
    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
