from sqlmodel import SQLModel, create_engine, Session
from aura_store.config import settings

connect_args = {"check_same_thread": False} if settings.is_sqlite else {}

engine = create_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,      # checks dead connections
    connect_args=connect_args,
)


def create_db_and_tables():
  import aura_store.models  # noqa: F401  registers every table
  SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
