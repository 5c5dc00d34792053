from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker


DEFAULT_DATABASE_URL = "sqlite:///data/quests.db"


def build_engine(database_url: str = DEFAULT_DATABASE_URL) -> Engine:
    return create_engine(database_url, echo=False, future=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, future=True)
