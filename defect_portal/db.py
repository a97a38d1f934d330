import os
from dataclasses import dataclass

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from defect_portal.models import Base


@dataclass
class DBConfig:
    url: str
    echo: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_in_memory(self) -> bool:
        return self.is_sqlite and ":memory:" in self.url


def load_db_config() -> DBConfig:
    url = os.environ.get("DATABASE_URL", "sqlite:///./defect_portal.sqlite")
    echo = os.environ.get("DATABASE_ECHO", "").strip().lower() in {"1", "true", "yes"}
    return DBConfig(url=url, echo=echo)


def build_engine(config: DBConfig):
    kwargs = {"echo": config.echo}
    if config.is_sqlite:
        # handlers run in the threadpool, so connections cross threads
        kwargs["connect_args"] = {"check_same_thread": False}
    if config.is_in_memory:
        # one shared connection, otherwise every checkout sees an empty database
        kwargs["poolclass"] = StaticPool
    return create_engine(config.url, **kwargs)


def build_session_factory(engine) -> sessionmaker[Session]:
    """Sessions for the record store. Seeding and the store flush explicitly."""
    return sessionmaker(bind=engine, autoflush=False)


def init_db(engine) -> None:
    """Create the record-store tables if they do not exist yet."""
    Base.metadata.create_all(bind=engine)
