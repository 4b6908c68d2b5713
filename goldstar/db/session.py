from fastapi import Request
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

def make_engine(database_url: str) -> Engine:
    # check_same_thread is needed for SQLite, ignored by other backends
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, connect_args=connect_args)

def create_db_and_tables(engine: Engine):
    SQLModel.metadata.create_all(engine)

def get_session(request: Request):
    with Session(request.app.state.engine) as session:
        yield session
