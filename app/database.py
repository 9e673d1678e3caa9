from sqlmodel import SQLModel, Session, create_engine

from app.core.config import DATABASE_URL, SQL_ECHO

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, echo=SQL_ECHO, connect_args=connect_args)  # SQL_ECHO=true imprime las queries

def create_db_and_tables():
    import app.models  # noqa: F401  registra todas las tablas en el metadata
    SQLModel.metadata.create_all(engine)

def get_session():
    # Los objetos siguen legibles tras el commit para serializar la respuesta
    with Session(engine, expire_on_commit=False) as session:
        yield session
