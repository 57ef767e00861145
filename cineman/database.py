from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from cineman.config import settings

connect_args = {"check_same_thread": False} if settings.is_sqlite else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """Yield a database session for the duration of a request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db():
    """Create all tables that do not exist yet"""
    # Models must be imported so they register with Base.metadata
    from cineman import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
