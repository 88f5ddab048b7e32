from contextlib import contextmanager
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy import create_engine
from storefront.core.config import settings

class Base(DeclarativeBase): pass

def make_engine(url: str):
    if url.startswith("sqlite"):
        # local runs share one connection across the request threadpool
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True)

engine = make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

@contextmanager
def session_scope():
    """Session for work outside a request, e.g. the payment events consumer."""
    db: Session = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
