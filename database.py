from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
import os

# --- CONFIGURATION ---
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{os.path.join(os.path.dirname(__file__), 'db', 'fitmaker_admin.db')}")

# Fix for Render/Heroku: SQLAlchemy requires postgresql://, but Render might provide postgres://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

IS_POSTGRES = DATABASE_URL.startswith("postgresql")

# --- ENGINE & SESSION ---
if IS_POSTGRES:
    # Production: PostgreSQL with connection pooling
    engine = create_engine(
        DATABASE_URL,
        pool_size=20,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800
    )
else:
    # Development: SQLite (no connection pooling)
    if DATABASE_URL.startswith("sqlite:///") and ":memory:" not in DATABASE_URL:
        os.makedirs(os.path.dirname(DATABASE_URL[len("sqlite:///"):]) or ".", exist_ok=True)
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False}
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None):
    """Create all tables. Safe to call repeatedly."""
    import models_orm  # noqa: F401  (registers tables on Base)
    Base.metadata.create_all(bind=bind or engine)
