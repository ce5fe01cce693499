# ============================================================================
# shared/database.py - SQLAlchemy engine and session handling
# ============================================================================

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Iterator
import logging

from config import DATABASE_URL, DATABASE_ECHO

logger = logging.getLogger(__name__)

# Create engine based on database type
if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        DATABASE_URL,
        echo=DATABASE_ECHO,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
elif DATABASE_URL.startswith("mysql"):
    engine = create_engine(
        DATABASE_URL,
        echo=DATABASE_ECHO,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=5,
        max_overflow=0
    )
else:
    engine = create_engine(DATABASE_URL, echo=DATABASE_ECHO)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create base class
Base = declarative_base()

# Dependency to get database session
def get_db() -> Iterator[Session]:
    """Get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def import_models():
    """Import all models to ensure they are included in Base.metadata"""
    from apps.snr.models import SNRProvisioningRun  # noqa: F401

# Initialize database
def init_database() -> bool:
    """Initialize the database and create tables"""
    try:
        import_models()

        with engine.connect():
            logger.info("✅ Database connection successful")

        Base.metadata.create_all(bind=engine)
        logger.info("✅ Database tables created/verified")
        return True

    except Exception as e:
        logger.error(f"❌ Database initialization error: {str(e)}")
        return False
