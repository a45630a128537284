# src/database.py
import logging
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from config import settings
from errors import DuplicateEntry, StorageError, ValidationError

logger = logging.getLogger(__name__)


def build_engine(url: str):
    """Create an engine; in-memory SQLite shares one connection across threads."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Yield a database session for the duration of one request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    """Create missing tables and seed the default administrator."""
    # Register every model on Base.metadata before create_all.
    import auth.models  # noqa: F401
    import admin.models  # noqa: F401
    import catalog.models  # noqa: F401
    import resellers.models  # noqa: F401
    import subscription.models  # noqa: F401
    from auth.services import AuthService

    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=bind)
    db = session_factory()
    try:
        AuthService(db).seed_default_admin()
    finally:
        db.close()
    logger.info("Database initialized successfully")


def is_unique_violation(error: IntegrityError) -> bool:
    """True for unique constraint failures on PostgreSQL (SQLSTATE 23505) and SQLite."""
    orig = getattr(error, "orig", None)
    if getattr(orig, "pgcode", None) == "23505":
        return True
    return "unique" in str(orig).lower()


def apply_changes(obj, changes: dict, required: tuple) -> None:
    """Copy a partial update onto `obj`; explicit nulls on required columns are rejected up front."""
    for field in required:
        if field in changes and changes[field] is None:
            raise ValidationError(f"{field} cannot be null")
    for field, value in changes.items():
        setattr(obj, field, value)


def commit_or_raise(db, action: str) -> None:
    """Commit, mapping uniqueness violations to DuplicateEntry, other constraint
    violations to ValidationError and anything else to StorageError."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            raise DuplicateEntry()
        logger.info(f"Constraint violation while trying to {action}: {e.orig}")
        raise ValidationError("Invalid or missing field value")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to {action}: {e}", exc_info=True)
        raise StorageError(f"Failed to {action}")
