from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from blocklog.core.config import settings
from blocklog.core.errors import ConflictError

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.SQL_ECHO,
    pool_pre_ping=True,
    connect_args=connect_args,
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit(db: Session, conflict_message: str | None = None) -> None:
    """Commit the session, rolling back when the write fails.

    With ``conflict_message`` set, a unique-constraint violation is reported
    as :class:`ConflictError`. A duplicate can still reach the constraint when
    a concurrent request inserts it after the service's own existence check.
    """
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if conflict_message is None:
            raise
        raise ConflictError(conflict_message) from exc
    except SQLAlchemyError:
        db.rollback()
        raise
