import functools

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from app.core.config import settings


class Base(DeclarativeBase):
    pass


connect_args = {"check_same_thread": False} if settings.is_sqlite else {}

engine = create_engine(
    settings.database_url,
    echo=settings.database_echo,
    connect_args=connect_args,
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def transactional(func):
    """
    Ejecuta la operación en una única transacción: commit al terminar,
    rollback si algo falla. Las llamadas anidadas se unen a la transacción
    de fuera, así un reset de sesión completa es todo o nada.
    """

    @functools.wraps(func)
    def wrapper(db: Session, *args, **kwargs):
        if db.info.get("transaction_scope"):
            return func(db, *args, **kwargs)

        db.info["transaction_scope"] = True
        try:
            result = func(db, *args, **kwargs)
            db.commit()
            return result
        except Exception:
            db.rollback()
            raise
        finally:
            db.info.pop("transaction_scope", None)

    return wrapper
