import os

from app.db.session import SessionLocal, engine, Base
from app.db.models import _all
from app.db.models.user import User
from app.core.logging import get_logger, setup_logging
from app.core.security import hash_password

logger = get_logger("scripts.create_admin")


def create_admin_user(email: str, username: str, password: str) -> User | None:
    db = SessionLocal()

    try:
        # Comprobar si ya existe
        existing_user = (
            db.query(User)
            .filter(
                (User.email == email) | (User.username == username)
            )
            .first()
        )

        if existing_user:
            logger.warning(
                "User already exists: %s (%s), role %s",
                existing_user.username, existing_user.email, existing_user.role,
            )
            return None

        admin_user = User(
            email=email,
            username=username,
            hashed_password=hash_password(password),
            role="admin"
        )

        db.add(admin_user)
        db.commit()

        logger.info("Admin user %s created, change the password as soon as possible", username)
        return admin_user

    except Exception:
        db.rollback()
        logger.exception("Could not create the admin user")
        raise

    finally:
        db.close()


if __name__ == "__main__":
    setup_logging()
    Base.metadata.create_all(bind=engine)
    create_admin_user(
        os.environ.get("ADMIN_EMAIL", "admin@example.com"),
        os.environ.get("ADMIN_USERNAME", "admin"),
        os.environ.get("ADMIN_PASSWORD", "admin123"),
    )
