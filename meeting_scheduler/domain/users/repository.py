"""User repository - Database operations for users"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import User


class UserRepository:
    """Repository for user database operations"""

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get a user by case-normalized email"""
        return db.query(User).filter(User.email == email.strip().lower()).first()

    @staticmethod
    def create_user(db: Session, **user_data) -> User:
        """Create a new user"""
        user = User(**user_data)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def save_password(db: Session, user: User, password: str, password_format: str) -> User:
        """Replace the stored password and its format marker"""
        user.password = password
        user.password_format = password_format
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def count_users(db: Session) -> int:
        return db.query(User).count()

    @staticmethod
    def delete_all_users(db: Session) -> int:
        deleted = db.query(User).delete(synchronize_session=False)
        db.commit()
        return deleted
