"""
User account with profile fields and the currently issued refresh token.
"""

from sqlalchemy import Column, Integer, String, Boolean, Date, JSON, CheckConstraint

from app.db.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    phone = Column(String(30), nullable=False)
    date_of_birth = Column(Date, nullable=False)
    gender = Column(String(10), nullable=False)
    # {street, city, state, country, zip_code}
    address = Column(JSON, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    # Only the most recently issued refresh token is accepted
    refresh_token = Column(String(512), nullable=True)

    __table_args__ = (
        CheckConstraint("gender IN ('male', 'female', 'other')", name="check_user_gender"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
