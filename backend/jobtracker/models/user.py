from sqlalchemy import Column, Text
from sqlalchemy.orm import relationship
from jobtracker.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Text, primary_key=True)
    email = Column(Text, nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False)

    jobs = relationship("Job", back_populates="user", cascade="all, delete-orphan")
