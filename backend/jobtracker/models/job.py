from sqlalchemy import Boolean, Column, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from jobtracker.database import Base


class Job(Base):
    __tablename__ = "jobs"
    __table_args__ = (UniqueConstraint("user_id", "title", "company"),)

    id = Column(Text, primary_key=True)
    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    company = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="Wishlist")
    portal = Column(Text)
    status_link = Column(Text)
    applied_on = Column(Text)
    deadline = Column(Text)
    notes = Column(Text)
    had_interview = Column(Boolean, nullable=False, default=False)
    had_offer = Column(Boolean, nullable=False, default=False)
    created_at = Column(Text, nullable=False)

    user = relationship("User", back_populates="jobs")
