from sqlalchemy import Column, Integer, String, Text, ForeignKey
from models.base import Base, TimestampMixin

class Bookmark(Base, TimestampMixin):
    """Denormalized copy of a saved question; outlives its quiz session."""
    __tablename__ = "mcq_bookmarks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    question_text = Column(Text, nullable=False)
    option_a = Column(Text, nullable=False)
    option_b = Column(Text, nullable=False)
    option_c = Column(Text, nullable=False)
    option_d = Column(Text, nullable=False)
    correct_answer = Column(String(1), nullable=False)
    explanation = Column(Text, default="", nullable=False)
    subject_name = Column(String(100), nullable=False, index=True)
    topic = Column(String(255), nullable=False)
    difficulty = Column(String(10), nullable=False)
