from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, UniqueConstraint
from models.base import Base, TimestampMixin

class PerformanceRecord(Base, TimestampMixin):
    """Cumulative accuracy per (user, subject, topic, difficulty)."""
    __tablename__ = "mcq_performance"
    __table_args__ = (
        UniqueConstraint("user_id", "subject_name", "topic", "difficulty", name="uq_mcq_performance_key"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    subject_name = Column(String(100), nullable=False)
    topic = Column(String(255), nullable=False)
    difficulty = Column(String(10), nullable=False)

    total_attempted = Column(Integer, default=0, nullable=False)
    total_correct = Column(Integer, default=0, nullable=False)
    accuracy = Column(Float, default=0.0, nullable=False)
    best_score = Column(Float, default=0.0, nullable=False)
    total_time_seconds = Column(Integer, default=0, nullable=False)
    last_attempted_at = Column(DateTime, nullable=True)


class StudyStat(Base, TimestampMixin):
    """Daily activity counter per subject, fed by quizzes and chat."""
    __tablename__ = "study_stats"
    __table_args__ = (
        UniqueConstraint("user_id", "subject_name", "session_date", name="uq_study_stats_day"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    subject_name = Column(String(100), nullable=False)
    session_date = Column(Date, nullable=False, index=True)
    questions_asked = Column(Integer, default=0, nullable=False)
