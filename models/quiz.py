from sqlalchemy import Column, Integer, String, Text, Boolean, Float, DateTime, ForeignKey, UniqueConstraint
from models.base import Base, TimestampMixin

DIFFICULTIES = ("easy", "medium", "hard")
OPTION_LETTERS = ("A", "B", "C", "D")

STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"

# Upper bound for the time recorded against a single answer
MAX_TIME_SPENT_SECONDS = 24 * 60 * 60


class QuizSession(Base, TimestampMixin):
    __tablename__ = "mcq_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    subject_name = Column(String(100), nullable=False)
    topic = Column(String(255), nullable=False)
    difficulty = Column(String(10), nullable=False)

    total_questions = Column(Integer, default=0, nullable=False)
    answered = Column(Integer, default=0, nullable=False)
    correct = Column(Integer, default=0, nullable=False)
    wrong = Column(Integer, default=0, nullable=False)
    skipped = Column(Integer, default=0, nullable=False)
    time_taken_seconds = Column(Integer, default=0, nullable=False)

    status = Column(String(20), default=STATUS_IN_PROGRESS, nullable=False, index=True)
    score_percentage = Column(Float, default=0.0, nullable=False)
    completed_at = Column(DateTime, nullable=True)


class QuizQuestion(Base, TimestampMixin):
    __tablename__ = "mcq_questions"
    __table_args__ = (
        UniqueConstraint("session_id", "question_number", name="uq_mcq_question_number"),
    )

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("mcq_sessions.id", ondelete="CASCADE"), index=True, nullable=False)
    question_number = Column(Integer, nullable=False)

    question_text = Column(Text, nullable=False)
    option_a = Column(Text, nullable=False)
    option_b = Column(Text, nullable=False)
    option_c = Column(Text, nullable=False)
    option_d = Column(Text, nullable=False)
    correct_answer = Column(String(1), nullable=False)
    explanation = Column(Text, default="", nullable=False)
    difficulty = Column(String(10), nullable=False)

    # Filled in on submission
    user_answer = Column(String(1), nullable=True)
    is_correct = Column(Boolean, nullable=True)
    time_spent_seconds = Column(Integer, default=0, nullable=False)
    answered_at = Column(DateTime, nullable=True)

    is_bookmarked = Column(Boolean, default=False, nullable=False)

    @property
    def options(self) -> dict:
        return {"A": self.option_a, "B": self.option_b, "C": self.option_c, "D": self.option_d}
