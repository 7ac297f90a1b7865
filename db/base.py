# Import all models so Base.metadata is complete for Alembic and create_all
from models.base import Base  # noqa: F401
from models.user import User  # noqa: F401
from models.quiz import QuizSession, QuizQuestion  # noqa: F401
from models.stats import PerformanceRecord, StudyStat  # noqa: F401
from models.bookmark import Bookmark  # noqa: F401
from models.chat import ChatSession, ChatMessage  # noqa: F401
