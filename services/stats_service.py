from datetime import datetime, date
from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc, case, cast, literal_column, Numeric
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from models.quiz import QuizSession, STATUS_COMPLETED
from models.stats import PerformanceRecord, StudyStat
from core.logger import logger

WEAK_STRONG_LIMIT = 10
WEAK_STRONG_MIN_ATTEMPTS = 3
RECENT_TREND_LIMIT = 10


def _accuracy(correct: int, attempted: int) -> float:
    if attempted <= 0:
        return 0.0
    return round(correct / attempted * 100, 2)


def _num(value, kind=int):
    return kind(value) if value is not None else kind(0)


class StatsService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def record_quiz_completion(self, session: QuizSession):
        """Fold a freshly completed session into performance and daily stats. Caller commits."""
        await self.upsert_performance(
            user_id=session.user_id,
            subject_name=session.subject_name,
            topic=session.topic,
            difficulty=session.difficulty,
            attempted=session.answered,
            correct=session.correct,
            score=session.score_percentage,
            time_spent=session.time_taken_seconds,
        )
        await self.add_study_activity(session.user_id, session.subject_name, session.answered)

    def _insert(self, model):
        # INSERT .. ON CONFLICT lives on the dialect insert construct
        if self.db.bind.dialect.name == "sqlite":
            return sqlite_insert(model)
        return pg_insert(model)

    async def upsert_performance(
        self,
        user_id: int,
        subject_name: str,
        topic: str,
        difficulty: str,
        attempted: int,
        correct: int,
        score: float,
        time_spent: int,
    ):
        """
        Fold one attempt into the (user, subject, topic, difficulty) record in
        a single INSERT .. ON CONFLICT statement, so concurrent completions of
        the same key accumulate instead of racing on the insert.
        """
        table = PerformanceRecord.__table__
        stmt = self._insert(PerformanceRecord).values(
            user_id=user_id,
            subject_name=subject_name,
            topic=topic,
            difficulty=difficulty,
            total_attempted=attempted,
            total_correct=correct,
            accuracy=_accuracy(correct, attempted),
            best_score=score,
            total_time_seconds=time_spent,
            last_attempted_at=datetime.utcnow(),
        )
        excluded = stmt.excluded

        total_attempted = table.c.total_attempted + excluded.total_attempted
        total_correct = table.c.total_correct + excluded.total_correct
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "subject_name", "topic", "difficulty"],
            set_={
                "total_attempted": total_attempted,
                "total_correct": total_correct,
                "accuracy": case(
                    (total_attempted > 0,
                     func.round(cast(total_correct * literal_column("100.0") / total_attempted, Numeric), 2)),
                    else_=literal_column("0.0"),
                ),
                "best_score": case(
                    (excluded.best_score > table.c.best_score, excluded.best_score),
                    else_=table.c.best_score,
                ),
                "total_time_seconds": table.c.total_time_seconds + excluded.total_time_seconds,
                "last_attempted_at": excluded.last_attempted_at,
                "updated_at": func.now(),
            },
        )
        await self.db.execute(stmt)
        logger.info("Performance record updated", user_id=user_id, subject=subject_name,
                    topic=topic, difficulty=difficulty)

    async def add_study_activity(self, user_id: int, subject_name: str, amount: int = 1,
                                 day: Optional[date] = None):
        day = day or datetime.utcnow().date()
        table = StudyStat.__table__
        stmt = self._insert(StudyStat).values(
            user_id=user_id,
            subject_name=subject_name,
            session_date=day,
            questions_asked=amount,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "subject_name", "session_date"],
            set_={
                "questions_asked": table.c.questions_asked + stmt.excluded.questions_asked,
                "updated_at": func.now(),
            },
        )
        await self.db.execute(stmt)

    async def get_subject_summaries(self, user_id: int) -> Dict[str, dict]:
        """Per-subject accuracy summary keyed by subject name."""
        result = await self.db.execute(
            select(
                PerformanceRecord.subject_name,
                func.count(PerformanceRecord.id).label("quizzes_taken"),
                func.avg(PerformanceRecord.accuracy).label("avg_accuracy"),
                func.sum(PerformanceRecord.total_attempted).label("total_questions"),
            )
            .filter(PerformanceRecord.user_id == user_id)
            .group_by(PerformanceRecord.subject_name)
        )
        return {
            row.subject_name: {
                "quizzesTaken": row.quizzes_taken,
                "avgAccuracy": round(_num(row.avg_accuracy, float), 1),
                "totalQuestions": _num(row.total_questions),
            }
            for row in result.all()
        }

    async def get_performance(self, user_id: int) -> dict:
        completed = (QuizSession.user_id == user_id, QuizSession.status == STATUS_COMPLETED)

        # 1. Overall totals
        overall_row = (await self.db.execute(
            select(
                func.count(QuizSession.id).label("total_quizzes"),
                func.sum(QuizSession.total_questions).label("total_questions"),
                func.sum(QuizSession.correct).label("total_correct"),
                func.avg(QuizSession.score_percentage).label("avg_score"),
                func.max(QuizSession.score_percentage).label("best_score"),
                func.sum(QuizSession.time_taken_seconds).label("total_time"),
            ).filter(*completed)
        )).one()
        overall = {
            "total_quizzes": overall_row.total_quizzes,
            "total_questions": _num(overall_row.total_questions),
            "total_correct": _num(overall_row.total_correct),
            "avg_score": round(_num(overall_row.avg_score, float), 2),
            "best_score": _num(overall_row.best_score, float),
            "total_time": _num(overall_row.total_time),
        }

        # 2. Per subject
        subject_rows = (await self.db.execute(
            select(
                QuizSession.subject_name,
                func.count(QuizSession.id).label("quizzes"),
                func.avg(QuizSession.score_percentage).label("avg_score"),
                func.max(QuizSession.score_percentage).label("best_score"),
                func.sum(QuizSession.correct).label("total_correct"),
                func.sum(QuizSession.total_questions).label("total_questions"),
            )
            .filter(*completed)
            .group_by(QuizSession.subject_name)
            .order_by(desc("avg_score"))
        )).all()

        # 3. Per difficulty
        difficulty_rows = (await self.db.execute(
            select(
                QuizSession.difficulty,
                func.count(QuizSession.id).label("quizzes"),
                func.avg(QuizSession.score_percentage).label("avg_score"),
                func.sum(QuizSession.correct).label("total_correct"),
                func.sum(QuizSession.total_questions).label("total_questions"),
            )
            .filter(*completed)
            .group_by(QuizSession.difficulty)
        )).all()

        # 4. Weak and strong topics, ignoring records with too few attempts
        topic_query = (
            select(PerformanceRecord)
            .filter(PerformanceRecord.user_id == user_id,
                    PerformanceRecord.total_attempted >= WEAK_STRONG_MIN_ATTEMPTS)
        )
        weak = (await self.db.execute(
            topic_query.order_by(PerformanceRecord.accuracy.asc(), PerformanceRecord.id.asc()).limit(WEAK_STRONG_LIMIT)
        )).scalars().all()
        strong = (await self.db.execute(
            topic_query.order_by(PerformanceRecord.accuracy.desc(), PerformanceRecord.id.asc()).limit(WEAK_STRONG_LIMIT)
        )).scalars().all()

        # 5. Most recent completions, returned oldest first
        trend_rows = (await self.db.execute(
            select(
                QuizSession.id,
                QuizSession.score_percentage,
                QuizSession.subject_name,
                QuizSession.difficulty,
                QuizSession.completed_at,
            )
            .filter(*completed)
            .order_by(QuizSession.completed_at.desc(), QuizSession.id.desc())
            .limit(RECENT_TREND_LIMIT)
        )).all()

        return {
            "overall": overall,
            "subjectPerformance": [{
                "subject_name": row.subject_name,
                "quizzes": row.quizzes,
                "avg_score": round(_num(row.avg_score, float), 2),
                "best_score": _num(row.best_score, float),
                "total_correct": _num(row.total_correct),
                "total_questions": _num(row.total_questions),
            } for row in subject_rows],
            "difficultyPerformance": [{
                "difficulty": row.difficulty,
                "quizzes": row.quizzes,
                "avg_score": round(_num(row.avg_score, float), 2),
                "total_correct": _num(row.total_correct),
                "total_questions": _num(row.total_questions),
            } for row in difficulty_rows],
            "weakTopics": [self._topic_row(r) for r in weak],
            "strongTopics": [self._topic_row(r) for r in strong],
            "recentTrend": [{
                "session_id": row.id,
                "score_percentage": row.score_percentage,
                "subject_name": row.subject_name,
                "difficulty": row.difficulty,
                "completed_at": row.completed_at,
            } for row in reversed(trend_rows)],
        }

    @staticmethod
    def _topic_row(record: PerformanceRecord) -> dict:
        return {
            "subject_name": record.subject_name,
            "topic": record.topic,
            "difficulty": record.difficulty,
            "accuracy": record.accuracy,
            "total_attempted": record.total_attempted,
        }
