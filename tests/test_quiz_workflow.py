"""
Quiz lifecycle against a real database: generation, answering,
completion, performance records and bookmarks.
"""
import asyncio
import pytest
from sqlalchemy import select, delete, func
from conftest import correct_letter, wrong_letter, make_questions
from core.exceptions import (
    AIQuotaError,
    AIServiceError,
    AnswerAlreadySubmittedError,
    NotFoundError,
    QuizAlreadyCompletedError,
    QuizGenerationError,
    ValidationError,
)
from models.bookmark import Bookmark
from models.quiz import QuizQuestion, QuizSession
from models.stats import PerformanceRecord, StudyStat
from services.bookmark_service import BookmarkService
from services.quiz_service import QuizService
from services.session_service import SessionService
from utils.parser import Malformed, Parsed


@pytest.fixture
def quiz_service(db, fake_ai, settings):
    return QuizService(db, fake_ai, settings)


@pytest.fixture
def session_service(db):
    return SessionService(db)


async def _count(db, model, *criteria):
    return (await db.execute(select(func.count()).select_from(model).filter(*criteria))).scalar_one()


async def _generate(quiz_service, user, count=5, topic="Joins", difficulty="easy"):
    return await quiz_service.generate_quiz(user.id, "DBMS", topic, difficulty, count)


async def _answer(session_service, user, session_id, plan):
    """plan maps question number to True (answer correctly) or False (answer wrong)."""
    for number, right in plan.items():
        letter = correct_letter(number) if right else wrong_letter(number)
        await session_service.submit_answer(user.id, session_id, number, letter, 10)


# --- generation ---

async def test_generate_persists_questions_without_answers(db, quiz_service, user):
    data = await _generate(quiz_service, user, count=5)

    assert data["totalQuestions"] == 5
    assert [q["id"] for q in data["questions"]] == [1, 2, 3, 4, 5]
    for q in data["questions"]:
        assert set(q) == {"id", "question", "options"}
        assert set(q["options"]) == {"A", "B", "C", "D"}

    session = await db.get(QuizSession, data["sessionId"])
    assert session.status == "in_progress"
    assert session.total_questions == 5
    assert session.answered == session.correct == session.wrong == 0
    numbers = (await db.execute(
        select(QuizQuestion.question_number)
        .filter(QuizQuestion.session_id == session.id)
        .order_by(QuizQuestion.question_number)
    )).scalars().all()
    assert list(numbers) == list(range(1, 6))


@pytest.mark.parametrize("requested, expected", [(50, 30), (-5, 1), (0, 1), ("7", 7)])
async def test_question_count_is_clamped(quiz_service, fake_ai, user, requested, expected):
    await quiz_service.generate_quiz(user.id, "DBMS", "Joins", "medium", requested)
    assert fake_ai.generate_calls[-1]["count"] == expected


async def test_fewer_questions_than_requested(db, quiz_service, fake_ai, user):
    fake_ai.outcome = Parsed(questions=make_questions(3))

    data = await _generate(quiz_service, user, count=5)

    assert data["totalQuestions"] == 3
    session = await db.get(QuizSession, data["sessionId"])
    assert session.total_questions == 3


@pytest.mark.parametrize("subject, topic, difficulty, count", [
    ("", "Joins", "easy", 5),
    ("DBMS", "", "easy", 5),
    ("DBMS", "Joins", None, 5),
    ("DBMS", "Joins", "easy", None),
])
async def test_generate_requires_all_fields(db, quiz_service, fake_ai, user, subject, topic, difficulty, count):
    with pytest.raises(ValidationError):
        await quiz_service.generate_quiz(user.id, subject, topic, difficulty, count)
    assert fake_ai.generate_calls == []
    assert await _count(db, QuizSession) == 0


async def test_generate_rejects_unknown_difficulty(quiz_service, user):
    with pytest.raises(ValidationError) as exc:
        await quiz_service.generate_quiz(user.id, "DBMS", "Joins", "expert", 5)
    assert exc.value.message == "Difficulty must be easy, medium, or hard"


async def test_malformed_output_discards_session(db, quiz_service, fake_ai, user):
    fake_ai.outcome = Malformed("response is not valid JSON")

    with pytest.raises(QuizGenerationError):
        await _generate(quiz_service, user)

    assert await _count(db, QuizSession) == 0
    assert await _count(db, QuizQuestion) == 0


@pytest.mark.parametrize("error", [AIQuotaError(), AIServiceError()])
async def test_ai_failure_discards_session(db, quiz_service, fake_ai, user, error):
    fake_ai.error = error

    with pytest.raises(type(error)):
        await _generate(quiz_service, user)

    assert await _count(db, QuizSession) == 0


# --- answering ---

async def test_submit_answer_is_case_insensitive(db, quiz_service, session_service, user):
    data = await _generate(quiz_service, user)
    sid = data["sessionId"]

    result = await session_service.submit_answer(user.id, sid, 1, correct_letter(1).lower(), 12)

    assert result == {
        "isCorrect": True,
        "correctAnswer": correct_letter(1),
        "explanation": "Explanation 1",
        "yourAnswer": correct_letter(1),
    }
    session = await db.get(QuizSession, sid)
    assert (session.answered, session.correct, session.wrong, session.time_taken_seconds) == (1, 1, 0, 12)


async def test_wrong_answer_reveals_correct_letter(db, quiz_service, session_service, user):
    data = await _generate(quiz_service, user)

    result = await session_service.submit_answer(user.id, data["sessionId"], 2, wrong_letter(2))

    assert result["isCorrect"] is False
    assert result["correctAnswer"] == correct_letter(2)
    session = await db.get(QuizSession, data["sessionId"])
    assert (session.answered, session.correct, session.wrong) == (1, 0, 1)


async def test_resubmission_is_rejected_and_counters_unchanged(db, quiz_service, session_service, user):
    data = await _generate(quiz_service, user)
    sid = data["sessionId"]
    await session_service.submit_answer(user.id, sid, 1, wrong_letter(1), 5)

    with pytest.raises(AnswerAlreadySubmittedError):
        await session_service.submit_answer(user.id, sid, 1, correct_letter(1), 5)

    session = await db.get(QuizSession, sid)
    assert (session.answered, session.correct, session.wrong, session.time_taken_seconds) == (1, 0, 1, 5)
    question = (await db.execute(
        select(QuizQuestion).filter(QuizQuestion.session_id == sid, QuizQuestion.question_number == 1)
    )).scalar_one()
    assert question.user_answer == wrong_letter(1)


@pytest.mark.parametrize("time_spent", [float("inf"), float("nan"), 1e20, 24 * 60 * 60 + 1])
async def test_unbounded_time_spent_is_rejected(db, quiz_service, session_service, user, time_spent):
    data = await _generate(quiz_service, user)

    with pytest.raises(ValidationError):
        await session_service.submit_answer(user.id, data["sessionId"], 1, "A", time_spent)

    session = await db.get(QuizSession, data["sessionId"])
    assert (session.answered, session.time_taken_seconds) == (0, 0)


async def test_negative_time_spent_counts_as_zero(db, quiz_service, session_service, user):
    data = await _generate(quiz_service, user)
    await session_service.submit_answer(user.id, data["sessionId"], 1, "A", -30)
    session = await db.get(QuizSession, data["sessionId"])
    assert session.time_taken_seconds == 0


@pytest.mark.parametrize("answer", ["E", "AB", "1"])
async def test_invalid_letter_rejected(quiz_service, session_service, user, answer):
    data = await _generate(quiz_service, user)
    with pytest.raises(ValidationError):
        await session_service.submit_answer(user.id, data["sessionId"], 1, answer)


async def test_submit_requires_fields(session_service, user):
    with pytest.raises(ValidationError):
        await session_service.submit_answer(user.id, None, 1, "A")
    with pytest.raises(ValidationError):
        await session_service.submit_answer(user.id, 1, 1, "")


async def test_submit_unknown_session_or_question(quiz_service, session_service, user):
    data = await _generate(quiz_service, user, count=3)

    with pytest.raises(NotFoundError):
        await session_service.submit_answer(user.id, 9999, 1, "A")
    with pytest.raises(NotFoundError) as exc:
        await session_service.submit_answer(user.id, data["sessionId"], 4, "A")
    assert exc.value.message == "Question not found"


async def test_submit_to_foreign_session_is_not_found(quiz_service, session_service, user, other_user):
    data = await _generate(quiz_service, user)
    with pytest.raises(NotFoundError):
        await session_service.submit_answer(other_user.id, data["sessionId"], 1, "A")


# --- completion ---

async def test_complete_scores_five_question_quiz(quiz_service, session_service, user):
    data = await _generate(quiz_service, user, count=5)
    sid = data["sessionId"]
    await _answer(session_service, user, sid, {1: True, 2: True, 3: True, 4: False, 5: False})

    results = await session_service.complete_quiz(user.id, sid)

    assert results["answered"] == 5
    assert results["correct"] == 3
    assert results["wrong"] == 2
    assert results["skipped"] == 0
    assert results["scorePercentage"] == 60.0
    assert results["grade"] == {"grade": "B", "emoji": "👍", "label": "Good Job!"}
    assert results["timeTaken"] == 50
    assert results["completedAt"] is not None
    assert [q["number"] for q in results["questions"]] == [1, 2, 3, 4, 5]
    assert results["questions"][3]["isCorrect"] is False
    assert results["questions"][0]["correctAnswer"] == correct_letter(1)


async def test_unanswered_questions_count_as_skipped(quiz_service, session_service, user):
    data = await _generate(quiz_service, user, count=10)
    sid = data["sessionId"]
    await _answer(session_service, user, sid, {1: True, 2: True, 3: True, 4: False})

    results = await session_service.complete_quiz(user.id, sid)

    assert (results["answered"], results["correct"], results["wrong"], results["skipped"]) == (4, 3, 1, 6)
    assert results["scorePercentage"] == 30.0
    assert results["grade"]["grade"] == "F"
    assert results["questions"][9]["yourAnswer"] is None
    assert results["questions"][9]["isCorrect"] is False


async def test_complete_recounts_from_question_rows(db, quiz_service, session_service, user):
    data = await _generate(quiz_service, user, count=4)
    sid = data["sessionId"]
    await _answer(session_service, user, sid, {1: True, 2: False})

    session = await db.get(QuizSession, sid)
    session.answered, session.correct, session.wrong = 4, 4, 0
    await db.commit()

    results = await session_service.complete_quiz(user.id, sid)

    assert (results["answered"], results["correct"], results["wrong"], results["skipped"]) == (2, 1, 1, 2)
    assert results["scorePercentage"] == 25.0


async def test_complete_twice_does_not_double_count(db, quiz_service, session_service, user):
    data = await _generate(quiz_service, user, count=5)
    sid = data["sessionId"]
    await _answer(session_service, user, sid, {1: True, 2: True, 3: False})

    first = await session_service.complete_quiz(user.id, sid)
    second = await session_service.complete_quiz(user.id, sid)

    assert second["scorePercentage"] == first["scorePercentage"]
    assert second["completedAt"] == first["completedAt"]
    record = (await db.execute(select(PerformanceRecord))).scalar_one()
    assert record.total_attempted == 3
    assert record.total_correct == 2


async def test_complete_unknown_or_foreign_quiz(quiz_service, session_service, user, other_user):
    data = await _generate(quiz_service, user)
    with pytest.raises(NotFoundError):
        await session_service.complete_quiz(user.id, 9999)
    with pytest.raises(NotFoundError):
        await session_service.complete_quiz(other_user.id, data["sessionId"])


async def test_submit_after_completion_is_rejected(quiz_service, session_service, user):
    data = await _generate(quiz_service, user, count=3)
    sid = data["sessionId"]
    await session_service.complete_quiz(user.id, sid)

    with pytest.raises(QuizAlreadyCompletedError):
        await session_service.submit_answer(user.id, sid, 1, "A")


# --- performance records ---

async def test_completions_accumulate_performance(db, quiz_service, session_service, user):
    first = await _generate(quiz_service, user, count=5)
    await _answer(session_service, user, first["sessionId"], {1: True, 2: True, 3: True, 4: False, 5: False})
    await session_service.complete_quiz(user.id, first["sessionId"])

    record = (await db.execute(select(PerformanceRecord))).scalar_one()
    assert (record.total_attempted, record.total_correct) == (5, 3)
    assert record.accuracy == 60.0
    assert record.best_score == 60.0

    second = await _generate(quiz_service, user, count=5)
    await _answer(session_service, user, second["sessionId"], {1: True, 2: False, 3: False, 4: False, 5: False})
    await session_service.complete_quiz(user.id, second["sessionId"])

    await db.refresh(record)
    assert (record.total_attempted, record.total_correct) == (10, 4)
    assert record.accuracy == 40.0
    assert record.best_score == 60.0
    assert record.total_time_seconds == 100
    assert await _count(db, PerformanceRecord) == 1


async def test_accuracy_uses_attempted_not_total(db, quiz_service, session_service, user):
    data = await _generate(quiz_service, user, count=10)
    await _answer(session_service, user, data["sessionId"], {1: True, 2: True, 3: True, 4: False})
    await session_service.complete_quiz(user.id, data["sessionId"])

    record = (await db.execute(select(PerformanceRecord))).scalar_one()
    assert record.accuracy == 75.0
    assert record.best_score == 30.0


async def test_separate_records_per_difficulty(db, quiz_service, session_service, user):
    for difficulty in ("easy", "hard"):
        data = await _generate(quiz_service, user, count=2, difficulty=difficulty)
        await _answer(session_service, user, data["sessionId"], {1: True})
        await session_service.complete_quiz(user.id, data["sessionId"])

    records = (await db.execute(select(PerformanceRecord).order_by(PerformanceRecord.difficulty))).scalars().all()
    assert [r.difficulty for r in records] == ["easy", "hard"]


async def test_completion_adds_study_activity(db, quiz_service, session_service, user):
    data = await _generate(quiz_service, user, count=5)
    await _answer(session_service, user, data["sessionId"], {1: True, 2: False, 3: True})
    await session_service.complete_quiz(user.id, data["sessionId"])

    stat = (await db.execute(select(StudyStat))).scalar_one()
    assert stat.subject_name == "DBMS"
    assert stat.questions_asked == 3


# --- history ---

async def test_history_newest_first_with_filters(quiz_service, user, other_user):
    first = await _generate(quiz_service, user, difficulty="easy")
    second = await _generate(quiz_service, user, difficulty="hard")
    await quiz_service.generate_quiz(other_user.id, "DBMS", "Joins", "easy", 5)

    history = await quiz_service.get_history(user.id)
    assert [h["id"] for h in history] == [second["sessionId"], first["sessionId"]]

    easy = await quiz_service.get_history(user.id, difficulty="easy")
    assert [h["id"] for h in easy] == [first["sessionId"]]

    assert await quiz_service.get_history(user.id, subject="Java") == []
    assert len(await quiz_service.get_history(user.id, limit=1)) == 1


# --- bookmarks ---

async def test_bookmark_toggle_twice(db, quiz_service, user):
    data = await _generate(quiz_service, user)
    service = BookmarkService(db)

    assert await service.toggle_bookmark(user.id, data["sessionId"], 2) is True
    bookmarks = await service.get_bookmarks(user.id)
    assert len(bookmarks) == 1
    assert bookmarks[0]["question_text"] == "Sample question 2?"
    assert bookmarks[0]["correct_answer"] == correct_letter(2)
    assert bookmarks[0]["subject_name"] == "DBMS"
    assert bookmarks[0]["topic"] == "Joins"

    assert await service.toggle_bookmark(user.id, data["sessionId"], 2) is False
    assert await service.get_bookmarks(user.id) == []
    question = (await db.execute(
        select(QuizQuestion).filter(QuizQuestion.session_id == data["sessionId"], QuizQuestion.question_number == 2)
    )).scalar_one()
    assert question.is_bookmarked is False


async def test_bookmark_flag_shows_in_results(quiz_service, session_service, db, user):
    data = await _generate(quiz_service, user, count=3)
    await BookmarkService(db).toggle_bookmark(user.id, data["sessionId"], 3)

    results = await session_service.complete_quiz(user.id, data["sessionId"])

    assert [q["isBookmarked"] for q in results["questions"]] == [False, False, True]


async def test_bookmark_survives_session_deletion(db, quiz_service, user):
    data = await _generate(quiz_service, user)
    service = BookmarkService(db)
    await service.toggle_bookmark(user.id, data["sessionId"], 1)

    await db.execute(delete(QuizQuestion).where(QuizQuestion.session_id == data["sessionId"]))
    await db.execute(delete(QuizSession).where(QuizSession.id == data["sessionId"]))
    await db.commit()

    bookmarks = await service.get_bookmarks(user.id)
    assert [b["question_text"] for b in bookmarks] == ["Sample question 1?"]
    assert await _count(db, Bookmark) == 1


async def test_bookmark_foreign_or_missing_question(quiz_service, db, user, other_user):
    data = await _generate(quiz_service, user)
    service = BookmarkService(db)

    with pytest.raises(NotFoundError):
        await service.toggle_bookmark(other_user.id, data["sessionId"], 1)
    with pytest.raises(NotFoundError):
        await service.toggle_bookmark(user.id, data["sessionId"], 99)
    with pytest.raises(ValidationError):
        await service.toggle_bookmark(user.id, None, 1)


async def test_bookmarks_filter_by_subject(quiz_service, db, user):
    dbms = await _generate(quiz_service, user)
    java = await quiz_service.generate_quiz(user.id, "Java", "Generics", "easy", 2)
    service = BookmarkService(db)
    await service.toggle_bookmark(user.id, dbms["sessionId"], 1)
    await service.toggle_bookmark(user.id, java["sessionId"], 2)

    assert len(await service.get_bookmarks(user.id)) == 2
    java_only = await service.get_bookmarks(user.id, subject="Java")
    assert [b["subject_name"] for b in java_only] == ["Java"]


async def test_concurrent_completions_share_one_performance_record(db, session_factory, quiz_service, user):
    first = await _generate(quiz_service, user, count=4)
    second = await _generate(quiz_service, user, count=4)
    session_service = SessionService(db)
    await _answer(session_service, user, first["sessionId"], {1: True, 2: True, 3: False})
    await _answer(session_service, user, second["sessionId"], {1: True, 2: False})

    async def complete(session_id):
        async with session_factory() as session:
            return await SessionService(session).complete_quiz(user.id, session_id)

    results = await asyncio.gather(complete(first["sessionId"]), complete(second["sessionId"]))

    assert sorted(r["scorePercentage"] for r in results) == [25.0, 50.0]
    statuses = (await db.execute(select(QuizSession.status).order_by(QuizSession.id))).scalars().all()
    assert list(statuses) == ["completed", "completed"]

    record = (await db.execute(select(PerformanceRecord))).scalar_one()
    assert (record.total_attempted, record.total_correct) == (5, 3)
    assert record.accuracy == 60.0
    assert record.best_score == 50.0
    assert record.total_time_seconds == 50

    stat = (await db.execute(select(StudyStat))).scalar_one()
    assert stat.questions_asked == 5
