from dataclasses import dataclass, asdict

@dataclass(frozen=True)
class Grade:
    grade: str
    emoji: str
    label: str

    def to_dict(self) -> dict:
        return asdict(self)


# Lower bound (inclusive) of each grade band, highest first
GRADE_BANDS = (
    (90, Grade("A+", "🏆", "Outstanding!")),
    (80, Grade("A", "🌟", "Excellent!")),
    (70, Grade("B+", "👏", "Very Good!")),
    (60, Grade("B", "👍", "Good Job!")),
    (50, Grade("C", "📚", "Keep Studying!")),
    (40, Grade("D", "💪", "Needs Improvement")),
)
FAIL_GRADE = Grade("F", "📖", "Study More & Try Again")


def grade_for(percentage: float) -> Grade:
    for threshold, grade in GRADE_BANDS:
        if percentage >= threshold:
            return grade
    return FAIL_GRADE


def score_percentage(correct: int, total_questions: int) -> float:
    """Skipped questions count against the score: divide by total, not answered."""
    if total_questions <= 0:
        return 0.0
    return round(correct / total_questions * 100, 2)
