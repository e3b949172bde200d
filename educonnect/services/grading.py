"""Auto-grading evaluator for TEST assignments.

Answers are compared to the key by plain string equality: case-sensitive,
no trimming. A multiple-choice answer is the 1-based option index as a
string ("2"). The result is advisory; the stored ``grade`` is always set by
the teacher.
"""
from dataclasses import dataclass, field
from typing import Dict, List

from ..models import QUESTION_SHORT_ANSWER


def score(question, answer) -> bool:
    # no normalisation on purpose: " 2" or "paris" do not match "2" / "Paris"
    return answer is not None and answer == question.correct_answer


@dataclass
class QuestionScore:
    question_id: int
    correct: bool
    points: int
    earned: int


@dataclass
class AutoScore:
    earned: int = 0
    possible: int = 0
    items: List[QuestionScore] = field(default_factory=list)
    manual_review: List[int] = field(default_factory=list)

    @property
    def percentage(self) -> float:
        if not self.possible:
            return 0.0
        return round(self.earned * 100.0 / self.possible, 2)

    def to_dict(self):
        return {
            "earned": self.earned,
            "possible": self.possible,
            "percentage": self.percentage,
            "items": [vars(i) for i in self.items],
            "manual_review": self.manual_review,
        }


def evaluate(questions, answers: Dict[str, str]) -> AutoScore:
    answers = answers or {}
    result = AutoScore()
    for q in questions:
        ok = score(q, answers.get(str(q.id)))
        earned = q.points if ok else 0
        result.possible += q.points
        result.earned += earned
        result.items.append(QuestionScore(question_id=q.id, correct=ok, points=q.points, earned=earned))
        if not ok and q.type == QUESTION_SHORT_ANSWER:
            result.manual_review.append(q.id)
    return result


def total_score(questions, answers: Dict[str, str]) -> float:
    """Points of correct answers over all points, scaled to 0..100."""
    return evaluate(questions, answers).percentage
