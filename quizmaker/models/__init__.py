from quizmaker.models.base import BaseModel
from quizmaker.models.user import User, UserRole
from quizmaker.models.quiz import Quiz
from quizmaker.models.question import Question, AnswerOption, QuestionType
from quizmaker.models.quiz_attempt import QuizAttempt, AttemptStatus

__all__ = [
    "BaseModel",
    "User",
    "UserRole",
    "Quiz",
    "Question",
    "AnswerOption",
    "QuestionType",
    "QuizAttempt",
    "AttemptStatus",
]
