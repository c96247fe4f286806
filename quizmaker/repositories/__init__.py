from quizmaker.repositories.base import BaseRepository
from quizmaker.repositories.user_repo import UserRepository
from quizmaker.repositories.quiz_repo import (
    QuizRepository,
    QuestionRepository,
    AnswerOptionRepository,
    QuizAttemptRepository,
)

__all__ = [
    "BaseRepository",
    "UserRepository",
    "QuizRepository",
    "QuestionRepository",
    "AnswerOptionRepository",
    "QuizAttemptRepository",
]
