from fastapi import APIRouter
from quizmaker.api.v1.endpoints import auth, quizzes, questions, student

# ============================================================
# Main API v1 Router
# ============================================================

api_router = APIRouter()

# Include auth routes at /auth
api_router.include_router(
    auth.router,
    prefix="/auth"
)

# Instructor quiz management at /quizzes
api_router.include_router(
    quizzes.router,
    prefix="/quizzes"
)

# Questions are nested under quizzes
api_router.include_router(
    questions.router,
    prefix="/quizzes/{quiz_id}/questions"
)

# Student browsing and attempts at /student
api_router.include_router(
    student.router,
    prefix="/student"
)
