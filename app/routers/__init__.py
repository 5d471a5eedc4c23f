from .quiz import router as quiz_router
from .quiz_attempt import router as quiz_attempt_router

routes = [
    quiz_router,
    quiz_attempt_router,
]
