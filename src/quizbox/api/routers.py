from fastapi import FastAPI

from quizbox.auth.api import router as auth_router
from quizbox.health.api import router as health_router
from quizbox.questions.api import router as questions_router
from quizbox.users.api import router as users_router
from quizbox.votes.api import router as votes_router


def configure_routers(app: FastAPI) -> FastAPI:
    # auth before users: "/users/me" must win over "/users/{user_id}".
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(questions_router)
    app.include_router(votes_router)
    app.include_router(health_router)
    return app
