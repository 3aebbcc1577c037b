# api/v1/router.py
from fastapi import APIRouter

from . import biometrics, chat, goals, library, meals, prefs, targets, users

api_router = APIRouter()

api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(biometrics.router, prefix="/biometrics", tags=["Biometrics"])
api_router.include_router(goals.router, prefix="/goals", tags=["Goals"])
api_router.include_router(targets.router, prefix="/targets", tags=["Daily targets"])
api_router.include_router(meals.router, prefix="/meals", tags=["Meals"])
api_router.include_router(library.router, prefix="/library", tags=["Quick-add library"])
api_router.include_router(chat.router, prefix="/chat", tags=["Chat"])

# preferences live *under* the user resource
api_router.include_router(
    prefs.router,
    prefix="/users",          # results in /users/me/preferences
    tags=["Preferences"],
)
