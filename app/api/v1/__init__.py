from fastapi import APIRouter
from app.api.v1.endpoints import users, auth, friends, multiplayer, external, quizzes, progress

api_router = APIRouter()

# 엔드포인트 등록
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(friends.router, prefix="/friends", tags=["friends"])
api_router.include_router(multiplayer.router, prefix="/multiplayer", tags=["multiplayer"])
api_router.include_router(external.router, prefix="/external", tags=["external"])
api_router.include_router(quizzes.router, prefix="/quizzes", tags=["quizzes"])
api_router.include_router(progress.router, prefix="/progress", tags=["progress"])


@api_router.get("/health", tags=["health"])
def api_health():
    return {"ok": True}
