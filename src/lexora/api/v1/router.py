from fastapi import APIRouter

from src.lexora.api.v1 import auth, organizations

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(organizations.router)
