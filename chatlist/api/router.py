from fastapi import APIRouter

from chatlist.features.conversations.api import router as conversations_router

api_router = APIRouter()
api_router.include_router(conversations_router)
