from __future__ import annotations

from fastapi import APIRouter

from .endpoints import auth, bookmarks, chat, folders, health, metadata, user_settings

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(bookmarks.router, prefix="/bookmarks", tags=["bookmarks"])
api_router.include_router(folders.router, prefix="/folders", tags=["folders"])
api_router.include_router(user_settings.router, prefix="/settings", tags=["settings"])
api_router.include_router(chat.router, prefix="/chat", tags=["chat"])
api_router.include_router(metadata.router, prefix="/metadata", tags=["metadata"])
