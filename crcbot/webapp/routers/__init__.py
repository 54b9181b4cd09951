"""
Пакет routers содержит модули маршрутизации для API FastAPI.
"""

from .interactions import router as interactions_router

__all__ = ['interactions_router']
