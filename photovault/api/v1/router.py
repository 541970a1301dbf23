from fastapi import APIRouter
from photovault.api.v1.endpoints import albums, photos, profile, public


api_router = APIRouter()

api_router.include_router(albums.router, prefix="/albums", tags=["albums"])
api_router.include_router(public.router, prefix="/public", tags=["public"])
api_router.include_router(photos.router, prefix="/photos", tags=["photos"])
api_router.include_router(profile.router, tags=["profile"])
