"""
API v1 router aggregation.
"""
from fastapi import APIRouter
from lexitrack.api.v1.endpoints import learning, tutor, languages, queue, admin

api_router = APIRouter()

# Each router defines its own prefix
api_router.include_router(learning.router)
api_router.include_router(tutor.router)
api_router.include_router(languages.router)
api_router.include_router(queue.router)
api_router.include_router(admin.router)
