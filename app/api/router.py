from fastapi import APIRouter

from app.domains.ecommerce.api import admin_routes, routes

api_router = APIRouter()

# API routes (all have the /api/v1 prefix from the app factory)
api_router.include_router(routes.router)
api_router.include_router(admin_routes.router)
