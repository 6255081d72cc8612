from fastapi import APIRouter

from roster.api.v1.endpoints import actions, employees, health, positions

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router)
api_router.include_router(actions.router)
api_router.include_router(employees.router)
api_router.include_router(positions.router)
