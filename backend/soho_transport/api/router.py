from fastapi import APIRouter
from soho_transport.api.endpoints import auth, students, fuel_maintenance

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(students.router, prefix="/students", tags=["Students"])
api_router.include_router(fuel_maintenance.router, prefix="/fuel-maintenance", tags=["Fuel & Maintenance"])
