from fastapi import APIRouter, Depends
from app.api.routes import (
    approvals,
    health,
    projects,
    releases,
    test_cases,
    test_runs,
    test_scenarios,
    waivers,
)
from app.core.security import get_current_principal

api_router = APIRouter()

# Health stays public; everything else needs a principal
api_router.include_router(health.router)

protected = [Depends(get_current_principal)]
api_router.include_router(projects.router, dependencies=protected)
api_router.include_router(projects.requirements_router, dependencies=protected)
api_router.include_router(test_cases.router, dependencies=protected)
api_router.include_router(test_scenarios.router, dependencies=protected)
api_router.include_router(test_scenarios.lists_router, dependencies=protected)
api_router.include_router(approvals.router, dependencies=protected)
api_router.include_router(test_runs.groups_router, dependencies=protected)
api_router.include_router(test_runs.router, dependencies=protected)
api_router.include_router(releases.router, dependencies=protected)
api_router.include_router(waivers.router, dependencies=protected)
