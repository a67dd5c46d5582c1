from fastapi import APIRouter
from app.routers import auth, users, departments, okrs, my_okrs, tasks, kpis, reports

# Centralized API router hub
# Routers are aggregated here and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(users.router, tags=["Users"])
api_router.include_router(departments.router, tags=["Departments"])
api_router.include_router(okrs.router, tags=["OKRs"])
api_router.include_router(my_okrs.router, tags=["My OKRs"])
api_router.include_router(tasks.router, tags=["Tasks"])
api_router.include_router(kpis.router, tags=["KPIs"])
api_router.include_router(reports.router, tags=["Reports"])
