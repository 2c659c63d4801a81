from fastapi import APIRouter
from cafeshift.api.v1.endpoints import (
    health,
    auth,
    setup,
    branches,
    employees,
    hours,
    shifts,
    shift_trades,
    payroll,
    approvals,
    time_off,
    notifications,
    reports,
    blockchain,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(setup.router, prefix="/setup", tags=["setup"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(branches.router, prefix="/branches", tags=["branches"])
api_router.include_router(employees.router, prefix="/employees", tags=["employees"])
api_router.include_router(hours.router, prefix="/hours", tags=["hours"])
api_router.include_router(shifts.router, prefix="/shifts", tags=["shifts"])
api_router.include_router(shift_trades.router, prefix="/shift-trades", tags=["shift-trades"])
api_router.include_router(payroll.router, prefix="/payroll", tags=["payroll"])
api_router.include_router(approvals.router, prefix="/approvals", tags=["approvals"])
api_router.include_router(time_off.router, prefix="", tags=["time-off"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(reports.router, prefix="", tags=["reports"])
api_router.include_router(blockchain.router, prefix="/blockchain", tags=["blockchain"])
