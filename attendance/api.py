"""
FastAPI app entry point aggregating routers under attendance/routes.
Keep as `uvicorn attendance.api:app`.
"""
from __future__ import annotations


from fastapi import FastAPI

from .services.attendance_svc import ensure_attendance_schema


app = FastAPI(title="attendance-api", version="0.1.0")


@app.on_event("startup")
def on_startup():
    ensure_attendance_schema()


from .routes import base as base_routes
from .routes import attendance as attendance_routes

app.include_router(base_routes.router)
app.include_router(attendance_routes.router)
