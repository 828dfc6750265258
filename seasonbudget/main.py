# seasonbudget/main.py
from __future__ import annotations

from fastapi import FastAPI

from seasonbudget.observability import RequestLogMiddleware, configure_logging
from seasonbudget.routers.budgets import router as budgets_router
from seasonbudget.routers.expenses import router as expenses_router
from seasonbudget.routers.line_items_import import router as import_router
from seasonbudget.routers.reports import router as reports_router
from seasonbudget.routers.snapshots import router as snapshots_router
from seasonbudget.routers.system import router as system_router

configure_logging()

app = FastAPI(title="Season Budget", version="0.1.0")

app.add_middleware(RequestLogMiddleware)

# Routers
app.include_router(system_router)
app.include_router(budgets_router)
app.include_router(reports_router)
app.include_router(expenses_router)
app.include_router(import_router)
app.include_router(snapshots_router)


@app.get("/")
def index():
    return {"name": app.title, "version": app.version, "docs": "/docs"}
