from __future__ import annotations

from dataclasses import asdict
import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import DashboardFiltersModel, MetaDatesResponse, StatusResponse
from core.aggregation import compute_activity_types, compute_daily_activities, compute_summary
from core.data import load_dashboard_data, prepare_context
from core.filters import DashboardFilters, normalize_filters
from core.logging_config import setup_logging
from core.metrics_activities import compute_activities
from core.metrics_health import compute_health
from core.metrics_overview import compute_overview
from core.metrics_sleep import compute_sleep
from core.state import DashboardState, Tab
from core.tabs import compute_tab

setup_logging()

app = FastAPI(title="Garmin Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _filters_from_model(model: DashboardFiltersModel) -> DashboardFilters:
    return normalize_filters(model.model_dump())


def _context(model: DashboardFiltersModel) -> tuple[DashboardFilters, dict]:
    data_ctx = load_dashboard_data()
    f = _filters_from_model(model)
    return f, prepare_context(f, data_ctx)


def _error(exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects; NaN and inf become null."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


@app.get("/meta/dates", response_model=MetaDatesResponse)
def meta_dates():
    try:
        data_ctx = load_dashboard_data()
        return _json({"dates": [str(d) for d in data_ctx.get("dates", []) or []]})
    except Exception as exc:
        logger.exception("meta_dates failed")
        return _error(exc)


@app.get("/meta/status", response_model=StatusResponse)
def meta_status():
    state = DashboardState()
    try:
        data_ctx = load_dashboard_data()
        state = state.loaded()
        files = list(data_ctx.get("files", []) or [])
    except Exception as exc:
        logger.exception("meta_status failed")
        state = state.failed(str(exc))
        files = []
    return _json({**state.to_dict(), "files": files})


@app.post("/summary")
def summary(filters: DashboardFiltersModel):
    try:
        f, ctx = _context(filters)
        stats = compute_summary(ctx["activities"], ctx["daily_stats"])
        return _json({"filters": asdict(f), "summary": stats.to_dict(), "display": stats.display()})
    except Exception as exc:
        logger.exception("summary failed")
        return _error(exc)


@app.post("/overview")
def overview(filters: DashboardFiltersModel):
    try:
        f, ctx = _context(filters)
        return _json(compute_overview(f, ctx))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc)


@app.post("/activities")
def activities(filters: DashboardFiltersModel):
    try:
        f, ctx = _context(filters)
        return _json(compute_activities(f, ctx))
    except Exception as exc:
        logger.exception("activities failed")
        return _error(exc)


@app.post("/health")
def health(filters: DashboardFiltersModel):
    try:
        f, ctx = _context(filters)
        return _json(compute_health(f, ctx))
    except Exception as exc:
        logger.exception("health failed")
        return _error(exc)


@app.post("/sleep")
def sleep(filters: DashboardFiltersModel):
    try:
        f, ctx = _context(filters)
        return _json(compute_sleep(f, ctx))
    except Exception as exc:
        logger.exception("sleep failed")
        return _error(exc)


@app.post("/tabs/{tab}")
def tab_payload(tab: str, filters: DashboardFiltersModel):
    try:
        selected = Tab(tab)
    except ValueError as exc:
        return _error(exc, status_code=404)
    try:
        f, ctx = _context(filters)
        return _json(compute_tab(selected, f, ctx))
    except Exception as exc:
        logger.exception("tab %s failed", tab)
        return _error(exc)


@app.post("/export/{dataset}")
def export_dataset(dataset: str, filters: DashboardFiltersModel):
    _, ctx = _context(filters)

    export_df = None
    filename = f"{dataset}.csv"
    if dataset in {"activities", "daily_stats", "sleep"}:
        export_df = ctx.get(dataset)
    elif dataset == "daily_activities":
        export_df = pd.DataFrame([asdict(d) for d in compute_daily_activities(ctx["activities"])])
    elif dataset == "activity_types":
        export_df = pd.DataFrame(compute_activity_types(ctx["activities"]).to_records())
    else:
        export_df = pd.DataFrame()

    if export_df is None or not hasattr(export_df, "to_csv"):
        export_df = pd.DataFrame()
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
