"""
FastAPI application for the chart series backend.

This app exposes the series transforms over a small stateless REST
interface: clients post raw records and receive display-ready points plus
band metadata for overlay annotations. Nothing is stored between requests;
data acquisition and caching stay with the caller.
"""

from __future__ import annotations

import logging

import pandas as pd
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import schemas
from .config import LOG_LEVEL, RANGE_PRESETS
from .data_pipeline import filter_by_range, get_preset_range, normalize, parse_series
from .logging_config import setup_logging
from .models import compute_yes_band, value_to_yes_percent

logger = logging.getLogger(__name__)

app = FastAPI(title="Chart Series Backend", version="0.1.0")

# Enable CORS for the static dashboard
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup_event() -> None:
    """Configure logging when the server starts."""
    setup_logging(LOG_LEVEL)


def _parse_or_400(records: list[schemas.RawPointIn]) -> pd.DataFrame:
    series = parse_series([r.model_dump() for r in records])
    if series.empty:
        raise HTTPException(status_code=400, detail="No valid points in records")
    return series


def _points(frame: pd.DataFrame) -> list[schemas.PointOut]:
    has_raw = "raw" in frame.columns
    return [
        schemas.PointOut(t=row.t, v=row.v, raw=row.raw if has_raw else None)
        for row in frame.itertuples(index=False)
    ]


@app.get("/health")
def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/presets", response_model=schemas.PresetsOut)
def presets() -> schemas.PresetsOut:
    """Return the range presets and their day counts."""
    return schemas.PresetsOut(presets=RANGE_PRESETS)


@app.post("/series/normalize", response_model=schemas.NormalizeOut)
def normalize_series(request: schemas.NormalizeRequest) -> schemas.NormalizeOut:
    """Filter a series to the visible range and normalize it for display."""
    full = _parse_or_400(request.records)
    if request.preset is not None:
        start, end = get_preset_range(request.preset, full)
    else:
        start, end = request.start, request.end
    visible = filter_by_range(full, start, end)
    transformed, band_info = normalize(visible, request.mode, full_series=full, anchor=end)
    logger.info("Normalized %d of %d points with mode %s", len(transformed), len(full), request.mode)
    return schemas.NormalizeOut(
        mode=request.mode,
        points=_points(transformed),
        band_info=schemas.BandInfoOut(**band_info) if band_info else None,
    )


@app.post("/series/yes-band", response_model=schemas.YesPercentOut)
def yes_band(request: schemas.YesBandRequest) -> schemas.YesPercentOut:
    """Compute the percentile band and the YES% of the latest value up to the anchor."""
    series = _parse_or_400(request.records)
    visible = filter_by_range(series, None, request.anchor)
    if visible.empty:
        raise HTTPException(status_code=400, detail="No points on or before anchor")
    band = compute_yes_band(series, request.window, request.anchor)
    latest = float(visible["v"].iloc[-1])
    if band is None:
        logger.info("Insufficient data for a %s band (%d points)", request.window, len(series))
    return schemas.YesPercentOut(
        band=schemas.YesBandOut(**band) if band else None,
        latest_value=latest,
        yes_percent=value_to_yes_percent(latest, band),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch unhandled exceptions and return a JSON error."""
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(status_code=500, content={"detail": str(exc)})
