"""
FastAPI application exposing indicator computation and composite
signal generation over caller-supplied OHLCV bars.  The API is
stateless: it fetches no market data and stores nothing.
"""
from __future__ import annotations
import datetime as dt
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator

from signal_core import (
    IndicatorError,
    InsufficientDataError,
    MisalignedInputError,
    compute_bollinger,
    compute_ema,
    compute_macd,
    compute_rsi,
    compute_sma,
    compute_stochastic,
    compute_vwap,
    generate_signal_from_frame,
)
from signal_core.config import API_TITLE, configure_logger

logger = configure_logger("signal_api")
app = FastAPI(title=API_TITLE)


# ----------------------------------------------------------------------
# Models
# ----------------------------------------------------------------------
class Bar(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    date: Optional[dt.datetime] = None
    open: Optional[float] = None
    high: float
    low: float
    close: float
    volume: float = Field(..., ge=0)


class SignalRequest(BaseModel):
    symbol: str = Field(..., description="Instrument identifier, e.g. AAPL")
    bars: List[Bar] = Field(..., description="OHLCV bars, oldest first")

    @field_validator("symbol")
    @classmethod
    def _strip_symbol(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("symbol must not be empty")
        return v


class IndicatorRequest(BaseModel):
    bars: List[Bar] = Field(..., description="OHLCV bars, oldest first")
    indicators: List[str] = Field(
        ..., description="Indicators: sma20, ema50, rsi14, macd, bollinger, stochastic, vwap"
    )


def _bars_to_frame(bars: List[Bar]) -> pd.DataFrame:
    return pd.DataFrame(
        [b.model_dump(include={"high", "low", "close", "volume"}) for b in bars],
        columns=["high", "low", "close", "volume"],
        dtype=float,
    )


def _series_payload(series: pd.Series) -> Dict[int, float]:
    """Drop undefined values (NaN/inf are not valid JSON) keyed by bar position."""
    return series.replace([np.inf, -np.inf], np.nan).dropna().to_dict()


def _window(key: str, prefix: str, default: Optional[int] = None) -> int:
    suffix = key[len(prefix):]
    if not suffix:
        if default is None:
            raise HTTPException(400, detail=f"{prefix} needs a window, e.g. {prefix}20")
        return default
    if not suffix.isdigit():
        raise HTTPException(400, detail=f"Invalid window in {key}")
    return int(suffix)


# ----------------------------------------------------------------------
# Endpoints
# ----------------------------------------------------------------------
@app.get("/health")
async def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/indicators/compute")
async def compute_indicators(req: IndicatorRequest):
    if not req.indicators:
        raise HTTPException(400, detail="No indicators requested")
    if not req.bars:
        raise HTTPException(400, detail="No bars supplied")
    df = _bars_to_frame(req.bars)
    result: Dict[str, Any] = {}
    try:
        for ind in req.indicators:
            key = ind.lower()
            if key.startswith("sma"):
                result[key] = _series_payload(compute_sma(df["close"], _window(key, "sma")))
            elif key.startswith("ema"):
                result[key] = _series_payload(compute_ema(df["close"], _window(key, "ema")))
            elif key.startswith("rsi"):
                result[key] = _series_payload(compute_rsi(df["close"], _window(key, "rsi", 14)))
            elif key == "macd":
                macd = compute_macd(df["close"])
                result[key] = {
                    "macd": _series_payload(macd.macd),
                    "signal": _series_payload(macd.signal),
                    "histogram": _series_payload(macd.histogram),
                }
            elif key == "bollinger":
                bands = compute_bollinger(df["close"])
                result[key] = {
                    "upper": _series_payload(bands.upper),
                    "middle": _series_payload(bands.middle),
                    "lower": _series_payload(bands.lower),
                }
            elif key == "stochastic":
                stoch = compute_stochastic(df["high"], df["low"], df["close"])
                result[key] = {"k": _series_payload(stoch.k), "d": _series_payload(stoch.d)}
            elif key == "vwap":
                result[key] = _series_payload(
                    compute_vwap(df["high"], df["low"], df["close"], df["volume"])
                )
            else:
                raise HTTPException(400, detail=f"Unknown indicator {ind}")
    except InsufficientDataError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except IndicatorError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        raise
    except Exception:
        logger.exception("Unhandled error in /indicators/compute")
        raise HTTPException(status_code=500, detail="Internal server error")
    return result


@app.post("/signals/generate")
async def generate(req: SignalRequest):
    """
    Compute the composite trading signal for the supplied bars.  Too few
    bars or ragged input is reported as 422; the caller decides how to
    present it.
    """
    df = _bars_to_frame(req.bars)
    try:
        signal = generate_signal_from_frame(req.symbol, df)
    except (InsufficientDataError, MisalignedInputError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except IndicatorError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Unhandled error in /signals/generate")
        raise HTTPException(status_code=500, detail="Internal server error")
    return signal.to_dict()
