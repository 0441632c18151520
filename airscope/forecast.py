"""
Trends and forecasting over stored snapshots:
- Summary statistics (average / max / min AQI)
- RandomForestRegressor forecasting (next hours AQI, with a confidence figure)
- IsolationForest anomaly detection
- Joblib persistence
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

import joblib
import numpy as np
import pandas as pd
from sklearn.ensemble import IsolationForest, RandomForestRegressor
from sklearn.metrics import mean_absolute_error
from sklearn.model_selection import train_test_split

from breakpoints import AQI_CEILING, POLLUTANTS
from categories import classify
from settings import get_settings

_LOGGER = logging.getLogger(__name__)

FORECAST_MODEL_FILE = "aqi_forecast_rf.joblib"
ANOMALY_MODEL_FILE = "anomaly_iforest.joblib"
META_FILE = "model_meta.joblib"

LAGS = (1, 3, 6, 12)
MIN_TRAIN_ROWS = 48
MIN_FEATURE_ROWS = 24
ANOMALY_COLUMNS = list(POLLUTANTS) + ["aqi"]

SECONDS_IN_DAY = 24 * 60 * 60


def _model_dir(model_dir: Optional[str | Path]) -> Path:
    return Path(model_dir if model_dir is not None else get_settings().MODEL_DIR)


def _ensure_dataframe(rows_or_df: pd.DataFrame | list[dict]) -> pd.DataFrame:
    if isinstance(rows_or_df, pd.DataFrame):
        df = rows_or_df.copy()
    else:
        df = pd.DataFrame(rows_or_df)

    if df.empty:
        return df

    # Normalize timestamps (stored as ts_unix in seconds)
    if "ts_unix" in df.columns:
        df["ts_unix"] = df["ts_unix"].astype(int)
        df["ts"] = pd.to_datetime(df["ts_unix"], unit="s", utc=True)
    elif "ts" in df.columns:
        df["ts"] = pd.to_datetime(df["ts"], utc=True)
        df["ts_unix"] = (df["ts"].astype("int64") // 1_000_000_000).astype(int)
    else:
        raise ValueError("Expected 'ts_unix' or 'ts' in data.")

    df = df.sort_values("ts_unix").reset_index(drop=True)
    return df


def _time_of_day(ts_unix) -> Tuple:
    tod = ts_unix % SECONDS_IN_DAY
    return np.sin(2 * np.pi * tod / SECONDS_IN_DAY), np.cos(2 * np.pi * tod / SECONDS_IN_DAY)


def _build_features(df: pd.DataFrame) -> Tuple[pd.DataFrame, pd.Series]:
    """
    Supervised learning frame:
    - Features from current concentrations, lagged AQI & PM2.5 and time of day
    - Target is next-step AQI (t+1)
    """
    if df.empty:
        return pd.DataFrame(), pd.Series(dtype=float)

    needed = set(ANOMALY_COLUMNS) | {"ts_unix"}
    missing = needed - set(df.columns)
    if missing:
        raise ValueError(f"Missing columns: {sorted(missing)}")

    X = pd.DataFrame(index=df.index)
    for name in ANOMALY_COLUMNS:
        X[name] = df[name].astype(float)

    X["tod_sin"], X["tod_cos"] = _time_of_day(df["ts_unix"].astype(float))

    for lag in LAGS:
        X[f"aqi_lag_{lag}"] = df["aqi"].shift(lag)
        X[f"pm25_lag_{lag}"] = df["pm25"].shift(lag)

    X["aqi_ma_6"] = df["aqi"].rolling(window=6, min_periods=1).mean()

    y = df["aqi"].shift(-1)

    valid = X.notna().all(axis=1) & y.notna()
    X = X.loc[valid].astype(float)
    y = y.loc[valid].astype(float)
    return X, y


@dataclass(frozen=True)
class TrendSummary:
    count: int
    average: int
    maximum: int
    minimum: int
    category: str


def summarize_trend(rows_or_df: pd.DataFrame | list[dict]) -> TrendSummary:
    df = _ensure_dataframe(rows_or_df)
    if df.empty:
        return TrendSummary(count=0, average=0, maximum=0, minimum=0, category=classify(0).label)

    aqi = df["aqi"].astype(float)
    # floor(x + 0.5) rather than round() to keep halves rounding up
    average = int(np.floor(aqi.mean() + 0.5))
    return TrendSummary(
        count=len(df),
        average=average,
        maximum=int(aqi.max()),
        minimum=int(aqi.min()),
        category=classify(average).label,
    )


@dataclass(frozen=True)
class TrainReport:
    rows_used: int
    mae: float


def train_models(
    rows_or_df: pd.DataFrame | list[dict],
    *,
    model_dir: Optional[str | Path] = None,
    n_estimators: int = 300,
) -> TrainReport:
    """
    Train forecast and anomaly models from stored snapshots and persist them.
    """
    df = _ensure_dataframe(rows_or_df)
    if len(df) < MIN_TRAIN_ROWS:
        raise ValueError(f"Not enough data to train yet (need {MIN_TRAIN_ROWS}+ rows).")

    X, y = _build_features(df)
    if len(X) < MIN_FEATURE_ROWS:
        raise ValueError("Not enough valid feature rows after lagging.")

    X_train, X_test, y_train, y_test = train_test_split(
        X, y, test_size=0.2, random_state=42, shuffle=True
    )

    forecast = RandomForestRegressor(
        n_estimators=n_estimators,
        random_state=42,
        n_jobs=-1,
    )
    forecast.fit(X_train, y_train)

    preds = forecast.predict(X_test)
    mae = float(mean_absolute_error(y_test, preds))

    iforest = IsolationForest(
        n_estimators=n_estimators,
        contamination=0.02,
        random_state=42,
    )
    iforest.fit(df[ANOMALY_COLUMNS].astype(float))

    out_dir = _model_dir(model_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    joblib.dump(forecast, out_dir / FORECAST_MODEL_FILE)
    joblib.dump(iforest, out_dir / ANOMALY_MODEL_FILE)
    joblib.dump({"trained_at": datetime.now(timezone.utc).isoformat(), "mae": mae}, out_dir / META_FILE)

    _LOGGER.info("Trained models on %d rows (MAE %.2f) -> %s", len(X), mae, out_dir)
    return TrainReport(rows_used=len(X), mae=mae)


def load_models(
    model_dir: Optional[str | Path] = None,
) -> Tuple[Optional[RandomForestRegressor], Optional[IsolationForest], Dict]:
    path = _model_dir(model_dir)
    forecast = None
    anomaly = None
    meta: Dict = {}
    if (path / FORECAST_MODEL_FILE).exists():
        forecast = joblib.load(path / FORECAST_MODEL_FILE)
    if (path / ANOMALY_MODEL_FILE).exists():
        anomaly = joblib.load(path / ANOMALY_MODEL_FILE)
    if (path / META_FILE).exists():
        meta = joblib.load(path / META_FILE)
    return forecast, anomaly, meta


def _confidence(mae: float, step: int, steps: int) -> int:
    """
    70..100, shrinking with model error and with distance into the horizon.
    """
    quality = float(np.clip(1.0 - mae / 50.0, 0.0, 1.0))
    decay = 1.0 - step / (steps + 1)
    return int(np.floor(70 + 30 * quality * decay + 0.5))


def forecast_aqi(
    rows_or_df: pd.DataFrame | list[dict],
    *,
    horizon_hours: int = 24,
    step_minutes: int = 60,
    model_dir: Optional[str | Path] = None,
) -> pd.DataFrame:
    """
    Forecast AQI as a time series.

    Implementation details:
    - The model predicts next-step AQI (t+1)
    - The horizon is covered by feeding predictions back as lag features
    - Concentrations drift mildly back toward their historical mean
    """
    forecast, _, meta = load_models(model_dir)
    if forecast is None:
        raise FileNotFoundError("Forecast model not found. Train the model first.")

    df = _ensure_dataframe(rows_or_df)
    if df.empty or len(df) < max(LAGS):
        raise ValueError(f"Need recent history ({max(LAGS)}+ rows) to forecast.")

    last = df.iloc[-1]
    conc = {name: float(last[name]) for name in POLLUTANTS}
    means = {name: float(df[name].astype(float).mean()) for name in POLLUTANTS}

    hist_aqi = df["aqi"].astype(float).to_list()
    hist_pm25 = df["pm25"].astype(float).to_list()

    step_seconds = int(step_minutes * 60)
    steps = int((horizon_hours * 60) / step_minutes)
    start_ts = int(last["ts_unix"])
    mae = float(meta.get("mae", 25.0))

    out_ts = []
    out_aqi = []
    out_conf = []

    rng = np.random.default_rng(42)

    for i in range(1, steps + 1):
        ts_unix = start_ts + i * step_seconds

        for name in POLLUTANTS:
            drift = 0.05 * (means[name] - conc[name])
            conc[name] = max(0.0, conc[name] + drift + float(rng.normal(0.0, 0.01 * (means[name] + 1))))

        tod_sin, tod_cos = _time_of_day(float(ts_unix))
        feat = dict(conc)
        feat["aqi"] = float(hist_aqi[-1])
        feat["tod_sin"] = float(tod_sin)
        feat["tod_cos"] = float(tod_cos)
        for lag in LAGS:
            feat[f"aqi_lag_{lag}"] = float(hist_aqi[-lag]) if len(hist_aqi) >= lag else float(hist_aqi[0])
            feat[f"pm25_lag_{lag}"] = float(hist_pm25[-lag]) if len(hist_pm25) >= lag else float(hist_pm25[0])
        feat["aqi_ma_6"] = float(np.mean(hist_aqi[-6:]))

        X_one = pd.DataFrame([feat])[list(forecast.feature_names_in_)].astype(float)
        pred_aqi = float(forecast.predict(X_one)[0])
        pred_aqi = float(np.clip(pred_aqi, 0.0, float(AQI_CEILING)))

        out_ts.append(pd.to_datetime(ts_unix, unit="s", utc=True))
        out_aqi.append(pred_aqi)
        out_conf.append(_confidence(mae, i, steps))

        hist_aqi.append(pred_aqi)
        hist_pm25.append(conc["pm25"])

    out = pd.DataFrame({"ts": out_ts, "pred_aqi": out_aqi, "confidence": out_conf})
    out["category"] = [classify(int(np.floor(v + 0.5))).label for v in out["pred_aqi"]]
    return out


def detect_anomalies(
    rows_or_df: pd.DataFrame | list[dict],
    *,
    model_dir: Optional[str | Path] = None,
) -> pd.DataFrame:
    """
    Label each row with anomaly flags using the persisted IsolationForest model.
    """
    _, anomaly, _ = load_models(model_dir)
    if anomaly is None:
        raise FileNotFoundError("Anomaly model not found. Train the model first.")

    df = _ensure_dataframe(rows_or_df)
    if df.empty:
        return df

    feats = df[ANOMALY_COLUMNS].astype(float)
    # IsolationForest: -1 indicates anomaly
    labels = anomaly.predict(feats)
    scores = anomaly.decision_function(feats)
    out = df.copy()
    out["anomaly"] = labels == -1
    out["anomaly_score"] = scores
    return out
