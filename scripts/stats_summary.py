"""
Server-side digest of a campaign's participation stats.

The campaign page shows the neighbourhood ranking and the weekly series
without waiting for the browser to load the stats JSON.
"""

import math
from typing import Any, Optional

import numpy as np
import pandas as pd
from scipy.stats import linregress

TOP_BARRIOS = 10
UNSPECIFIED_BARRIO = "(sin especificar)"


def _as_int(value: Any) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return int(number)


def rank_barrios(barrios: Any, limit: Optional[int] = TOP_BARRIOS) -> list[dict]:
    """
    Neighbourhoods ordered by submissions, most first.

    Ties are broken by name so the ranking does not depend on the key order
    of the export. An empty name is shown as "(sin especificar)".
    """
    if not isinstance(barrios, dict) or not barrios:
        return []

    df = pd.DataFrame({
        "name": [str(k) if k else "" for k in barrios.keys()],
        "count": [_as_int(v) for v in barrios.values()],
    })
    df = df.sort_values(["count", "name"], ascending=[False, True], kind="mergesort")
    if limit is not None:
        df = df.head(limit)

    return [
        {"name": row["name"] or UNSPECIFIED_BARRIO, "count": int(row["count"])}
        for _, row in df.iterrows()
    ]


def weekly_series(history: Any) -> pd.DataFrame:
    """Weekly history as a DataFrame with `week_label` and `total` columns."""
    rows = []
    if isinstance(history, list):
        for week in history:
            if not isinstance(week, dict):
                continue
            rows.append({
                "week_label": str(week.get("week_label", "")),
                "total": _as_int(week.get("total")),
            })
    return pd.DataFrame(rows, columns=["week_label", "total"])


def weekly_trend(series: pd.DataFrame) -> Optional[float]:
    """Least-squares slope of weekly totals (submissions per week)."""
    if len(series) < 2:
        return None
    totals = series["total"].to_numpy(dtype=float)
    if np.all(totals == totals[0]):
        return 0.0
    slope = linregress(np.arange(len(totals)), totals).slope
    return round(float(slope), 2)


def summarize_stats(stats: Any) -> dict:
    """Totals, top neighbourhoods and weekly series ready for the template."""
    if not isinstance(stats, dict):
        stats = {}
    totales = stats.get("totales")
    if not isinstance(totales, dict):
        totales = {}

    series = weekly_series(stats.get("historico_semanal"))

    return {
        "total_reclamaciones": _as_int(totales.get("total_reclamaciones")),
        "total_barrios": _as_int(totales.get("total_barrios")),
        "top_barrios": rank_barrios(totales.get("barrios")),
        "weekly_labels": series["week_label"].tolist(),
        "weekly_totals": [int(t) for t in series["total"].tolist()],
        "weekly_trend": weekly_trend(series),
    }
