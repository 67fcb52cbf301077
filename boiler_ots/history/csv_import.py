"""Import of plant data-logger CSV exports into history points.

Tag -> field mapping

    Inc_AP3_FT10342N_YOUT    zone1_flow (Nm3/h)
    Inc_AP3_FT10352N_YOUT    zone2_flow (Nm3/h)
    Inc_AP3_FT10362N_YOUT    zone3_flow (Nm3/h)
    Inc_Combus_AT12303_YOUT  o2_level (%)
    Chaud_Vap_TT12115_YOUT   sh5_temp (deg C), superheater 5
    Chaud_Vap_TT12300_YOUT   sh5_temp fallback, boiler outlet
    Chaud_Vap_FT12048C_YOUT  steam_flow, logged in kg/h
    Debit_Vapeur             steam_flow, alternative tag in t/h

Cells may be quoted and use a comma as decimal separator ("5822,113").
A row without a timestamp is skipped; a bad reading never aborts the import.
"""

from __future__ import annotations

import io
import math
import re
from pathlib import Path
from typing import IO, Any, List, Optional, Union

import pandas as pd

from boiler_ots.history.log import TECHNICAL_STOP_SH5, HistoryPoint
from boiler_ots.logger import get_logger
from boiler_ots.models.barycenter import calculate_barycenter

logger = get_logger(__name__)

ZONE1_FLOW = "Inc_AP3_FT10342N_YOUT"
ZONE2_FLOW = "Inc_AP3_FT10352N_YOUT"
ZONE3_FLOW = "Inc_AP3_FT10362N_YOUT"
O2_LEVEL = "Inc_Combus_AT12303_YOUT"
SH5_TEMP = "Chaud_Vap_TT12115_YOUT"
BOILER_OUT_TEMP = "Chaud_Vap_TT12300_YOUT"
STEAM_FLOW_KGH = "Chaud_Vap_FT12048C_YOUT"
STEAM_FLOW_TH = "Debit_Vapeur"
TIMESTAMP = "Timestamp"

SH5_RANGE = (0.0, 1200.0)
DEFAULT_SH5 = 625.0
DEFAULT_O2 = 6.0
DEFAULT_STEAM = 30.6
# Known limitation: a genuine t/h reading above 1000 would be divided too
KGH_THRESHOLD = 1000.0

_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")

CsvSource = Union[str, Path, IO[str], IO[bytes]]


class HistoryImportError(ValueError):
    """The file could not be read as a table at all."""


def clean_value(val: Any) -> float:
    """Normalise a logger cell to a float; unreadable cells become 0."""
    if isinstance(val, (int, float)) and not isinstance(val, bool):
        return 0.0 if math.isnan(val) else float(val)
    if val is None:
        return 0.0

    text = str(val).strip()
    text = re.sub(r"^[\"']|[\"']$", "", text)
    text = text.replace(",", ".", 1)
    match = _NUMBER.match(text)
    return float(match.group(0)) if match else 0.0


def _read_text(source: CsvSource) -> str:
    if hasattr(source, "read"):
        raw = source.read()
    else:
        raw = Path(source).read_bytes()
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8-sig", errors="replace")
    return raw


def _separator(text: str) -> str:
    header = text.splitlines()[0] if text else ""
    if header.count(";") > header.count(","):
        return ";"
    if header.count("\t") > header.count(","):
        return "\t"
    return ","


def _steam_flow(row: pd.Series) -> float:
    steam = 0.0
    logged = clean_value(row.get(STEAM_FLOW_KGH))
    if logged > 0:
        steam = logged / 1000.0 if logged > KGH_THRESHOLD else logged
    if steam == 0:
        steam = clean_value(row.get(STEAM_FLOW_TH)) or DEFAULT_STEAM
    return steam


def _sh5_at(frame: pd.DataFrame, idx: int) -> float:
    if 0 <= idx < len(frame):
        return clean_value(frame.iloc[idx].get(SH5_TEMP))
    return 0.0


def _point_id(timestamp: str, index: int) -> str:
    parsed = pd.to_datetime(timestamp, errors="coerce")
    base = parsed if not pd.isna(parsed) else pd.Timestamp.now()
    return f"{int(base.timestamp() * 1000)}-{index}"


def parse_history_frame(frame: pd.DataFrame) -> List[HistoryPoint]:
    """Convert a frame of raw logger rows (all cells as text) into points."""
    points: List[HistoryPoint] = []
    lo, hi = SH5_RANGE

    for i in range(len(frame)):
        row = frame.iloc[i]
        timestamp = str(row.get(TIMESTAMP, "") or "").strip()
        if not timestamp:
            continue

        zone1 = clean_value(row.get(ZONE1_FLOW))
        zone2 = clean_value(row.get(ZONE2_FLOW))
        zone3 = clean_value(row.get(ZONE3_FLOW))

        sh5 = clean_value(row.get(SH5_TEMP))
        if sh5 == 0:
            sh5 = clean_value(row.get(BOILER_OUT_TEMP))
        if sh5 < lo or sh5 > hi:
            prev_temp = _sh5_at(frame, i - 1)
            next_temp = _sh5_at(frame, i + 1)
            if prev_temp > 0 and next_temp > 0:
                sh5 = (prev_temp + next_temp) / 2.0
            else:
                sh5 = prev_temp or next_temp or DEFAULT_SH5

        o2 = clean_value(row.get(O2_LEVEL)) or DEFAULT_O2

        points.append(HistoryPoint(
            id=_point_id(timestamp, i),
            timestamp=timestamp,
            zone1_flow=zone1,
            zone2_flow=zone2,
            zone3_flow=zone3,
            sh5_temp=sh5,
            o2_level=o2,
            steam_flow=_steam_flow(row),
            barycenter=calculate_barycenter(zone1, zone2, zone3),
            is_technical_stop=sh5 < TECHNICAL_STOP_SH5,
        ))
    return points


def parse_history_csv(source: CsvSource, sep: Optional[str] = None) -> List[HistoryPoint]:
    """Read a data-logger CSV export.

    Args:
        source: Path, or a text/binary file object.
        sep: Column separator; detected from the header line when omitted.

    Raises:
        HistoryImportError: if the content is not a readable table.
    """
    try:
        text = _read_text(source)
        frame = pd.read_csv(
            io.StringIO(text),
            sep=sep or _separator(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        logger.error("History import failed: %s", exc)
        raise HistoryImportError(str(exc)) from exc

    frame.columns = [str(c).strip() for c in frame.columns]
    logger.info("History import: columns detected %s", list(frame.columns))

    points = parse_history_frame(frame)
    skipped = len(frame) - len(points)
    if skipped:
        logger.info("History import: %d row(s) without timestamp skipped", skipped)
    logger.info("History import: %d data points imported", len(points))
    return points
