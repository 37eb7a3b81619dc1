from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from funnel_planner.io_utils import read_yaml, to_int
from funnel_planner.records import ChannelActuals, ChannelInputs, ProjectTargets, normalize_channel
from funnel_planner.schema import CHANNEL_ACTUALS_COLUMNS, CHANNELS

logger = logging.getLogger(__name__)


@dataclass
class ProjectPlan:
    project_id: str
    year: Optional[int]
    month: Optional[int]
    targets: Optional[ProjectTargets]
    inputs_by_channel: dict[str, Optional[ChannelInputs]] = field(default_factory=dict)
    actuals_csv: Optional[Path] = None


def parse_project_plan(payload: dict[str, Any], base_dir: Optional[Path] = None) -> ProjectPlan:
    project_id = str(payload.get("project_id") or "").strip()
    if not project_id:
        raise ValueError("Project plan is missing 'project_id'.")
    year = to_int(payload.get("year"))
    month = to_int(payload.get("month"))
    if month is not None and not 1 <= month <= 12:
        raise ValueError(f"Project plan '{project_id}' has invalid month {month}; expected 1-12.")

    raw_targets = payload.get("targets")
    targets = None
    if raw_targets:
        targets = ProjectTargets.from_mapping(
            {"project_id": project_id, "year": year, "month": month, **raw_targets}
        )

    inputs_by_channel: dict[str, Optional[ChannelInputs]] = {channel: None for channel in CHANNELS}
    for key, raw_inputs in (payload.get("channels") or {}).items():
        channel = normalize_channel(key)
        inputs_by_channel[channel] = ChannelInputs.from_mapping(raw_inputs or {}, channel=channel)

    actuals_csv = None
    data_section = payload.get("data") or {}
    if data_section.get("actuals_csv"):
        actuals_csv = Path(data_section["actuals_csv"])
        if base_dir is not None and not actuals_csv.is_absolute():
            actuals_csv = base_dir / actuals_csv

    return ProjectPlan(
        project_id=project_id,
        year=year,
        month=month,
        targets=targets,
        inputs_by_channel=inputs_by_channel,
        actuals_csv=actuals_csv,
    )


def load_project_plan(path: Path, base_dir: Optional[Path] = None) -> ProjectPlan:
    if not path.exists():
        raise FileNotFoundError(f"Missing project config: {path}")
    plan = parse_project_plan(read_yaml(path), base_dir=base_dir)
    configured = [ch for ch, inputs in plan.inputs_by_channel.items() if inputs is not None]
    logger.info(f"Loaded plan for {plan.project_id} ({plan.year}-{plan.month}), channels: {configured}")
    return plan


def load_channel_actuals(csv_path: Path, year: Optional[int] = None, month: Optional[int] = None) -> dict[str, ChannelActuals]:
    """Read channel actuals from CSV, keeping rows for the given month when one is given."""
    if not csv_path.exists():
        raise FileNotFoundError(f"Missing actuals csv: {csv_path}")
    frame = pd.read_csv(csv_path)
    if "channel" not in frame.columns:
        raise ValueError(f"Actuals csv {csv_path} has no 'channel' column.")
    if year is not None and "year" in frame.columns:
        frame = frame[pd.to_numeric(frame["year"], errors="coerce") == year]
    if month is not None and "month" in frame.columns:
        frame = frame[pd.to_numeric(frame["month"], errors="coerce") == month]

    frame = frame.astype(object).where(frame.notna(), None)
    actuals: dict[str, ChannelActuals] = {}
    for row in frame.to_dict("records"):
        record = ChannelActuals.from_mapping(row)
        if record.channel in actuals:
            logger.warning(f"Duplicate actuals row for channel {record.channel} in {csv_path}; keeping the last one")
        actuals[record.channel] = record
    return actuals


def channel_actuals_frame(actuals_by_channel: dict[str, ChannelActuals], project_id: str, year: int, month: int) -> pd.DataFrame:
    rows = []
    for channel in CHANNELS:
        record = actuals_by_channel.get(channel)
        if record is None:
            continue
        rows.append(
            {
                "project_id": project_id,
                "year": year,
                "month": month,
                "channel": channel,
                "leads": record.leads,
                "not_contacted": record.not_contacted,
                "qualified_leads": record.qualified_leads,
                "meetings_scheduled": record.meetings_scheduled,
                "meetings_done": record.meetings_done,
                "deals_won": record.deals_won,
                "sqft_won": record.sqft_won,
            }
        )
    return pd.DataFrame(rows, columns=CHANNEL_ACTUALS_COLUMNS)
