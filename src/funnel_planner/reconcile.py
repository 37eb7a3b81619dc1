from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

import numpy as np
import pandas as pd

from funnel_planner.funnel import (
    InputsByChannel,
    compute_channel_funnel_from_inputs,
    compute_overall_funnel_targets,
    record_number,
)
from funnel_planner.records import ChannelActuals, ProjectActuals, ProjectTargets
from funnel_planner.schema import CHANNELS, FUNNEL_STAGES, RECONCILIATION_COLUMNS

logger = logging.getLogger(__name__)

Actuals = Union[ProjectActuals, ChannelActuals]

# Funnel stage -> actuals field carrying the observed count.
ACTUALS_FIELD_BY_STAGE = {
    "leads": "leads",
    "qualified": "qualified_leads",
    "meetings_scheduled": "meetings_scheduled",
    "meetings_done": "meetings_done",
    "deals": "deals_won",
    "sqft": "sqft_won",
}


@dataclass
class ReconciliationResult:
    table: pd.DataFrame
    summary: dict[str, Any]


def clamp_percent(value: float) -> float:
    if value is None or math.isnan(value):
        return 0.0
    return max(0.0, min(100.0, value))


def percent_of_target(actual: float, target: float) -> float:
    return (actual / target) * 100.0 if target > 0 else 0.0


def stage_conversion_rates(actuals: Optional[Actuals]) -> dict[str, float]:
    leads = record_number(actuals, "leads")
    qualified = record_number(actuals, "qualified_leads")
    scheduled = record_number(actuals, "meetings_scheduled")
    done = record_number(actuals, "meetings_done")
    deals = record_number(actuals, "deals_won")
    return {
        "lead_to_qualified_percent": clamp_percent(qualified / max(leads, 1.0) * 100.0),
        "qualified_to_meeting_done_percent": clamp_percent(done / max(qualified, 1.0) * 100.0),
        "scheduled_to_done_percent": clamp_percent(done / max(scheduled, 1.0) * 100.0),
        "meeting_done_to_close_percent": clamp_percent(deals / max(done, 1.0) * 100.0),
    }


def close_breakdown(actuals: Optional[ProjectActuals]) -> dict[str, dict[str, float]]:
    """Where this month's closed deals came from: own pipeline, transfers in, or misc."""

    def bucket(deals_field: str, sqft_field: str) -> dict[str, float]:
        return {
            "deals": max(0.0, record_number(actuals, deals_field)),
            "sqft": max(0.0, record_number(actuals, sqft_field)),
        }

    breakdown = {
        "pipeline": bucket("deals_won", "sqft_won"),
        "transfers_in": bucket("deals_won_transfer_in", "sqft_won_transfer_in"),
        "misc": bucket("deals_won_misc", "sqft_won_misc"),
        # Closed in other projects; shown for visibility, not counted here.
        "transfers_out": bucket("deals_won_transfer_out", "sqft_won_transfer_out"),
    }
    breakdown["total"] = {
        key: sum(breakdown[name][key] for name in ("pipeline", "transfers_in", "misc"))
        for key in ("deals", "sqft")
    }
    return breakdown


def efficiency(spend: float, qualified_leads: float, sqft: float) -> dict[str, Optional[float]]:
    return {
        "cost_per_qualified_lead": round(spend / qualified_leads, 4) if qualified_leads > 0 else None,
        "cost_per_sqft": round(spend / sqft, 4) if sqft > 0 else None,
    }


def allocated_budget(inputs_by_channel: InputsByChannel) -> float:
    return sum(max(0.0, record_number(inputs_by_channel.get(ch), "allocated_budget")) for ch in CHANNELS)


def remaining_budget(targets: Optional[ProjectTargets], inputs_by_channel: InputsByChannel) -> float:
    """Budget left to allocate; negative when channels are over-allocated."""
    return record_number(targets, "total_budget") - allocated_budget(inputs_by_channel)


def _channel_targets(targets: Optional[ProjectTargets], inputs_by_channel: InputsByChannel) -> dict[str, dict[str, int]]:
    rows: dict[str, dict[str, int]] = {}
    for channel in CHANNELS:
        computed = compute_channel_funnel_from_inputs(targets=targets, inputs=inputs_by_channel.get(channel))
        rows[channel] = {
            "leads": computed.leads_required,
            "qualified": computed.qualified_required,
            "meetings_scheduled": computed.meetings_scheduled_required,
            "meetings_done": computed.meetings_done_required,
            "deals": computed.deals_required,
            "sqft": computed.target_sqft,
        }
    return rows


def reconcile_channels(
    targets: Optional[ProjectTargets],
    inputs_by_channel: InputsByChannel,
    actuals_by_channel: Mapping[str, Optional[ChannelActuals]],
) -> ReconciliationResult:
    channel_targets = _channel_targets(targets, inputs_by_channel)

    rows: list[dict[str, Any]] = []
    for channel in CHANNELS:
        actuals = actuals_by_channel.get(channel)
        for stage in FUNNEL_STAGES:
            rows.append(
                {
                    "channel": channel,
                    "stage": stage,
                    "target": channel_targets[channel][stage],
                    "actual": max(0.0, record_number(actuals, ACTUALS_FIELD_BY_STAGE[stage])),
                }
            )
    table = pd.DataFrame(rows, columns=["channel", "stage", "target", "actual"])
    table["percent_of_target"] = np.where(
        table["target"] > 0,
        table["actual"] / table["target"].where(table["target"] > 0, 1) * 100.0,
        0.0,
    ).round(2)
    table["gap"] = (table["target"] - table["actual"]).clip(lower=0.0)
    table = table[RECONCILIATION_COLUMNS].reset_index(drop=True)

    totals = table.groupby("stage", sort=False)["actual"].sum()
    summed = ProjectActuals(
        leads=float(totals["leads"]),
        qualified_leads=float(totals["qualified"]),
        meetings_scheduled=float(totals["meetings_scheduled"]),
        meetings_done=float(totals["meetings_done"]),
        deals_won=float(totals["deals"]),
        sqft_won=float(totals["sqft"]),
    )
    overall = compute_overall_funnel_targets(targets, inputs_by_channel).to_dict()
    overall["sqft"] = int(max(0.0, record_number(targets, "sales_target_sqft")))

    project_totals = {
        stage: {
            "target": overall[stage],
            "actual": float(totals[stage]),
            "percent_of_target": round(percent_of_target(float(totals[stage]), overall[stage]), 2),
        }
        for stage in FUNNEL_STAGES
    }
    allocated = allocated_budget(inputs_by_channel)
    summary = {
        "project_id": getattr(targets, "project_id", None),
        "year": getattr(targets, "year", None),
        "month": getattr(targets, "month", None),
        "totals": project_totals,
        "allocated_budget": round(allocated, 2),
        "remaining_budget": round(record_number(targets, "total_budget") - allocated, 2),
        "observed_rates": {key: round(value, 2) for key, value in stage_conversion_rates(summed).items()},
        "channels_behind": sorted(
            table.loc[(table["stage"] == "deals") & (table["gap"] > 0), "channel"].tolist(),
            key=CHANNELS.index,
        ),
    }
    logger.debug(f"Reconciled {len(table)} channel/stage rows for project {summary['project_id']}")
    return ReconciliationResult(table=table, summary=summary)


def reconcile_project(
    targets: Optional[ProjectTargets],
    inputs_by_channel: InputsByChannel,
    actuals: Optional[ProjectActuals],
) -> dict[str, Any]:
    """Project-level monthly snapshot: overall targets against sales ops actuals."""
    overall = compute_overall_funnel_targets(targets, inputs_by_channel).to_dict()
    overall["sqft"] = int(max(0.0, record_number(targets, "sales_target_sqft")))
    breakdown = close_breakdown(actuals)

    observed = {
        "leads": record_number(actuals, "leads"),
        "qualified": record_number(actuals, "qualified_leads"),
        "meetings_scheduled": record_number(actuals, "meetings_scheduled"),
        "meetings_done": record_number(actuals, "meetings_done"),
        "deals": breakdown["total"]["deals"],
        "sqft": breakdown["total"]["sqft"],
    }
    spend = actuals.total_spend if actuals is not None else 0.0
    allocated = allocated_budget(inputs_by_channel)

    return {
        "stages": {
            stage: {
                "target": overall[stage],
                "actual": observed[stage],
                "percent_of_target": round(percent_of_target(observed[stage], overall[stage]), 2),
            }
            for stage in FUNNEL_STAGES
        },
        "close_breakdown": breakdown,
        "observed_rates": {key: round(value, 2) for key, value in stage_conversion_rates(actuals).items()},
        "budget": {
            "total_budget": round(record_number(targets, "total_budget"), 2),
            "allocated": round(allocated, 2),
            "spent": round(spend, 2),
            "unspent_allocation": round(allocated - spend, 2),
            "remaining": round(record_number(targets, "total_budget") - spend, 2),
        },
        "efficiency": efficiency(spend, observed["qualified"], observed["sqft"]),
    }
