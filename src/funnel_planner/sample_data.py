from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np

from funnel_planner.config import channel_actuals_frame, parse_project_plan
from funnel_planner.funnel import compute_channel_funnel_from_inputs
from funnel_planner.io_utils import ensure_dir, write_yaml
from funnel_planner.records import ChannelActuals
from funnel_planner.schema import CHANNELS

# Relative weight of each channel when splitting the sales target.
CHANNEL_WEIGHTS = {
    "digital": 5.0,
    "inbound": 3.0,
    "activations": 2.0,
}


def _contribution_split(rng: np.random.Generator) -> dict[str, float]:
    raw = rng.dirichlet([CHANNEL_WEIGHTS[channel] for channel in CHANNELS]) * 100.0
    split = {channel: round(float(value), 1) for channel, value in zip(CHANNELS, raw)}
    # Absorb rounding drift so the plan sums to exactly 100%.
    split[CHANNELS[0]] = round(100.0 - sum(split[channel] for channel in CHANNELS[1:]), 1)
    return split


def _sample_actuals(
    rng: np.random.Generator,
    required: dict[str, int],
    attainment: float,
    noise: float,
    avg_sqft_per_deal: float,
) -> dict[str, int]:
    stages = ["leads", "qualified", "meetings_scheduled", "meetings_done", "deals"]
    sampled = np.array([required[stage] for stage in stages], dtype=float)
    sampled = sampled * attainment * rng.lognormal(mean=0.0, sigma=noise, size=len(stages))
    # A later funnel stage can never exceed the one before it.
    sampled = np.minimum.accumulate(np.round(sampled)).astype(int)
    counts = dict(zip(stages, sampled.tolist()))
    counts["sqft"] = int(round(counts["deals"] * avg_sqft_per_deal * float(rng.lognormal(0.0, noise))))
    counts["not_contacted"] = int(round(counts["leads"] * float(rng.uniform(0.05, 0.2))))
    return counts


def generate_sample_project(
    project_id: str,
    output_dir: Path,
    configs_dir: Path,
    year: int = 2025,
    month: int = 12,
    sales_target_sqft: float = 15000.0,
    avg_sqft_per_deal: float = 925.0,
    total_budget: float = 2500000.0,
    attainment: float = 0.85,
    noise: float = 0.12,
    seed: int = 42,
) -> dict[str, Any]:
    rng = np.random.default_rng(seed)
    ensure_dir(output_dir)
    ensure_dir(configs_dir)

    contribution = _contribution_split(rng)
    targets_payload = {
        "sales_target_sqft": float(sales_target_sqft),
        "avg_sqft_per_deal": float(avg_sqft_per_deal),
        "total_budget": float(total_budget),
        "qualified_to_meeting_done_percent": 10.0,
        "meeting_done_to_close_percent": 40.0,
    }

    channels_payload: dict[str, dict[str, float]] = {}
    for channel in CHANNELS:
        channels_payload[channel] = {
            "expected_leads": 0,
            "qualification_percent": round(float(rng.uniform(15.0, 35.0)), 1),
            "target_contribution_percent": contribution[channel],
            "allocated_budget": round(total_budget * 0.9 * contribution[channel] / 100.0, 2),
        }

    actuals_out = output_dir / f"{project_id}_actuals.csv"
    config_payload = {
        "project_id": project_id,
        "year": year,
        "month": month,
        "description": f"Synthetic demo plan generated with seed {seed}.",
        "targets": targets_payload,
        "channels": channels_payload,
        "data": {"actuals_csv": str(actuals_out.as_posix())},
    }
    plan = parse_project_plan(config_payload)

    actuals_by_channel: dict[str, ChannelActuals] = {}
    for channel in CHANNELS:
        computed = compute_channel_funnel_from_inputs(targets=plan.targets, inputs=plan.inputs_by_channel[channel])
        # Expected leads shown on the plan screen follow the computed requirement.
        channels_payload[channel]["expected_leads"] = computed.leads_required
        counts = _sample_actuals(
            rng,
            required={
                "leads": computed.leads_required,
                "qualified": computed.qualified_required,
                "meetings_scheduled": computed.meetings_scheduled_required,
                "meetings_done": computed.meetings_done_required,
                "deals": computed.deals_required,
            },
            attainment=attainment,
            noise=noise,
            avg_sqft_per_deal=avg_sqft_per_deal,
        )
        actuals_by_channel[channel] = ChannelActuals(
            channel=channel,
            leads=counts["leads"],
            not_contacted=counts["not_contacted"],
            qualified_leads=counts["qualified"],
            meetings_scheduled=counts["meetings_scheduled"],
            meetings_done=counts["meetings_done"],
            deals_won=counts["deals"],
            sqft_won=counts["sqft"],
        )

    actuals_frame = channel_actuals_frame(actuals_by_channel, project_id=project_id, year=year, month=month)
    actuals_frame.to_csv(actuals_out, index=False)

    config_out = configs_dir / f"{project_id}.yaml"
    write_yaml(config_out, config_payload)

    return {
        "config_yaml": str(config_out),
        "actuals_csv": str(actuals_out),
    }
