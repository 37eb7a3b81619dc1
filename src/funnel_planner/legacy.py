"""The fixed "meetings = 2x deals" planning formula.

Superseded by the rate-based funnel in ``funnel_planner.funnel``. Kept so old
monthly reports can be reproduced and compared against the current numbers.
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass
from typing import Optional

from funnel_planner.funnel import record_number, round_half_up
from funnel_planner.records import ChannelInputs, ProjectTargets
from funnel_planner.schema import MEETINGS_SCHEDULED_MULTIPLIER

LEGACY_MEETINGS_PER_DEAL = 2


@dataclass(frozen=True)
class LegacyChannelTargets:
    deals_required: int
    channel_deals_required: int
    target_leads: int
    target_qualified_leads: int
    meetings_done_required: int
    meetings_scheduled_required: int


def compute_targets_from(
    targets: Optional[ProjectTargets],
    inputs: Optional[ChannelInputs],
) -> LegacyChannelTargets:
    warnings.warn(
        "compute_targets_from uses the fixed 2x meetings rule; "
        "use funnel_planner.funnel.compute_channel_funnel_from_inputs instead.",
        DeprecationWarning,
        stacklevel=2,
    )
    sales_target_sqft = record_number(targets, "sales_target_sqft")
    avg_sqft = record_number(targets, "avg_sqft_per_deal")
    deals_required = max(0, int(math.ceil(sales_target_sqft / max(avg_sqft, 1.0))))

    pct = record_number(inputs, "target_contribution_percent")
    channel_deals_required = max(0, int(math.ceil(deals_required * (pct / 100.0))))
    meetings_done_required = max(0, channel_deals_required * LEGACY_MEETINGS_PER_DEAL)
    meetings_scheduled_required = max(0, int(math.ceil(meetings_done_required * MEETINGS_SCHEDULED_MULTIPLIER)))

    target_leads = max(0, round_half_up(record_number(inputs, "expected_leads")))
    qualification_pct = record_number(inputs, "qualification_percent")
    target_qualified_leads = max(0, round_half_up(target_leads * (qualification_pct / 100.0)))

    return LegacyChannelTargets(
        deals_required=deals_required,
        channel_deals_required=channel_deals_required,
        target_leads=target_leads,
        target_qualified_leads=target_qualified_leads,
        meetings_done_required=meetings_done_required,
        meetings_scheduled_required=meetings_scheduled_required,
    )
