"""Funnel target engine.

Turns a project's monthly sqft sales target into the required volume at each
funnel stage (leads, qualified leads, meetings scheduled, meetings done,
deals), per channel and for the whole project. Every function is pure and
total: missing records degrade to zeros, percentages are clamped, and
divisions by a zero rate are floored at ``RATE_EPSILON`` instead of raising,
with counts capped at ``MAX_REQUIRED_COUNT``.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional

from funnel_planner.io_utils import is_finite_number
from funnel_planner.records import (
    ChannelDistributions,
    ChannelFunnelComputed,
    ChannelInputs,
    FunnelRates,
    OverallFunnelTargets,
    ProjectTargets,
)
from funnel_planner.schema import (
    CHANNELS,
    DEFAULT_MEETING_DONE_TO_CLOSE_PERCENT,
    DEFAULT_QUALIFIED_TO_MEETING_DONE_PERCENT,
    MAX_REQUIRED_COUNT,
    MEETINGS_SCHEDULED_MULTIPLIER,
    RATE_EPSILON,
)

logger = logging.getLogger(__name__)

InputsByChannel = Mapping[str, Optional[ChannelInputs]]


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def ceil_div(numerator: float, denominator: float) -> int:
    """Divide and round up, flooring the denominator at ``RATE_EPSILON``.

    Quotients too large for a count are capped at ``MAX_REQUIRED_COUNT``.
    """
    quotient = numerator / max(denominator, RATE_EPSILON)
    if not math.isfinite(quotient) or quotient >= MAX_REQUIRED_COUNT:
        return MAX_REQUIRED_COUNT
    return int(math.ceil(quotient))


def _number(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if is_finite_number(number) else default


def record_number(record: Any, name: str, default: float = 0.0) -> float:
    if record is None:
        return default
    return _number(getattr(record, name, None), default)


def _required(numerator: float, rate: float, stage: str) -> int:
    if numerator <= 0:
        return 0
    if rate <= 0:
        logger.warning(f"{stage}: rate is zero, target unreachable at this rate ({numerator:g} required upstream)")
    return ceil_div(numerator, rate)


def get_funnel_rates(targets: Optional[ProjectTargets]) -> FunnelRates:
    return FunnelRates(
        qualified_to_meeting_done_percent=clamp(
            record_number(targets, "qualified_to_meeting_done_percent", DEFAULT_QUALIFIED_TO_MEETING_DONE_PERCENT),
            0.0,
            100.0,
        ),
        meeting_done_to_close_percent=clamp(
            record_number(targets, "meeting_done_to_close_percent", DEFAULT_MEETING_DONE_TO_CLOSE_PERCENT),
            0.0,
            100.0,
        ),
    )


def compute_channel_target_sqft(total_target_sqft: float, contribution_percent: float) -> int:
    total = max(0.0, _number(total_target_sqft))
    pct = clamp(_number(contribution_percent), 0.0, 100.0)
    return max(0, round_half_up(total * (pct / 100.0)))


def compute_channel_target_sqft_uncapped(total_target_sqft: float, contribution_percent: float) -> int:
    """Like ``compute_channel_target_sqft`` but lets contributions above 100% through.

    Used while a plan is being edited so an over-allocated channel shows a
    proportionally larger sqft figure; saving must still validate the total.
    """
    total = max(0.0, _number(total_target_sqft))
    pct = max(0.0, _number(contribution_percent))
    return max(0, round_half_up(total * (pct / 100.0)))


def compute_contribution_percent_from_sqft(total_target_sqft: float, target_sqft: float) -> float:
    total = max(0.0, _number(total_target_sqft))
    if total <= 0:
        return 0.0
    return clamp((max(0.0, _number(target_sqft)) / total) * 100.0, 0.0, 100.0)


def compute_contribution_percent_from_sqft_uncapped(total_target_sqft: float, target_sqft: float) -> float:
    total = max(0.0, _number(total_target_sqft))
    if total <= 0:
        return 0.0
    return (max(0.0, _number(target_sqft)) / total) * 100.0


def compute_channel_funnel_from_target_sqft(
    targets: Optional[ProjectTargets],
    target_sqft: float,
    qualification_percent: float,
) -> ChannelFunnelComputed:
    sqft = max(0.0, _number(target_sqft))
    avg_deal_sqft = max(0.0, record_number(targets, "avg_sqft_per_deal"))
    deals_required = ceil_div(sqft, max(avg_deal_sqft, 1.0)) if sqft > 0 else 0

    rates = get_funnel_rates(targets)
    close_rate = rates.meeting_done_to_close_percent / 100.0
    meeting_rate = rates.qualified_to_meeting_done_percent / 100.0
    qualification_rate = clamp(_number(qualification_percent), 0.0, 100.0) / 100.0

    meetings_done_required = _required(deals_required, close_rate, "meetings done")
    meetings_scheduled_required = int(math.ceil(meetings_done_required * MEETINGS_SCHEDULED_MULTIPLIER))
    qualified_required = _required(meetings_done_required, meeting_rate, "qualified leads")
    leads_required = _required(qualified_required, qualification_rate, "leads")

    return ChannelFunnelComputed(
        target_sqft=round_half_up(sqft),
        deals_required=deals_required,
        meetings_done_required=meetings_done_required,
        meetings_scheduled_required=meetings_scheduled_required,
        qualified_required=qualified_required,
        leads_required=leads_required,
    )


def compute_channel_funnel_from_inputs(
    targets: Optional[ProjectTargets],
    inputs: Optional[ChannelInputs],
) -> ChannelFunnelComputed:
    target_sqft = compute_channel_target_sqft(
        total_target_sqft=max(0.0, record_number(targets, "sales_target_sqft")),
        contribution_percent=record_number(inputs, "target_contribution_percent"),
    )
    return compute_channel_funnel_from_target_sqft(
        targets=targets,
        target_sqft=target_sqft,
        qualification_percent=record_number(inputs, "qualification_percent"),
    )


def compute_overall_funnel_targets(
    targets: Optional[ProjectTargets],
    inputs_by_channel: InputsByChannel,
) -> OverallFunnelTargets:
    # Deals and meetings follow the project's total sqft target, not the channel split.
    sales_target_sqft = max(0.0, record_number(targets, "sales_target_sqft"))
    avg_deal_sqft = max(0.0, record_number(targets, "avg_sqft_per_deal"))
    deals = ceil_div(sales_target_sqft, max(avg_deal_sqft, 1.0)) if sales_target_sqft > 0 else 0

    rates = get_funnel_rates(targets)
    meetings_done = _required(deals, rates.meeting_done_to_close_percent / 100.0, "meetings done")
    meetings_scheduled = int(math.ceil(meetings_done * MEETINGS_SCHEDULED_MULTIPLIER))

    leads = 0
    qualified = 0
    for channel in CHANNELS:
        computed = compute_channel_funnel_from_inputs(targets=targets, inputs=inputs_by_channel.get(channel))
        leads += computed.leads_required
        qualified += computed.qualified_required

    logger.debug(
        f"Overall funnel: deals={deals} meetings_done={meetings_done} qualified={qualified} leads={leads}"
    )
    return OverallFunnelTargets(
        leads=max(0, leads),
        qualified=max(0, qualified),
        meetings_scheduled=max(0, meetings_scheduled),
        meetings_done=max(0, meetings_done),
        deals=max(0, deals),
    )


def compute_channel_distributions(
    targets: Optional[ProjectTargets],
    inputs_by_channel: InputsByChannel,
) -> ChannelDistributions:
    sales_target_sqft = record_number(targets, "sales_target_sqft")
    budget_by_channel: dict[str, float] = {}
    leads_by_channel: dict[str, float] = {}
    target_sqft_by_channel: dict[str, int] = {}
    for channel in CHANNELS:
        inputs = inputs_by_channel.get(channel)
        budget_by_channel[channel] = max(0.0, record_number(inputs, "allocated_budget"))
        leads_by_channel[channel] = max(0.0, record_number(inputs, "expected_leads"))
        target_sqft_by_channel[channel] = compute_channel_target_sqft(
            total_target_sqft=sales_target_sqft,
            contribution_percent=record_number(inputs, "target_contribution_percent"),
        )
    return ChannelDistributions(
        budget_by_channel=budget_by_channel,
        leads_by_channel=leads_by_channel,
        target_sqft_by_channel=target_sqft_by_channel,
    )


def total_contribution_percent(inputs_by_channel: InputsByChannel) -> float:
    """Sum of channel contribution percents; above 100 means the plan over-allocates."""
    return sum(max(0.0, record_number(inputs_by_channel.get(channel), "target_contribution_percent")) for channel in CHANNELS)
