from __future__ import annotations

import sys

CHANNELS = [
    "digital",
    "inbound",
    "activations",
]

FUNNEL_STAGES = [
    "leads",
    "qualified",
    "meetings_scheduled",
    "meetings_done",
    "deals",
    "sqft",
]

DEFAULT_QUALIFIED_TO_MEETING_DONE_PERCENT = 10.0
DEFAULT_MEETING_DONE_TO_CLOSE_PERCENT = 40.0

# Scheduled meetings are planned at 1.5x the meetings expected to be held.
MEETINGS_SCHEDULED_MULTIPLIER = 1.5

RATE_EPSILON = 1e-9

# Ceiling for any required count; an unreachable target reports this instead of overflowing.
MAX_REQUIRED_COUNT = sys.maxsize

CHANNEL_ACTUALS_COLUMNS = [
    "project_id",
    "year",
    "month",
    "channel",
    "leads",
    "not_contacted",
    "qualified_leads",
    "meetings_scheduled",
    "meetings_done",
    "deals_won",
    "sqft_won",
]

CHANNEL_FUNNEL_COLUMNS = [
    "project_id",
    "channel",
    "target_contribution_percent",
    "qualification_percent",
    "allocated_budget",
    "target_sqft",
    "deals_required",
    "meetings_done_required",
    "meetings_scheduled_required",
    "qualified_required",
    "leads_required",
]

RECONCILIATION_COLUMNS = [
    "channel",
    "stage",
    "target",
    "actual",
    "percent_of_target",
    "gap",
]
