from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Mapping, Optional

from funnel_planner.io_utils import to_float, to_int, to_number
from funnel_planner.schema import CHANNELS


def normalize_channel(value: Any) -> str:
    channel = str(value or "").strip().lower()
    if channel not in CHANNELS:
        raise ValueError(f"Unknown channel '{value}'. Expected one of {CHANNELS}.")
    return channel


@dataclass(frozen=True)
class ProjectTargets:
    """Monthly sales target for one project as configured by the CMO."""

    project_id: Optional[str] = None
    year: Optional[int] = None
    month: Optional[int] = None
    sales_target_sqft: float = 0.0
    avg_sqft_per_deal: float = 0.0
    total_budget: float = 0.0
    # None means "not configured"; the funnel rates fall back to their defaults.
    qualified_to_meeting_done_percent: Optional[float] = None
    meeting_done_to_close_percent: Optional[float] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ProjectTargets":
        return cls(
            project_id=_optional_str(data.get("project_id")),
            year=to_int(data.get("year")),
            month=to_int(data.get("month")),
            sales_target_sqft=to_number(data.get("sales_target_sqft")),
            avg_sqft_per_deal=to_number(data.get("avg_sqft_per_deal")),
            total_budget=to_number(data.get("total_budget")),
            qualified_to_meeting_done_percent=to_float(data.get("qualified_to_meeting_done_percent")),
            meeting_done_to_close_percent=to_float(data.get("meeting_done_to_close_percent")),
        )


@dataclass(frozen=True)
class ChannelInputs:
    """A plan version's inputs for a single channel."""

    channel: str
    expected_leads: float = 0.0
    qualification_percent: float = 0.0
    target_contribution_percent: float = 0.0
    allocated_budget: float = 0.0
    plan_version_id: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], channel: Optional[str] = None) -> "ChannelInputs":
        return cls(
            channel=normalize_channel(channel if channel is not None else data.get("channel")),
            expected_leads=to_number(data.get("expected_leads")),
            qualification_percent=to_number(data.get("qualification_percent")),
            target_contribution_percent=to_number(data.get("target_contribution_percent")),
            allocated_budget=to_number(data.get("allocated_budget")),
            plan_version_id=_optional_str(data.get("plan_version_id")),
        )


@dataclass(frozen=True)
class ProjectActuals:
    """Sales ops monthly actuals for a project, including attribution adjustments."""

    project_id: Optional[str] = None
    year: Optional[int] = None
    month: Optional[int] = None
    leads: float = 0.0
    qualified_leads: float = 0.0
    meetings_scheduled: float = 0.0
    meetings_done: float = 0.0
    deals_won: float = 0.0
    sqft_won: float = 0.0
    deals_won_transfer_in: float = 0.0
    sqft_won_transfer_in: float = 0.0
    deals_won_transfer_out: float = 0.0
    sqft_won_transfer_out: float = 0.0
    deals_won_misc: float = 0.0
    sqft_won_misc: float = 0.0
    spend_digital: float = 0.0
    spend_inbound: float = 0.0
    spend_activations: float = 0.0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ProjectActuals":
        numeric = {
            name: to_number(data.get(name))
            for name in cls.__dataclass_fields__
            if name not in {"project_id", "year", "month"}
        }
        return cls(
            project_id=_optional_str(data.get("project_id")),
            year=to_int(data.get("year")),
            month=to_int(data.get("month")),
            **numeric,
        )

    @property
    def total_spend(self) -> float:
        return self.spend_digital + self.spend_inbound + self.spend_activations


@dataclass(frozen=True)
class ChannelActuals:
    channel: str
    leads: float = 0.0
    not_contacted: float = 0.0
    qualified_leads: float = 0.0
    meetings_scheduled: float = 0.0
    meetings_done: float = 0.0
    deals_won: float = 0.0
    sqft_won: float = 0.0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], channel: Optional[str] = None) -> "ChannelActuals":
        return cls(
            channel=normalize_channel(channel if channel is not None else data.get("channel")),
            leads=to_number(data.get("leads")),
            not_contacted=to_number(data.get("not_contacted")),
            qualified_leads=to_number(data.get("qualified_leads")),
            meetings_scheduled=to_number(data.get("meetings_scheduled")),
            meetings_done=to_number(data.get("meetings_done")),
            deals_won=to_number(data.get("deals_won")),
            sqft_won=to_number(data.get("sqft_won")),
        )


@dataclass(frozen=True)
class FunnelRates:
    qualified_to_meeting_done_percent: float
    meeting_done_to_close_percent: float


@dataclass(frozen=True)
class ChannelFunnelComputed:
    target_sqft: int = 0
    deals_required: int = 0
    meetings_done_required: int = 0
    meetings_scheduled_required: int = 0
    qualified_required: int = 0
    leads_required: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class OverallFunnelTargets:
    leads: int = 0
    qualified: int = 0
    meetings_scheduled: int = 0
    meetings_done: int = 0
    deals: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class ChannelDistributions:
    budget_by_channel: dict[str, float] = field(default_factory=dict)
    leads_by_channel: dict[str, float] = field(default_factory=dict)
    target_sqft_by_channel: dict[str, int] = field(default_factory=dict)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
