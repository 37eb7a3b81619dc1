"""
Shared fixtures for the funnel planner tests.

Two target sets are used throughout:
- ``base_targets``: the CMO defaults (10% qualified -> meeting, 40% close).
- ``exact_targets``: rates that are exact binary fractions (25%, 50%) so
  expected stage counts can be written down without float noise.
"""

import logging

import pytest

from funnel_planner.records import ChannelInputs, ProjectActuals, ProjectTargets

logging.basicConfig(level=logging.WARNING)


@pytest.fixture
def base_targets():
    return ProjectTargets(
        project_id="tower_a",
        year=2025,
        month=12,
        sales_target_sqft=15000,
        avg_sqft_per_deal=1000,
        total_budget=2500000,
        qualified_to_meeting_done_percent=10,
        meeting_done_to_close_percent=40,
    )


@pytest.fixture
def digital_inputs():
    return ChannelInputs(
        channel="digital",
        expected_leads=1000,
        qualification_percent=20,
        target_contribution_percent=50,
        allocated_budget=1500000,
        plan_version_id="v1",
    )


@pytest.fixture
def base_inputs_by_channel(digital_inputs):
    return {
        "digital": digital_inputs,
        "inbound": ChannelInputs(
            channel="inbound",
            expected_leads=400,
            qualification_percent=25,
            target_contribution_percent=30,
            allocated_budget=500000,
        ),
        "activations": ChannelInputs(
            channel="activations",
            expected_leads=300,
            qualification_percent=20,
            target_contribution_percent=20,
            allocated_budget=400000,
        ),
    }


@pytest.fixture
def exact_targets():
    return ProjectTargets(
        project_id="tower_b",
        year=2026,
        month=3,
        sales_target_sqft=10000,
        avg_sqft_per_deal=1000,
        total_budget=1000000,
        qualified_to_meeting_done_percent=25,
        meeting_done_to_close_percent=50,
    )


@pytest.fixture
def exact_inputs_by_channel():
    return {
        "digital": ChannelInputs(
            channel="digital",
            expected_leads=64,
            qualification_percent=50,
            target_contribution_percent=40,
            allocated_budget=500000,
        ),
        "inbound": ChannelInputs(
            channel="inbound",
            expected_leads=48,
            qualification_percent=50,
            target_contribution_percent=30,
            allocated_budget=200000,
        ),
        "activations": ChannelInputs(
            channel="activations",
            expected_leads=96,
            qualification_percent=25,
            target_contribution_percent=30,
            allocated_budget=200000,
        ),
    }


@pytest.fixture
def project_actuals():
    return ProjectActuals(
        project_id="tower_b",
        year=2026,
        month=3,
        leads=1000,
        qualified_leads=200,
        meetings_scheduled=30,
        meetings_done=20,
        deals_won=8,
        sqft_won=6500,
        deals_won_transfer_in=1,
        sqft_won_transfer_in=900,
        deals_won_transfer_out=1,
        sqft_won_transfer_out=800,
        deals_won_misc=2,
        sqft_won_misc=1500,
        spend_digital=400000,
        spend_inbound=150000,
        spend_activations=150000,
    )
