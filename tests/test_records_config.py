"""
Tests for record coercion from stored rows and for project plan loading.
"""

import math

import pandas as pd
import pytest
import yaml

from funnel_planner.config import load_channel_actuals, load_project_plan, parse_project_plan
from funnel_planner.funnel import compute_channel_funnel_from_inputs, compute_overall_funnel_targets
from funnel_planner.io_utils import to_float, write_yaml
from funnel_planner.records import ChannelActuals, ChannelInputs, ProjectActuals, ProjectTargets


@pytest.fixture
def plan_payload():
    return {
        "project_id": "tower_a",
        "year": 2025,
        "month": 12,
        "targets": {
            "sales_target_sqft": 15000,
            "avg_sqft_per_deal": 1000,
            "total_budget": 2500000,
            "qualified_to_meeting_done_percent": 10,
            "meeting_done_to_close_percent": 40,
        },
        "channels": {
            "Digital": {
                "expected_leads": 1000,
                "qualification_percent": 20,
                "target_contribution_percent": 50,
                "allocated_budget": 1500000,
            },
        },
        "data": {"actuals_csv": "tower_a_actuals.csv"},
    }


class TestToFloat:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            (15000, 15000.0),
            ("15,000", 15000.0),
            ("$1,500,000", 1500000.0),
            ("40%", 40.0),
            ("(1,200)", -1200.0),
            (" 925 ", 925.0),
            ("1e5", 100000.0),
            ("1.5E4", 15000.0),
        ],
    )
    def test_numbers(self, raw, expected):
        assert to_float(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "n/a", "-", float("nan"), True, "1.2.3", "1-2"])
    def test_blanks(self, raw):
        assert to_float(raw) is None

    def test_malformed_cells_read_as_missing(self):
        targets = ProjectTargets.from_mapping({"sales_target_sqft": "1.2.3", "meeting_done_to_close_percent": "1-2"})
        assert targets.sales_target_sqft == 0.0
        assert targets.meeting_done_to_close_percent is None

    def test_exponent_in_yaml_config(self):
        plan = parse_project_plan(
            yaml.safe_load("project_id: tower_a\ntargets:\n  sales_target_sqft: 1e5\n  avg_sqft_per_deal: 925\n")
        )
        assert plan.targets.sales_target_sqft == 100000.0


class TestRecords:
    def test_targets_from_stored_row(self):
        targets = ProjectTargets.from_mapping(
            {
                "project_id": "tower_a",
                "year": "2025",
                "month": 12,
                "sales_target_sqft": "15,000",
                "avg_sqft_per_deal": "925",
                "total_budget": None,
                "qualified_to_meeting_done_percent": "",
                "meeting_done_to_close_percent": "40%",
            }
        )
        assert targets.year == 2025
        assert targets.sales_target_sqft == 15000.0
        assert targets.avg_sqft_per_deal == 925.0
        assert targets.total_budget == 0.0
        assert targets.qualified_to_meeting_done_percent is None
        assert targets.meeting_done_to_close_percent == 40.0

    def test_channel_is_normalized(self):
        inputs = ChannelInputs.from_mapping({"channel": " Digital ", "qualification_percent": "20"})
        assert inputs.channel == "digital"
        assert inputs.qualification_percent == 20.0
        assert inputs.expected_leads == 0.0

    def test_unknown_channel_rejected(self):
        with pytest.raises(ValueError, match="Unknown channel"):
            ChannelInputs.from_mapping({"channel": "print"})
        with pytest.raises(ValueError):
            ChannelActuals.from_mapping({"channel": None})

    def test_project_actuals_total_spend(self):
        actuals = ProjectActuals.from_mapping(
            {"spend_digital": "100", "spend_inbound": 50, "spend_activations": None, "deals_won": 3}
        )
        assert actuals.total_spend == 150.0
        assert actuals.deals_won == 3.0
        assert actuals.sqft_won_transfer_in == 0.0

    def test_records_are_immutable(self):
        targets = ProjectTargets(sales_target_sqft=100)
        with pytest.raises(AttributeError):
            targets.sales_target_sqft = 200


class TestProjectPlan:
    def test_parse(self, plan_payload, tmp_path):
        plan = parse_project_plan(plan_payload, base_dir=tmp_path)
        assert plan.project_id == "tower_a"
        assert plan.targets.project_id == "tower_a"
        assert plan.targets.month == 12
        assert set(plan.inputs_by_channel) == {"digital", "inbound", "activations"}
        assert plan.inputs_by_channel["inbound"] is None
        assert plan.inputs_by_channel["digital"].target_contribution_percent == 50
        assert plan.actuals_csv == tmp_path / "tower_a_actuals.csv"

        computed = compute_channel_funnel_from_inputs(plan.targets, plan.inputs_by_channel["digital"])
        assert computed.leads_required == 1000

    def test_missing_targets_degrade_to_zero(self, plan_payload):
        plan_payload.pop("targets")
        plan = parse_project_plan(plan_payload)
        assert plan.targets is None
        assert compute_overall_funnel_targets(plan.targets, plan.inputs_by_channel).deals == 0

    def test_missing_project_id(self, plan_payload):
        plan_payload["project_id"] = ""
        with pytest.raises(ValueError, match="project_id"):
            parse_project_plan(plan_payload)

    def test_invalid_month(self, plan_payload):
        plan_payload["month"] = 13
        with pytest.raises(ValueError, match="month"):
            parse_project_plan(plan_payload)

    def test_unknown_channel(self, plan_payload):
        plan_payload["channels"]["billboards"] = {"target_contribution_percent": 10}
        with pytest.raises(ValueError, match="billboards"):
            parse_project_plan(plan_payload)

    def test_load_from_yaml(self, plan_payload, tmp_path):
        path = tmp_path / "tower_a.yaml"
        write_yaml(path, plan_payload)
        plan = load_project_plan(path)
        assert plan.targets.sales_target_sqft == 15000
        assert plan.actuals_csv.name == "tower_a_actuals.csv"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_project_plan(tmp_path / "nope.yaml")


class TestChannelActualsCsv:
    def test_filters_month(self, tmp_path):
        path = tmp_path / "actuals.csv"
        pd.DataFrame(
            [
                {"year": 2025, "month": 11, "channel": "digital", "leads": 10, "deals_won": 1},
                {"year": 2025, "month": 12, "channel": "digital", "leads": 900, "deals_won": 6},
                {"year": 2025, "month": 12, "channel": "Inbound", "leads": 400, "deals_won": None},
            ]
        ).to_csv(path, index=False)

        actuals = load_channel_actuals(path, year=2025, month=12)
        assert set(actuals) == {"digital", "inbound"}
        assert actuals["digital"].leads == 900
        assert actuals["inbound"].deals_won == 0.0
        assert not math.isnan(actuals["inbound"].sqft_won)

    def test_requires_channel_column(self, tmp_path):
        path = tmp_path / "actuals.csv"
        pd.DataFrame([{"leads": 1}]).to_csv(path, index=False)
        with pytest.raises(ValueError, match="channel"):
            load_channel_actuals(path)
