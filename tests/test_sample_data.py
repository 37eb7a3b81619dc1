"""
The sample generator must be reproducible and produce a plan the engine and
the reconciliation can consume end to end.
"""

import pandas as pd

from funnel_planner.config import load_channel_actuals, load_project_plan
from funnel_planner.funnel import total_contribution_percent
from funnel_planner.reconcile import reconcile_channels
from funnel_planner.schema import CHANNEL_ACTUALS_COLUMNS, CHANNELS
from funnel_planner.sample_data import generate_sample_project


def _generate(tmp_path, name, seed=42):
    return generate_sample_project(
        project_id="demo",
        output_dir=tmp_path / name / "data",
        configs_dir=tmp_path / name / "configs",
        seed=seed,
    )


class TestSampleProject:
    def test_same_seed_same_files(self, tmp_path):
        first = _generate(tmp_path, "a")
        second = _generate(tmp_path, "b")
        with open(first["config_yaml"], encoding="utf-8") as a, open(second["config_yaml"], encoding="utf-8") as b:
            assert a.read().replace("/a/", "/b/") == b.read()
        pd.testing.assert_frame_equal(pd.read_csv(first["actuals_csv"]), pd.read_csv(second["actuals_csv"]))

    def test_plan_is_consistent(self, tmp_path):
        paths = _generate(tmp_path, "plan", seed=7)
        plan = load_project_plan(tmp_path / "plan" / "configs" / "demo.yaml")
        assert paths["config_yaml"].endswith("demo.yaml")
        assert abs(total_contribution_percent(plan.inputs_by_channel) - 100.0) < 1e-6
        assert all(plan.inputs_by_channel[channel] is not None for channel in CHANNELS)
        assert all(plan.inputs_by_channel[channel].expected_leads > 0 for channel in CHANNELS)

    def test_actuals_follow_funnel_order(self, tmp_path):
        paths = _generate(tmp_path, "funnel", seed=3)
        frame = pd.read_csv(paths["actuals_csv"])
        assert list(frame.columns) == CHANNEL_ACTUALS_COLUMNS
        assert sorted(frame["channel"]) == sorted(CHANNELS)
        assert (frame["qualified_leads"] <= frame["leads"]).all()
        assert (frame["meetings_done"] <= frame["meetings_scheduled"]).all()
        assert (frame["deals_won"] <= frame["meetings_done"]).all()

    def test_round_trip_through_reconciliation(self, tmp_path):
        _generate(tmp_path, "recon")
        plan = load_project_plan(tmp_path / "recon" / "configs" / "demo.yaml")
        actuals = load_channel_actuals(plan.actuals_csv, year=plan.year, month=plan.month)
        result = reconcile_channels(plan.targets, plan.inputs_by_channel, actuals)
        assert len(result.table) == 18
        assert result.summary["totals"]["leads"]["actual"] > 0
