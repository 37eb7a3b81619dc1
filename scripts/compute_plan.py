from __future__ import annotations

import argparse
from datetime import datetime, timezone
from pathlib import Path
import sys

import pandas as pd

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from funnel_planner.config import load_project_plan
from funnel_planner.funnel import (
    compute_channel_distributions,
    compute_channel_funnel_from_inputs,
    compute_overall_funnel_targets,
    get_funnel_rates,
    total_contribution_percent,
)
from funnel_planner.io_utils import write_json
from funnel_planner.logging_config import setup_logging
from funnel_planner.reconcile import remaining_budget
from funnel_planner.schema import CHANNEL_FUNNEL_COLUMNS, CHANNELS


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compute per-channel funnel targets for a project plan.")
    parser.add_argument("--project", required=True, help="Project id with matching config in configs/projects.")
    parser.add_argument("--configs-dir", default="configs/projects")
    parser.add_argument(
        "--output-dir",
        default="data/outputs",
        help="Directory for computed plan outputs.",
    )
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    setup_logging(level=args.log_level)
    plan = load_project_plan(Path(args.configs_dir).resolve() / f"{args.project}.yaml")

    rows = []
    for channel in CHANNELS:
        inputs = plan.inputs_by_channel.get(channel)
        computed = compute_channel_funnel_from_inputs(targets=plan.targets, inputs=inputs)
        rows.append(
            {
                "project_id": plan.project_id,
                "channel": channel,
                "target_contribution_percent": inputs.target_contribution_percent if inputs else 0.0,
                "qualification_percent": inputs.qualification_percent if inputs else 0.0,
                "allocated_budget": inputs.allocated_budget if inputs else 0.0,
                **computed.to_dict(),
            }
        )
    funnel_df = pd.DataFrame(rows, columns=CHANNEL_FUNNEL_COLUMNS)

    overall = compute_overall_funnel_targets(plan.targets, plan.inputs_by_channel)
    distributions = compute_channel_distributions(plan.targets, plan.inputs_by_channel)
    rates = get_funnel_rates(plan.targets)
    contribution_total = total_contribution_percent(plan.inputs_by_channel)

    summary = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "project_id": plan.project_id,
        "year": plan.year,
        "month": plan.month,
        "funnel_rates": {
            "qualified_to_meeting_done_percent": rates.qualified_to_meeting_done_percent,
            "meeting_done_to_close_percent": rates.meeting_done_to_close_percent,
        },
        "overall": overall.to_dict(),
        "target_sqft_by_channel": distributions.target_sqft_by_channel,
        "budget_by_channel": distributions.budget_by_channel,
        "contribution_percent_total": round(contribution_total, 2),
        "contribution_status": "over_allocated" if contribution_total > 100 else "ok",
        "remaining_budget": round(remaining_budget(plan.targets, plan.inputs_by_channel), 2),
    }

    out_dir = Path(args.output_dir).resolve()
    out_dir.mkdir(parents=True, exist_ok=True)
    period = f"{plan.year}_{plan.month:02d}" if plan.year and plan.month else "undated"
    funnel_path = out_dir / f"{plan.project_id}_{period}_channel_funnel.csv"
    summary_path = out_dir / f"{plan.project_id}_{period}_plan_summary.json"
    funnel_df.to_csv(funnel_path, index=False)
    write_json(summary_path, summary)

    print(f"Plan computed for project: {plan.project_id}")
    print(f"- deals: {overall.deals}")
    print(f"- meetings done: {overall.meetings_done}")
    print(f"- meetings scheduled: {overall.meetings_scheduled}")
    print(f"- qualified: {overall.qualified}")
    print(f"- leads: {overall.leads}")
    print(f"- contribution total: {summary['contribution_percent_total']}% ({summary['contribution_status']})")
    print(f"- channel funnel csv: {funnel_path}")
    print(f"- summary json: {summary_path}")


if __name__ == "__main__":
    main()
