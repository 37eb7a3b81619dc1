from __future__ import annotations

import argparse
from datetime import datetime, timezone
from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from funnel_planner.config import load_channel_actuals, load_project_plan
from funnel_planner.io_utils import write_json
from funnel_planner.logging_config import setup_logging
from funnel_planner.reconcile import reconcile_channels


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile channel actuals against the computed funnel plan.")
    parser.add_argument("--project", required=True, help="Project id with matching config in configs/projects.")
    parser.add_argument("--configs-dir", default="configs/projects")
    parser.add_argument("--actuals-csv", default=None, help="Override the actuals csv named in the project config.")
    parser.add_argument("--output-dir", default="data/outputs")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    setup_logging(level=args.log_level)
    plan = load_project_plan(Path(args.configs_dir).resolve() / f"{args.project}.yaml")

    actuals_path = Path(args.actuals_csv).resolve() if args.actuals_csv else plan.actuals_csv
    if actuals_path is None:
        raise ValueError(f"No actuals csv configured for project '{plan.project_id}'; pass --actuals-csv.")
    actuals_by_channel = load_channel_actuals(Path(actuals_path).resolve(), year=plan.year, month=plan.month)

    result = reconcile_channels(plan.targets, plan.inputs_by_channel, actuals_by_channel)
    summary = {"generated_at": datetime.now(timezone.utc).isoformat(), **result.summary}

    out_dir = Path(args.output_dir).resolve()
    out_dir.mkdir(parents=True, exist_ok=True)
    period = f"{plan.year}_{plan.month:02d}" if plan.year and plan.month else "undated"
    table_path = out_dir / f"{plan.project_id}_{period}_reconciliation.csv"
    summary_path = out_dir / f"{plan.project_id}_{period}_reconciliation_summary.json"
    result.table.to_csv(table_path, index=False)
    write_json(summary_path, summary)

    totals = result.summary["totals"]
    print(f"Reconciliation complete for project: {plan.project_id}")
    for stage, values in totals.items():
        print(f"- {stage}: {values['actual']:g} / {values['target']} ({values['percent_of_target']}%)")
    print(f"- channels behind on deals: {', '.join(result.summary['channels_behind']) or 'none'}")
    print(f"- reconciliation csv: {table_path}")
    print(f"- summary json: {summary_path}")


if __name__ == "__main__":
    main()
