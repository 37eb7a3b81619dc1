from __future__ import annotations

import argparse
from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from funnel_planner.logging_config import setup_logging
from funnel_planner.sample_data import generate_sample_project


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a synthetic project plan and channel actuals.")
    parser.add_argument("--project", default="sample_tower")
    parser.add_argument("--year", type=int, default=2025)
    parser.add_argument("--month", type=int, default=12)
    parser.add_argument("--sales-target-sqft", type=float, default=15000.0)
    parser.add_argument("--avg-sqft-per-deal", type=float, default=925.0)
    parser.add_argument("--budget", type=float, default=2500000.0)
    parser.add_argument("--attainment", type=float, default=0.85, help="Share of the planned funnel actually reached.")
    parser.add_argument("--noise", type=float, default=0.12, help="Lognormal noise level.")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--output-dir", default="data/sample")
    parser.add_argument("--configs-dir", default="configs/projects")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    setup_logging(level=args.log_level)
    payload = generate_sample_project(
        project_id=args.project,
        output_dir=Path(args.output_dir).resolve(),
        configs_dir=Path(args.configs_dir).resolve(),
        year=args.year,
        month=args.month,
        sales_target_sqft=args.sales_target_sqft,
        avg_sqft_per_deal=args.avg_sqft_per_deal,
        total_budget=args.budget,
        attainment=args.attainment,
        noise=args.noise,
        seed=args.seed,
    )
    print("Sample project generated")
    for key, value in payload.items():
        print(f"- {key}: {value}")


if __name__ == "__main__":
    main()
