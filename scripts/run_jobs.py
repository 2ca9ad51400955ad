"""Entry point for the periodic trigger (cron, scheduler task, ...)."""
import argparse
import json
import logging

from finledger.config import settings
from finledger.services.dates import parse_iso_date
from finledger.services.jobs import run_all_jobs


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run the scheduled accounting jobs once")
    parser.add_argument("--date", help="Reference date YYYY-MM-DD (default: today)")
    parser.add_argument("--days-threshold", type=int, default=settings.reminder_days_threshold)
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    reference = parse_iso_date(args.date, "date") if args.date else None
    result = run_all_jobs(reference=reference, days_threshold=args.days_threshold)
    logging.getLogger("finledger.jobs").info("Jobs finished: %s", json.dumps(result))
    return result


if __name__ == "__main__":
    main()
