"""
Expiry Reminder — Entry Point.

Usage:
    python main.py              # serve the check-expiry HTTP endpoint
    python main.py --once       # run one check-and-notify cycle, print JSON
    python main.py --schedule   # run the cycle daily at CHECK_TIME
"""

import argparse
import asyncio
import json
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from expiry_reminder.config import settings


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Asset expiry reminder")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--once", action="store_true", help="run one check now and exit")
    mode.add_argument("--schedule", action="store_true", help="run the check daily at CHECK_TIME")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = create_parser().parse_args(argv)

    if args.once:
        from expiry_reminder.runner import build_ports, run_once

        try:
            ports = build_ports(settings)
        except Exception as exc:
            logging.getLogger(__name__).error("Failed to build adapters: %s", exc)
            print(json.dumps({"error": str(exc), "logs": []}, ensure_ascii=False, indent=2))
            return 1

        report = asyncio.run(run_once(settings, ports))
        print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
        return 0 if report.ok else 1

    if args.schedule:
        from expiry_reminder.scheduler import run_scheduler

        run_scheduler(settings)
        return 0

    import uvicorn

    from expiry_reminder.web.app import create_app

    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT)
    return 0


if __name__ == "__main__":
    sys.exit(main())
