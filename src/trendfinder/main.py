"""Application entry point — run the pipeline once or on a cron schedule."""

from __future__ import annotations

import json
import logging
import sys

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from trendfinder.config import Config, load_config
from trendfinder.jobs import run_pipeline

logger = logging.getLogger("trendfinder")


def _setup_logging(log_level: str, log_format: str) -> None:
    """Configure root logger based on config."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps(
                {
                    "time": "%(asctime)s",
                    "level": "%(levelname)s",
                    "logger": "%(name)s",
                    "message": "%(message)s",
                }
            )
        )
    else:
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def _build_scheduler(config: Config) -> BlockingScheduler:
    """Create a BlockingScheduler that runs the pipeline on the digest cron."""
    scheduler = BlockingScheduler()
    cron_parts = config.digest_schedule_cron.split()
    scheduler.add_job(
        run_pipeline,
        trigger=CronTrigger(
            minute=cron_parts[0],
            hour=cron_parts[1],
            day=cron_parts[2],
            month=cron_parts[3],
            day_of_week=cron_parts[4],
            timezone=config.digest_timezone,
        ),
        args=[config],
        id="pipeline",
        name="Trend digest pipeline",
    )
    return scheduler


def main() -> None:
    """Load config, set up logging, and run the pipeline."""
    config = load_config()
    _setup_logging(config.log_level, config.log_format)

    logger.info(
        "Trendfinder starting (env=%s, mode=%s, model=%s)",
        config.app_env,
        config.run_mode,
        config.llm_model,
    )

    if config.run_mode == "once":
        result = run_pipeline(config)
        logger.info(
            "Run finished: %d stories, %d trends, delivered=%s",
            len(result.stories), len(result.trends), result.delivered,
        )
        return

    scheduler = _build_scheduler(config)
    logger.info("Scheduler starting (cron=%s, tz=%s)", config.digest_schedule_cron, config.digest_timezone)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Scheduler shutting down")


if __name__ == "__main__":
    main()
