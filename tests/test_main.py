"""Tests for trendfinder.main — scheduler wiring."""

from __future__ import annotations

from apscheduler.triggers.cron import CronTrigger

from trendfinder.config import Config
from trendfinder.jobs import run_pipeline
from trendfinder.main import _build_scheduler


def test_scheduler_uses_digest_cron():
    config = Config(
        llm_api_key="k",
        telegram_bot_token="t",
        telegram_chat_id="c",
        digest_schedule_cron="30 8 * * 1-5",
        digest_timezone="UTC",
    )

    scheduler = _build_scheduler(config)
    job = scheduler.get_job("pipeline")

    assert job.func is run_pipeline
    assert job.args == (config,)
    assert isinstance(job.trigger, CronTrigger)
    fields = {f.name: str(f) for f in job.trigger.fields}
    assert fields["minute"] == "30"
    assert fields["hour"] == "8"
    assert fields["day_of_week"] == "1-5"
    assert str(job.trigger.timezone) == "UTC"
