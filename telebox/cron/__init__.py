"""Cron scheduler for plugin-declared tasks."""

from telebox.cron.parse import validate_cron_expression
from telebox.cron.service import CronJob, CronScheduler

__all__ = ["CronScheduler", "CronJob", "validate_cron_expression"]
