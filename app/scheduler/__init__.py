"""Scheduler module for the link shortener application.

This module provides scheduled task functionality using APScheduler.
"""

from app.scheduler.scheduler import SchedulerService, flush_clicks_job, scheduler_service

__all__ = ["SchedulerService", "flush_clicks_job", "scheduler_service"]
