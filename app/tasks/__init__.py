"""Scheduled tasks for the rebooking service.

- No-show reconciliation: marks overdue appointments missed and notifies
  patients with rebooking options
"""

from app.tasks.no_show import ReconciliationLoop, run_no_show_task

__all__ = [
    "ReconciliationLoop",
    "run_no_show_task",
]
