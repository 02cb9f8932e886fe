"""Default notification rules installed on a fresh database."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from notification_engine.infrastructure.repositories import NotificationRuleRepository

from .create_rule import create_rule

logger = logging.getLogger(__name__)

_ALL = ["email", "sms", "push"]

# (category, event_type, priority, recipient_roles, channels, description)
_RULES: list[tuple[str, str, str, list[str], list[str], str]] = [
    ("job", "job_assigned", "high", ["assigned_technician", "supervisor"], _ALL, "Job assigned to technician"),
    ("job", "job_status_changed", "medium", ["project_manager"], ["email", "push"], "Job status changed"),
    ("job", "job_completed", "medium", ["client", "project_manager", "executive"], _ALL, "Job completed"),
    ("job", "job_overdue", "high", ["manager", "technician", "executive"], _ALL, "Job overdue"),
    ("job", "job_cancelled", "medium", ["executive"], ["push"], "Job cancelled"),
    ("job", "job_cost_exceeds_budget", "high", ["project_manager", "executive"], _ALL, "Job cost exceeds budget"),
    ("job", "bid_created", "medium", ["manager", "executive"], ["email", "push"], "Bid created"),
    ("job", "bid_won", "high", ["manager", "executive"], ["email", "push"], "Bid won"),
    ("job", "bid_requires_approval", "high", ["manager", "executive"], _ALL, "Bid requires approval"),
    ("financial", "invoice_sent", "medium", ["client"], ["email"], "Invoice sent"),
    ("financial", "payment_received_full", "medium", ["client"], ["email"], "Full payment received"),
    ("financial", "invoice_overdue", "high", ["client", "project_manager", "executive"], _ALL, "Invoice overdue"),
    ("dispatch", "technician_assigned_to_dispatch", "high", ["assigned_technician"], _ALL, "Technician assigned to dispatch"),
    ("dispatch", "dispatch_reassigned", "high", ["assigned_technician"], _ALL, "Dispatch reassigned"),
    ("timesheet", "timesheet_submitted", "medium", ["supervisor", "department_manager"], ["push"], "Timesheet submitted"),
    ("timesheet", "timesheet_approved", "medium", ["employee"], ["email", "push"], "Timesheet approved"),
    ("timesheet", "timesheet_rejected", "high", ["employee"], _ALL, "Timesheet rejected"),
    ("expense", "job_budget_exceeded", "high", ["project_manager", "executive"], _ALL, "Job budget exceeded"),
    ("fleet", "maintenance_overdue", "high", ["driver", "manager", "executive"], _ALL, "Maintenance overdue"),
    ("fleet", "driver_reassigned", "medium", ["driver"], _ALL, "Driver reassigned"),
    ("inventory", "low_stock_warning", "high", ["manager", "executive"], ["push"], "Low stock warning"),
    ("inventory", "out_of_stock", "high", ["manager", "executive"], _ALL, "Out of stock"),
    ("safety", "safety_incident_reported", "high", ["manager", "executive"], _ALL, "Safety incident reported"),
    ("safety", "employee_suspended", "high", ["employee", "manager", "executive"], _ALL, "Employee suspended"),
    ("system", "system_announcement", "low", ["all_employees"], ["push"], "Company-wide announcement"),
]

_CONDITIONS: dict[str, dict[str, Any]] = {
    "job_cost_exceeds_budget": {"field": "data.percentage", "op": "gte", "value": 100},
    "low_stock_warning": {
        "or": [
            {"field": "data.stock_level", "op": "lte", "value": 10},
            {"field": "data.reorder_required", "op": "eq", "value": True},
        ]
    },
}


def default_rule_definitions() -> list[dict[str, Any]]:
    """Return keyword arguments for :func:`create_rule`, one dict per rule."""

    definitions = []
    for category, event_type, priority, roles, channels, description in _RULES:
        definitions.append(
            {
                "category": category,
                "event_type": event_type,
                "priority": priority,
                "recipient_roles": list(roles),
                "channels": list(channels),
                "description": description,
                "conditions": _CONDITIONS.get(event_type),
            }
        )
    return definitions


def seed_default_rules(session: Session) -> int:
    """Create the default rules that do not exist yet and return how many were added."""

    repository = NotificationRuleRepository(session)
    created = 0
    for definition in default_rule_definitions():
        if repository.get_by_event_type(definition["event_type"]) is not None:
            continue
        create_rule(session, **definition)
        created += 1
    logger.info("Seeded %d notification rule(s)", created)
    return created
