"""Build the user-facing text of a notification from its event."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

DEFAULT_TITLE = "Notification"
SHORT_MESSAGE_LENGTH = 100

_TITLES: dict[str, str] = {
    # Jobs
    "job_assigned": "New Job Assigned",
    "job_status_changed": "Job Status Updated",
    "job_started": "Job Started",
    "job_completed": "Job Completed",
    "job_overdue": "Job Overdue",
    "job_cancelled": "Job Cancelled",
    "job_site_notes_added": "New Job Site Notes",
    "job_cost_exceeds_budget": "Job Cost Alert",
    "job_budget_exceeded": "Budget Exceeded",
    # Bids
    "bid_created": "New Bid Created",
    "bid_sent_to_client": "Bid Sent to Client",
    "bid_expired": "Bid Expired",
    "bid_won": "Bid Won!",
    "bid_requires_approval": "Bid Requires Approval",
    # Invoicing
    "invoice_sent": "Invoice Sent",
    "payment_received_full": "Payment Received",
    "payment_received_partial": "Partial Payment Received",
    "invoice_due_tomorrow": "Invoice Due Tomorrow",
    "invoice_overdue": "Invoice Overdue",
    "invoice_cancelled": "Invoice Cancelled",
    # Dispatch
    "technician_assigned_to_dispatch": "New Dispatch Assignment",
    "dispatch_reassigned": "Dispatch Reassigned",
    # Timesheets
    "timesheet_submitted": "Timesheet Submitted",
    "timesheet_approved": "Timesheet Approved",
    "timesheet_rejected": "Timesheet Rejected",
    "clock_reminder": "Clock In/Out Reminder",
    # Fleet
    "vehicle_checked_out": "Vehicle Checked Out",
    "vehicle_checked_in": "Vehicle Checked In",
    "maintenance_overdue": "Maintenance Overdue",
    "safety_inspection_failed": "Safety Inspection Failed",
    "driver_reassigned": "Driver Reassigned",
    # Inventory
    "low_stock_warning": "Low Stock Warning",
    "out_of_stock": "Out of Stock Alert",
    "stock_reordered": "Stock Reordered",
    # Safety and compliance
    "safety_incident_reported": "Safety Incident Reported",
    "compliance_case_opened": "Compliance Case Opened",
    "employee_suspended": "Employee Suspended",
}

_ACTION_PATHS: dict[str, str] = {
    "Job": "/dashboard/jobs/{id}",
    "Bid": "/dashboard/bids/{id}",
    "Invoice": "/dashboard/invoicing/{id}",
    "Timesheet": "/dashboard/timesheets/{id}",
    "Vehicle": "/dashboard/fleet/{id}",
    "Expense": "/dashboard/expenses/{id}",
    "Dispatch": "/dashboard/dispatch",
    "Employee": "/dashboard/team/employees/{id}",
    "Client": "/dashboard/clients/{id}",
    "Inventory": "/dashboard/inventory/{id}",
}


@dataclass(frozen=True)
class NotificationContent:
    """Text shared by every notification created for one trigger."""

    title: str
    message: str
    short_message: str
    action_url: str | None


def generate_title(event_type: str) -> str:
    return _TITLES.get(event_type, DEFAULT_TITLE)


def generate_action_url(entity_type: str | None, entity_id: Any) -> str | None:
    """Return the dashboard path for an entity, or ``None`` without a reference."""

    if not entity_type or entity_id in (None, ""):
        return None
    template = _ACTION_PATHS.get(entity_type)
    if template is None:
        return "/dashboard"
    return template.format(id=entity_id)


def generate_content(event_type: str, data: Mapping[str, Any] | None) -> NotificationContent:
    """Return title, message, short message and action URL for an event.

    Values supplied in ``data`` (``title``, ``message``, ``short_message`` and
    ``action_url``) take precedence over the generated ones. The result depends
    only on the arguments.
    """

    data = data or {}

    title = _text(data.get("title")) or generate_title(event_type)

    message = _text(data.get("message"))
    short_message = _text(data.get("short_message"))
    if not message:
        generated_message, generated_short = _generate_message(event_type, data)
        message = generated_message
        short_message = short_message or generated_short
    if not short_message:
        short_message = message[:SHORT_MESSAGE_LENGTH]

    action_url = _text(data.get("action_url")) or generate_action_url(
        data.get("entity_type"), data.get("entity_id")
    )

    return NotificationContent(
        title=title,
        message=message,
        short_message=short_message,
        action_url=action_url,
    )


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _money(value: Any) -> str:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)
    if number.is_integer():
        return f"${int(number):,}"
    return f"${number:,.2f}"


def _generate_message(event_type: str, data: Mapping[str, Any]) -> tuple[str, str]:
    name = _text(data.get("entity_name")) or "Item"
    builder = _MESSAGE_BUILDERS.get(event_type)
    if builder is None:
        return (
            f'There is an update regarding "{name}" that requires your attention. '
            "Please log in to review the latest information.",
            f"Update: {name}",
        )
    return builder(name, data)


def _client(data: Mapping[str, Any]) -> str:
    client_name = _text(data.get("client_name"))
    return f" for client {client_name}" if client_name else ""


def _amount(data: Mapping[str, Any], label: str = " (Amount: {})") -> str:
    if not data.get("amount"):
        return ""
    return label.format(_money(data["amount"]))


def _reason(data: Mapping[str, Any]) -> str:
    reason = _text(data.get("reason"))
    return f". Reason: {reason}" if reason else ""


def _job_assigned(name: str, data: Mapping[str, Any]) -> tuple[str, str]:
    return (
        f'You have been assigned to job "{name}"{_client(data)}. Please log in to '
        "review the full job details, scheduled dates and site information.",
        f"New job assigned: {name}",
    )


def _job_status_changed(name: str, data: Mapping[str, Any]) -> tuple[str, str]:
    old_status = _text(data.get("old_status"))
    new_status = _text(data.get("new_status"))
    change = ""
    if old_status:
        change += f' from "{old_status}"'
    if new_status:
        change += f' to "{new_status}"'
    short = f"Job status updated: {name}"
    if new_status:
        short += f" -> {new_status}"
    return (
        f'The status of job "{name}"{_client(data)} has been updated{change}. '
        "Please log in to review the latest details.",
        short,
    )


def _job_completed(name: str, data: Mapping[str, Any]) -> tuple[str, str]:
    return (
        f'Job "{name}"{_client(data)} has been completed successfully. Please log in '
        "to review the final report and any follow-up actions.",
        f"Job completed: {name}",
    )


def _job_cancelled(name: str, data: Mapping[str, Any]) -> tuple[str, str]:
    return (
        f'Job "{name}"{_client(data)} has been cancelled{_reason(data)}. Please log in '
        "to review any outstanding tasks tied to this job.",
        f"Job cancelled: {name}",
    )


def _budget_exceeded(name: str, data: Mapping[str, Any]) -> tuple[str, str]:
    budget = f" Budget: {_money(data['budget'])}." if data.get("budget") else ""
    return (
        f'Job "{name}"{_client(data)} has exceeded its approved budget.{budget} '
        "Please review the cost breakdown before work continues.",
        f"Budget exceeded: {name}",
    )


def _bid_created(name: str, data: Mapping[str, Any]) -> tuple[str, str]:
    return (
        f'A new bid "{name}"{_client(data)}{_amount(data)} has been created and is '
        "awaiting review.",
        f"New bid created: {name}",
    )


def _bid_requires_approval(name: str, data: Mapping[str, Any]) -> tuple[str, str]:
    return (
        f'Bid "{name}"{_client(data)}{_amount(data)} is pending your approval before '
        "it can be sent.",
        f"Bid approval required: {name}",
    )


def _bid_won(name: str, data: Mapping[str, Any]) -> tuple[str, str]:
    return (
        f'Great news! Bid "{name}"{_client(data)}{_amount(data)} has been won. '
        "Please log in to begin job creation and project planning.",
        f"Bid won: {name}",
    )


def _invoice_sent(name: str, data: Mapping[str, Any]) -> tuple[str, str]:
    due_date = _text(data.get("due_date"))
    due = f" and is due on {due_date}" if due_date else ""
    return (
        f"Invoice {name}{_client(data)}{_amount(data, ' for {}')} has been sent{due}.",
        f"Invoice sent: {name}",
    )


def _payment_received(name: str, data: Mapping[str, Any]) -> tuple[str, str]:
    return (
        f"Full payment{_amount(data, ' of {}')} has been received for invoice "
        f"{name}{_client(data)}.",
        f"Full payment received: {name}",
    )


def _invoice_overdue(name: str, data: Mapping[str, Any]) -> tuple[str, str]:
    days = data.get("days_overdue")
    overdue = f"{days} day{'s' if days != 1 else ''} overdue" if days else "overdue"
    return (
        f"Invoice {name}{_client(data)}{_amount(data, ' for {}')} is {overdue}. "
        "Please follow up with the client to arrange payment.",
        f"Invoice overdue: {name}",
    )


def _dispatch_assigned(name: str, data: Mapping[str, Any]) -> tuple[str, str]:
    scheduled = _text(data.get("scheduled_time") or data.get("scheduled_date"))
    location = _text(data.get("location") or data.get("site_address"))
    details = ""
    if scheduled:
        details += f" Scheduled: {scheduled}."
    if location:
        details += f" Location: {location}."
    return (
        f'You have been assigned to a new dispatch "{name}".{details} Please review '
        "the dispatch details before heading out.",
        f"New dispatch assignment: {name}",
    )


def _timesheet_submitted(name: str, data: Mapping[str, Any]) -> tuple[str, str]:
    hours = f" ({data['total_hours']} hrs)" if data.get("total_hours") else ""
    return (
        f'Timesheet "{name}"{hours} has been submitted and is awaiting approval.',
        f"Timesheet submitted: {name}",
    )


def _timesheet_approved(name: str, data: Mapping[str, Any]) -> tuple[str, str]:
    hours = f" ({data['total_hours']} hrs)" if data.get("total_hours") else ""
    return (
        f'Your timesheet "{name}"{hours} has been approved. No further action is needed.',
        f"Timesheet approved: {name}",
    )


def _timesheet_rejected(name: str, data: Mapping[str, Any]) -> tuple[str, str]:
    return (
        f'Your timesheet "{name}" has been rejected{_reason(data)}. Please review the '
        "feedback and resubmit.",
        f"Timesheet rejected: {name}",
    )


def _low_stock(name: str, data: Mapping[str, Any]) -> tuple[str, str]:
    stock = data.get("stock_level") or 0
    reorder = (
        f" (reorder level: {data['reorder_level']})" if data.get("reorder_level") else ""
    )
    return (
        f'Inventory item "{name}" is running low. Current stock: {stock} units{reorder}.',
        f"Low stock: {name}",
    )


def _out_of_stock(name: str, data: Mapping[str, Any]) -> tuple[str, str]:
    return (
        f'Inventory item "{name}" is now out of stock. Please reorder immediately.',
        f"Out of stock: {name}",
    )


def _maintenance_overdue(name: str, data: Mapping[str, Any]) -> tuple[str, str]:
    plate = f" (Plate: {data['license_plate']})" if data.get("license_plate") else ""
    return (
        f'Maintenance for "{name}"{plate} is overdue. This vehicle should not be '
        "operated until the required maintenance is completed.",
        f"Maintenance overdue: {name}",
    )


def _safety_incident(name: str, data: Mapping[str, Any]) -> tuple[str, str]:
    reported_by = _text(data.get("reported_by"))
    severity = _text(data.get("severity"))
    details = ""
    if reported_by:
        details += f" by {reported_by}"
    if severity:
        details += f". Severity: {severity}"
    return (
        f'A safety incident has been reported on job "{name}"{details}. '
        "This requires immediate review.",
        f"Safety incident reported: {name}",
    )


_MESSAGE_BUILDERS: dict[str, Callable[[str, Mapping[str, Any]], tuple[str, str]]] = {
    "job_assigned": _job_assigned,
    "job_status_changed": _job_status_changed,
    "job_completed": _job_completed,
    "job_cancelled": _job_cancelled,
    "job_cost_exceeds_budget": _budget_exceeded,
    "job_budget_exceeded": _budget_exceeded,
    "bid_created": _bid_created,
    "bid_requires_approval": _bid_requires_approval,
    "bid_won": _bid_won,
    "invoice_sent": _invoice_sent,
    "payment_received_full": _payment_received,
    "invoice_overdue": _invoice_overdue,
    "technician_assigned_to_dispatch": _dispatch_assigned,
    "timesheet_submitted": _timesheet_submitted,
    "timesheet_approved": _timesheet_approved,
    "timesheet_rejected": _timesheet_rejected,
    "low_stock_warning": _low_stock,
    "out_of_stock": _out_of_stock,
    "maintenance_overdue": _maintenance_overdue,
    "safety_incident_reported": _safety_incident,
}


__all__ = [
    "DEFAULT_TITLE",
    "NotificationContent",
    "generate_action_url",
    "generate_content",
    "generate_title",
]
