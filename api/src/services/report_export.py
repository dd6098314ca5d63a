"""
Report Export

Formats a validated report as plain text for copy/paste into chat.
Pure formatting; no validation happens here.
"""

from datetime import date
from typing import Sequence

from src.models.contracts.reports import ClientEntry, ReportHeader


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _or_default(value: float, default: str) -> str:
    return _format_number(value) if value else default


def format_report_date(day: date) -> str:
    """Format a date as M/D/YYYY."""
    return f"{day.month}/{day.day}/{day.year}"


def render_report(
    header: ReportHeader,
    clients: Sequence[ClientEntry],
    report_date: date | None = None,
) -> str:
    """
    Render the agent report text.

    Args:
        header: Report header values
        clients: Client entries in display order
        report_date: Date printed in the title (defaults to today)

    Returns:
        Multi-line report text
    """
    report_date = report_date or date.today()

    lines = [
        f"Agent Report - {format_report_date(report_date)}",
        "",
        "AGENT INFORMATION:",
        f"Name: {header.agent_name or 'Not specified'}",
        f"Added Client Today: {_or_default(header.added_today, '0')}",
        f"Monthly Client Added: {_or_default(header.monthly_added, '0')}",
        f"Open Shops: {_or_default(header.open_shops, '0')}",
        f"Deposits: {_or_default(header.deposits, '$0')}",
        "",
        "CLIENT INFORMATION:",
        "",
    ]

    for index, client in enumerate(clients, start=1):
        lines.extend([
            f"CLIENT {index}:",
            f"Shop ID: {client.shop_id or 'Not specified'}",
            f"Client Details: {client.client_details or 'None'}",
            f"Assets: {client.assets or 'None'}",
            f"Conversation Summary: {client.conversation_summary or 'None'}",
            f"Plan for Tomorrow: {client.plan_for_tomorrow or 'None'}",
            "",
        ])

    return "\n".join(lines) + "\n"
