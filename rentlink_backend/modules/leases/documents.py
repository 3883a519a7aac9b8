"""Default lease agreement content."""

from datetime import date
from decimal import Decimal
from typing import Any

DEFAULT_TITLE = "Residential Lease Agreement"
DEFAULT_NOTICE_PERIOD_DAYS = 30


def _money(value: Decimal) -> str:
    return f"N${value:,.2f}"


def build_default_document(
    monthly_rent: Decimal,
    deposit: Decimal,
    start_date: date,
    end_date: date,
    property_title: str | None = None,
) -> dict[str, Any]:
    """Standard clause set for a new lease, filled in from its terms."""
    title = DEFAULT_TITLE
    if property_title:
        title = f"{DEFAULT_TITLE}: {property_title}"

    clauses = [
        (
            "Lease Term",
            f"This lease runs from {start_date.isoformat()} to {end_date.isoformat()}.",
            True,
        ),
        (
            "Rent Payment",
            f"Tenant agrees to pay {_money(monthly_rent)} on or before the 1st day "
            "of each month. Late payments will incur a fee as specified in this "
            "agreement.",
            True,
        ),
        (
            "Security Deposit",
            f"Tenant shall pay a security deposit of {_money(deposit)}, held by the "
            "Landlord and returned at the end of the lease term, subject to "
            "deductions for damages or unpaid rent.",
            True,
        ),
        (
            "Property Condition",
            "Tenant agrees to maintain the property in good condition and report "
            "any damages or maintenance issues promptly to the Landlord.",
            True,
        ),
        (
            "Occupancy",
            "Only the Tenant and any approved occupants listed in this agreement "
            "may reside in the property. Subletting is not permitted without "
            "written consent.",
            True,
        ),
        (
            "Entry by Landlord",
            "Landlord may enter the property with 24-hour notice for inspections, "
            "repairs, or showings, except in emergencies.",
            False,
        ),
        (
            "Termination",
            f"Either party may terminate this lease with {DEFAULT_NOTICE_PERIOD_DAYS} "
            "days written notice. Early termination may result in forfeiture of "
            "the security deposit.",
            True,
        ),
    ]

    return {
        "title": title,
        "clauses": [
            {
                "id": str(index),
                "title": clause_title,
                "content": content,
                "is_required": required,
            }
            for index, (clause_title, content, required) in enumerate(clauses, start=1)
        ],
        "notice_period_days": DEFAULT_NOTICE_PERIOD_DAYS,
        "special_conditions": "",
    }
