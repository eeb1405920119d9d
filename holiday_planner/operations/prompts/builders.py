"""
Prompt builders for the AI operations.

These functions turn trip rows and request fields into the user prompts
sent to the provider. Formatting is deterministic: rows are rendered in
the order given, except itinerary days which are ordered by day number.
"""

import json
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from holiday_planner.shared.contracts.packing_output import PACKING_CATEGORIES
from holiday_planner.operations.prompts.templates import (
    EXTRACTION_FIELDS,
    GENERATED_PLAN_SCHEMA,
    PACKING_RESPONSE_EXAMPLE,
)


def format_amount(value: Optional[float]) -> str:
    """Render a money amount without a trailing '.0' for whole numbers."""
    if value is None:
        return "TBC"
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return f"{number:.2f}"


def _sum_costs(rows: List[Dict[str, Any]], field: str = "cost") -> float:
    return sum(row.get(field) or 0 for row in rows)


# =============================================================================
# Research
# =============================================================================


def build_research_prompt(body: Dict[str, Any]) -> str:
    """
    Build the research prompt from the request body.

    Args:
        body: Research request with query, type and optional location,
            date_range, budget and preferences

    Returns:
        Prompt text with one paragraph per supplied field
    """
    parts = [f"Research request type: {body['type']}", f"Query: {body['query']}"]

    if body.get("location"):
        parts.append(f"Location: {body['location']}")

    date_range = body.get("date_range")
    if date_range:
        parts.append(f"Dates: {date_range['start']} to {date_range['end']}")

    budget = body.get("budget")
    if budget:
        parts.append(
            f"Budget: {budget['currency']} {format_amount(budget['min'])} - "
            f"{format_amount(budget['max'])}"
        )

    preferences = body.get("preferences") or []
    if preferences:
        parts.append(f"Preferences: {', '.join(preferences)}")

    return "\n\n".join(parts)


# =============================================================================
# Plan comparison
# =============================================================================


def format_plan_for_comparison(plan: Dict[str, Any]) -> str:
    """Render one plan version as a comparison section."""
    currency = plan.get("currency") or "GBP"
    accommodations = plan.get("accommodations") or []
    transport = plan.get("transport") or []
    costs = plan.get("costs") or []

    lines = [f"## {plan['name']}"]
    if plan.get("description"):
        lines.append(plan["description"])
    lines.append("")
    lines.append(f"Total Cost: {currency} {format_amount(plan.get('total_cost'))}")

    lines.append("")
    lines.append(
        f"Accommodations ({currency} {format_amount(_sum_costs(accommodations))}):"
    )
    if accommodations:
        for a in accommodations:
            lines.append(
                f"- {a['name']} ({a.get('type') or 'unknown'}) in "
                f"{a.get('location') or 'unknown'}: {currency} {format_amount(a.get('cost'))}"
            )
    else:
        lines.append("None")

    lines.append("")
    lines.append(f"Transport ({currency} {format_amount(_sum_costs(transport))}):")
    if transport:
        for t in transport:
            lines.append(
                f"- {t['type']} via {t.get('provider') or 'unknown'}: "
                f"{currency} {format_amount(t.get('cost'))}"
            )
    else:
        lines.append("None")

    lines.append("")
    lines.append("Cost Breakdown:")
    if costs:
        for c in costs:
            lines.append(
                f"- {c['category']}: {c['item']} - {currency} {format_amount(c.get('amount'))}"
            )
    else:
        lines.append("None")

    return "\n".join(lines)


def build_comparison_data(plans: List[Dict[str, Any]]) -> str:
    """Render all plan versions, separated by horizontal rules."""
    return "\n\n---\n\n".join(format_plan_for_comparison(plan) for plan in plans)


# =============================================================================
# Cost optimisation
# =============================================================================


def group_costs_by_category(costs: List[Dict[str, Any]]) -> "OrderedDict[str, List[Dict[str, Any]]]":
    """Group cost rows by category, keeping first-seen category order."""
    grouped: "OrderedDict[str, List[Dict[str, Any]]]" = OrderedDict()
    for cost in costs:
        grouped.setdefault(cost["category"], []).append(cost)
    return grouped


def build_cost_breakdown(plan: Dict[str, Any]) -> str:
    """
    Render a plan version's costs for the optimisation prompt.

    Costs are grouped by category with a per-category total, and each
    estimated amount is flagged. Accommodations and transport follow.
    """
    currency = plan.get("currency") or "GBP"
    lines = [
        f"## {plan['name']}",
        f"Total Cost: {currency} {format_amount(plan.get('total_cost'))}",
        "",
        "### Cost Breakdown by Category:",
    ]

    for category, items in group_costs_by_category(plan.get("costs") or []).items():
        category_total = _sum_costs(items, field="amount")
        lines.append("")
        lines.append(f"**{category}** ({currency} {category_total:.2f}):")
        for item in items:
            flag = " (estimated)" if item.get("is_estimated") else ""
            lines.append(
                f"- {item['item']}: {currency} {format_amount(item.get('amount'))}{flag}"
            )

    lines.append("")
    lines.append("### Accommodations:")
    accommodations = plan.get("accommodations") or []
    if accommodations:
        for a in accommodations:
            nights = a.get("nights")
            lines.append(
                f"- {a['name']} ({a.get('type') or 'unknown'}) in "
                f"{a.get('location') or 'unknown'}: {currency} {format_amount(a.get('cost'))}"
                f" for {nights if nights is not None else '?'} nights"
            )
    else:
        lines.append("None listed")

    lines.append("")
    lines.append("### Transport:")
    transport = plan.get("transport") or []
    if transport:
        for t in transport:
            lines.append(
                f"- {t['type']} via {t.get('provider') or 'unknown'}: "
                f"{currency} {format_amount(t.get('cost'))}"
            )
    else:
        lines.append("None listed")

    return "\n".join(lines)


# =============================================================================
# Itinerary suggestions
# =============================================================================


def format_itinerary_day(day: Dict[str, Any]) -> str:
    """Render one day with its activities in listed order."""
    lines = [f"Day {day['day_number']} ({day.get('date') or 'TBD'}): {day['location']}"]
    if day.get("drive_time"):
        lines.append(f"Drive time: {day['drive_time']}")

    lines.append("Activities:")
    activities = day.get("activities") or []
    if activities:
        for a in activities:
            line = f"- {a.get('time_start') or '??:??'}-{a.get('time_end') or '??:??'}: {a['name']}"
            if a.get("location"):
                line += f" at {a['location']}"
            if a.get("cost"):
                line += f" (£{format_amount(a['cost'])})"
            lines.append(line)
    else:
        lines.append("- No activities planned")

    if day.get("notes"):
        lines.append(f"Notes: {day['notes']}")

    return "\n".join(lines)


def build_itinerary_context(plan: Dict[str, Any]) -> str:
    """Render accommodations then the day-by-day itinerary, days ascending."""
    accommodations = plan.get("accommodations") or []
    if accommodations:
        accommodation_lines = [
            f"- {a['name']} in {a.get('location') or 'unknown'}: "
            f"{a.get('check_in') or 'TBD'} to {a.get('check_out') or 'TBD'}"
            for a in accommodations
        ]
    else:
        accommodation_lines = ["None booked"]

    days = sorted(plan.get("itinerary_days") or [], key=lambda d: d["day_number"])

    sections = [
        f"## {plan['name']}",
        "### Accommodations:\n" + "\n".join(accommodation_lines),
        "### Day-by-Day Itinerary:\n" + "\n\n".join(format_itinerary_day(d) for d in days),
    ]
    return "\n\n".join(sections)


def build_suggestions_prompt(itinerary: str, request: str) -> str:
    return f"Current itinerary:\n{itinerary}\n\nUser request: {request}"


# =============================================================================
# Plan change
# =============================================================================


def build_plan_change_messages(
    item_type: str,
    current_item: Dict[str, Any],
    change_request: str,
    destination: str,
    conversation_history: List[Dict[str, str]],
) -> List[Dict[str, str]]:
    """
    Build the message list for a plan change turn.

    The opening user message describing the item always comes first;
    prior conversation turns follow in order.
    """
    opening = (
        f"I'm planning a trip to {destination}.\n\n"
        f"Current {item_type}:\n"
        f"{json.dumps(current_item, indent=2, default=str)}\n\n"
        f"Change request: {change_request}\n\n"
        "Please suggest alternatives."
    )
    messages = [{"role": "user", "content": opening}]
    for message in conversation_history:
        messages.append({"role": message["role"], "content": message["content"]})
    return messages


# =============================================================================
# Link extraction
# =============================================================================


def build_extraction_prompt(page_content: str, item_type: str) -> str:
    fields = EXTRACTION_FIELDS.get(item_type, "Extract relevant booking information.")
    return (
        f"{fields}\n\n"
        f"Webpage content:\n{page_content}\n\n"
        "Return valid JSON only, no explanation."
    )


# =============================================================================
# Plan and packing generation
# =============================================================================


def build_plan_generation_prompt(
    destination: str,
    start_date: str,
    end_date: str,
    traveller_count: int,
    preferences: str,
) -> str:
    return (
        "Generate a complete holiday itinerary:\n\n"
        f"Destination: {destination}\n"
        f"Dates: {start_date} to {end_date}\n"
        f"Travellers: {traveller_count}\n"
        f"Preferences: {preferences}\n\n"
        f"Return valid JSON with this structure:\n{GENERATED_PLAN_SCHEMA}"
    )


def build_packing_prompt(
    destination: str,
    start_date: str,
    end_date: str,
    traveller_count: int,
    activities: List[str],
    itinerary: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Build the packing list prompt.

    Args:
        destination: Trip destination
        start_date: Start date (YYYY-MM-DD)
        end_date: End date (YYYY-MM-DD)
        traveller_count: Number of travellers
        activities: Free-text activities planned for the trip
        itinerary: Optional context with 'days', 'transport' and
            'accommodations' lists

    Returns:
        Prompt text
    """
    lines = [
        "Generate a packing list:",
        "",
        f"Destination: {destination}",
        f"Dates: {start_date} to {end_date}",
        f"Travellers: {traveller_count}",
        f"Activities: {', '.join(activities)}",
    ]

    if itinerary:
        days = itinerary.get("days") or []
        if days:
            lines.extend(["", "Detailed Itinerary:"])
            for day in days:
                names = ", ".join(a["name"] for a in day.get("activities") or [])
                line = f"- Day {day['day_number']} ({day.get('date') or 'TBD'}): {day['location']}"
                if names:
                    line += f": {names}"
                lines.append(line)

        transport = itinerary.get("transport") or []
        if transport:
            lines.extend(["", "Transport:"])
            for t in transport:
                line = f"- {t['type']}: {t.get('provider') or ''} {t.get('details') or ''}".rstrip()
                if t.get("pickup_location"):
                    line += f" from {t['pickup_location']}"
                if t.get("dropoff_location"):
                    line += f" to {t['dropoff_location']}"
                lines.append(line)

        accommodations = itinerary.get("accommodations") or []
        if accommodations:
            lines.extend(["", "Accommodations:"])
            for a in accommodations:
                lines.append(
                    f"- {a['name']} ({a.get('type') or 'unknown'}) in {a.get('location') or 'unknown'}, "
                    f"{a.get('check_in') or 'TBD'} to {a.get('check_out') or 'TBD'}"
                )

    lines.extend(
        [
            "",
            "Return valid JSON array:",
            PACKING_RESPONSE_EXAMPLE,
            "",
            f"Categories: {', '.join(PACKING_CATEGORIES)}",
        ]
    )
    return "\n".join(lines)
