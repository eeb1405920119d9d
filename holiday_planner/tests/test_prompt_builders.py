"""
Unit tests for the prompt builders.

Checks the deterministic formatting of research, comparison, cost
breakdown, itinerary, plan change and packing prompts.
"""

from holiday_planner.operations.prompts.builders import (
    build_comparison_data,
    build_cost_breakdown,
    build_extraction_prompt,
    build_itinerary_context,
    build_packing_prompt,
    build_plan_change_messages,
    build_research_prompt,
    format_amount,
    group_costs_by_category,
)


def _make_plan(**overrides):
    plan = {
        "id": "p1",
        "trip_id": "t1",
        "name": "Plan A",
        "description": "Theme parks",
        "total_cost": 5200,
        "currency": "GBP",
        "costs": [
            {"category": "accommodation", "item": "Resort", "amount": 2500, "is_estimated": False},
            {"category": "tickets", "item": "Park passes", "amount": 1200, "is_estimated": True},
            {"category": "accommodation", "item": "Airport hotel", "amount": 150.5, "is_estimated": True},
        ],
        "accommodations": [
            {
                "name": "Cabana Bay",
                "type": "resort",
                "location": "Orlando",
                "check_in": "2026-07-20",
                "check_out": "2026-07-30",
                "nights": 10,
                "cost": 2500,
            }
        ],
        "transport": [{"type": "car_rental", "provider": "Alamo", "cost": 700}],
        "itinerary_days": [
            {
                "day_number": 2,
                "date": "2026-07-21",
                "location": "Universal",
                "notes": None,
                "drive_time": None,
                "activities": [
                    {"name": "Ride", "time_start": "09:00", "time_end": "10:00", "location": None, "cost": None},
                    {"name": "Lunch", "time_start": None, "time_end": None, "location": "Cafe", "cost": 60},
                ],
            },
            {
                "day_number": 1,
                "date": "2026-07-20",
                "location": "Orlando",
                "notes": "Arrival day",
                "drive_time": "~1 hr",
                "activities": [],
            },
        ],
    }
    plan.update(overrides)
    return plan


class TestFormatAmount:
    def test_whole_numbers_drop_decimals(self):
        """Whole amounts print without decimals."""
        assert format_amount(2500) == "2500"
        assert format_amount(2500.0) == "2500"

    def test_fractions_use_two_places(self):
        """Fractional amounts print with two decimals."""
        assert format_amount(150.5) == "150.50"

    def test_missing_amount(self):
        """A missing amount prints as TBC."""
        assert format_amount(None) == "TBC"


class TestResearchPrompt:
    def test_minimal_request(self):
        """Only type and query are printed when nothing else is given."""
        prompt = build_research_prompt({"query": "pizza", "type": "restaurant"})
        assert prompt == "Research request type: restaurant\n\nQuery: pizza"

    def test_all_fields_in_order(self):
        """Optional fields follow the query in a fixed order."""
        prompt = build_research_prompt(
            {
                "query": "villa with pool",
                "type": "hotel",
                "location": "Kissimmee",
                "date_range": {"start": "2026-07-20", "end": "2026-07-27"},
                "budget": {"min": 100, "max": 250.5, "currency": "GBP"},
                "preferences": ["pool", "quiet"],
            }
        )
        assert prompt.split("\n\n") == [
            "Research request type: hotel",
            "Query: villa with pool",
            "Location: Kissimmee",
            "Dates: 2026-07-20 to 2026-07-27",
            "Budget: GBP 100 - 250.50",
            "Preferences: pool, quiet",
        ]


class TestComparisonData:
    def test_sections_separated_by_rule(self):
        """Each plan gets its own section."""
        data = build_comparison_data([_make_plan(), _make_plan(name="Plan B", costs=[])])
        sections = data.split("\n\n---\n\n")
        assert len(sections) == 2
        assert sections[0].startswith("## Plan A")
        assert sections[1].startswith("## Plan B")

    def test_section_contents(self):
        """A section lists totals, stays, transport and costs."""
        section = build_comparison_data([_make_plan()])
        assert "Total Cost: GBP 5200" in section
        assert "Accommodations (GBP 2500):" in section
        assert "- Cabana Bay (resort) in Orlando: GBP 2500" in section
        assert "Transport (GBP 700):" in section
        assert "- car_rental via Alamo: GBP 700" in section
        assert "- tickets: Park passes - GBP 1200" in section

    def test_empty_categories(self):
        """Empty lists print as None."""
        section = build_comparison_data([_make_plan(accommodations=[], transport=[], costs=[])])
        assert "Accommodations (GBP 0):\nNone" in section
        assert "Cost Breakdown:\nNone" in section


class TestCostBreakdown:
    def test_groups_keep_first_seen_order(self):
        """Categories keep the order of their first cost."""
        grouped = group_costs_by_category(_make_plan()["costs"])
        assert list(grouped) == ["accommodation", "tickets"]
        assert [c["item"] for c in grouped["accommodation"]] == ["Resort", "Airport hotel"]

    def test_category_totals_and_estimated_flag(self):
        """Category totals and estimated costs are marked."""
        breakdown = build_cost_breakdown(_make_plan())
        assert "**accommodation** (GBP 2650.50):" in breakdown
        assert "- Resort: GBP 2500\n" in breakdown
        assert "- Airport hotel: GBP 150.50 (estimated)" in breakdown
        assert "**tickets** (GBP 1200.00):" in breakdown
        assert breakdown.index("**accommodation**") < breakdown.index("**tickets**")

    def test_accommodation_nights_and_transport(self):
        """Stays show their nights and transport follows."""
        breakdown = build_cost_breakdown(_make_plan())
        assert "- Cabana Bay (resort) in Orlando: GBP 2500 for 10 nights" in breakdown
        assert "### Transport:\n- car_rental via Alamo: GBP 700" in breakdown

    def test_uses_plan_currency(self):
        """Amounts use the plan's currency."""
        breakdown = build_cost_breakdown(_make_plan(currency="USD"))
        assert "Total Cost: USD 5200" in breakdown


class TestItineraryContext:
    def test_days_sorted_by_day_number(self):
        """Days are listed by day number."""
        context = build_itinerary_context(_make_plan())
        assert context.index("Day 1 (2026-07-20): Orlando") < context.index(
            "Day 2 (2026-07-21): Universal"
        )

    def test_activity_lines(self):
        """Activities show times, location and cost."""
        context = build_itinerary_context(_make_plan())
        assert "- 09:00-10:00: Ride" in context
        assert "- ??:??-??:??: Lunch at Cafe (£60)" in context
        assert context.index("Ride") < context.index("Lunch")

    def test_day_details(self):
        """Drive time, notes and empty days are shown."""
        context = build_itinerary_context(_make_plan())
        assert "Drive time: ~1 hr" in context
        assert "- No activities planned" in context
        assert "Notes: Arrival day" in context

    def test_accommodations_listed_first(self):
        """Accommodations come before the days."""
        context = build_itinerary_context(_make_plan())
        assert "- Cabana Bay in Orlando: 2026-07-20 to 2026-07-30" in context
        assert context.index("### Accommodations:") < context.index("### Day-by-Day Itinerary:")


class TestPlanChangeMessages:
    def test_opening_message_only(self):
        """An opening turn is one user message describing the item."""
        messages = build_plan_change_messages(
            item_type="accommodation",
            current_item={"id": "a1", "name": "Cabana Bay"},
            change_request="Somewhere quieter",
            destination="Orlando",
            conversation_history=[],
        )
        assert len(messages) == 1
        assert messages[0]["role"] == "user"
        assert "I'm planning a trip to Orlando." in messages[0]["content"]
        assert '"name": "Cabana Bay"' in messages[0]["content"]
        assert "Change request: Somewhere quieter" in messages[0]["content"]

    def test_history_follows_opening_message(self):
        """History is appended after the opening message."""
        history = [
            {"role": "assistant", "content": "Try these."},
            {"role": "user", "content": "Cheaper please."},
        ]
        messages = build_plan_change_messages("accommodation", {"id": "a1"}, "Quieter", "Orlando", history)
        assert [m["role"] for m in messages] == ["user", "assistant", "user"]
        assert messages[2]["content"] == "Cheaper please."


class TestPackingPrompt:
    def test_basic_fields(self):
        """Trip basics are listed without an itinerary section."""
        prompt = build_packing_prompt("Orlando", "2026-07-20", "2026-08-03", 4, ["swimming", "parks"])
        assert "Destination: Orlando" in prompt
        assert "Travellers: 4" in prompt
        assert "Activities: swimming, parks" in prompt
        assert "Detailed Itinerary:" not in prompt

    def test_itinerary_context(self):
        """Days, transport and stays are summarised."""
        itinerary = {
            "days": [{"day_number": 5, "date": "2026-07-24", "location": "Nassau", "activities": [{"name": "Boat trip"}]}],
            "transport": [{"type": "flight", "provider": "BA", "details": "LGW-MCO", "pickup_location": "London"}],
            "accommodations": [{"name": "Beach Inn", "type": "hotel", "location": "Clearwater"}],
        }
        prompt = build_packing_prompt("Florida", "2026-07-20", "2026-08-03", 2, [], itinerary)
        assert "- Day 5 (2026-07-24): Nassau: Boat trip" in prompt
        assert "- flight: BA LGW-MCO from London" in prompt
        assert "- Beach Inn (hotel) in Clearwater, TBD to TBD" in prompt


class TestExtractionPrompt:
    def test_item_type_fields(self):
        """The field list depends on the item type."""
        prompt = build_extraction_prompt("Seaside resort page", "accommodation")
        assert prompt.startswith("Extract: name, type")
        assert "Webpage content:\nSeaside resort page" in prompt
