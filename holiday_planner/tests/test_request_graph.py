"""
Tests for the AI request graph.

Runs every operation through the compiled graph with a fake provider and
an in-memory database, covering cache hits, the conversational bypass,
cache outages and the packing save policy.
"""

import pytest
from sqlalchemy import select

from holiday_planner.cache.store import ResultCacheStore
from holiday_planner.graph.build import create_ai_request_graph, run_ai_request
from holiday_planner.graph.router import route_after_lookup
from holiday_planner.operations import OPERATIONS
from holiday_planner.persistence.models import AIResultCacheModel, PackingItemModel
from holiday_planner.persistence.repository import TripRepository
from holiday_planner.shared.errors import (
    ExtractionError,
    FetchError,
    NotFoundError,
    ProviderError,
    UpstreamError,
    ValidationError,
)
from holiday_planner.tests.fakes import (
    OTHER_USER_ID,
    USER_ID,
    FailingCacheStore,
    FailingSaveRepository,
    FakePageFetcher,
    FakeProvider,
    SpyCacheStore,
    make_services,
    make_session_factory,
    seed_trip,
)


PACKING_RESPONSE = """```json
[
  {"category": "Clothes", "name": "T-shirts", "quantity": 7},
  {"category": "Medications", "name": "Seasickness tablets", "linkedTo": "Day 5: Boat trip"}
]
```"""

PLAN_CHANGE_RESPONSE = (
    '{"text": "Here are quieter options.", "options": '
    '[{"name": "Lake Villa", "type": "accommodation", "cost": 1800}]}'
)


def _make_env(provider=None, cache_store=None, repository=None, page_fetcher=None):
    factory = make_session_factory()
    trip = seed_trip(factory)
    provider = provider or FakeProvider()
    services = make_services(
        factory,
        provider=provider,
        cache_store=cache_store,
        repository=repository,
        page_fetcher=page_fetcher,
    )
    return factory, trip, provider, services


def _run(operation_name, body, services):
    return run_ai_request(OPERATIONS[operation_name], body, services)


def _plan_change_body(trip, history=None):
    return {
        "trip_id": trip["trip_id"],
        "plan_version_id": trip["plan_ids"][0],
        "item_type": "accommodation",
        "current_item": {"id": "acc-1", "name": "Universal Cabana Bay"},
        "change_request": "Somewhere quieter",
        "destination": None,
        "conversation_history": history or [],
    }


# =============================================================================
# Cache behaviour
# =============================================================================


class TestIdempotentCacheHit:
    """Identical requests call the provider once."""

    def test_comparison_second_call_is_cached(self):
        """The second comparison is served from the cache."""
        _, trip, provider, services = _make_env()
        body = {"trip_id": trip["trip_id"], "plan_version_ids": None}

        first = _run("comparison", body, services)
        second = _run("comparison", body, services)

        assert len(provider.calls) == 1
        assert first["cached"] is False
        assert second["cached"] is True
        assert second["result"] == first["result"]

    def test_comparison_plan_order_shares_entry(self):
        """The same plan set in a different order hits the same entry."""
        _, trip, provider, services = _make_env()
        p1, p2 = trip["plan_ids"]

        first = _run("comparison", {"trip_id": trip["trip_id"], "plan_version_ids": [p2, p1]}, services)
        second = _run("comparison", {"trip_id": trip["trip_id"], "plan_version_ids": [p1, p2]}, services)

        assert len(provider.calls) == 1
        assert second["cached"] is True
        assert second["result"] == first["result"]

    def test_research_payload_returned_verbatim(self):
        """A cached research result equals the fresh one."""
        provider = FakeProvider(responses=["1. **Epcot Centre**\nLocation: Bay Lake\nTickets £120"])
        _, _, _, services = _make_env(provider=provider)
        body = {"query": "theme parks", "type": "activity", "trip_id": None}

        first = _run("research", body, services)
        second = _run("research", body, services)

        assert first["result"]["suggestions"][0]["name"] == "Epcot Centre"
        assert first["result"]["suggestions"][0]["cost"] == 120
        assert second == {"result": first["result"], "cached": True}

    def test_optimization_different_plan_misses(self):
        """Another plan version is a different entry."""
        _, trip, provider, services = _make_env()
        p1, p2 = trip["plan_ids"]

        _run("optimization", {"trip_id": trip["trip_id"], "plan_version_id": p1}, services)
        second = _run("optimization", {"trip_id": trip["trip_id"], "plan_version_id": p2}, services)

        assert len(provider.calls) == 2
        assert second["cached"] is False

    def test_suggestions_request_text_is_part_of_key(self):
        """Each request text gets its own entry."""
        _, trip, provider, services = _make_env()
        body = {"trip_id": trip["trip_id"], "plan_version_id": trip["plan_ids"][0], "request": "Rainy day ideas"}

        _run("suggestions", body, services)
        _run("suggestions", {**body, "request": "Cheaper lunches"}, services)
        third = _run("suggestions", body, services)

        assert len(provider.calls) == 2
        assert third["cached"] is True

    def test_research_global_and_trip_scopes_are_separate(self):
        """Research with and without a trip is cached separately."""
        factory, trip, provider, services = _make_env()
        body = {"query": "pizza", "type": "restaurant"}

        _run("research", body, services)
        global_again = _run("research", body, services)
        in_trip = _run("research", {**body, "trip_id": trip["trip_id"]}, services)

        assert global_again["cached"] is True
        assert in_trip["cached"] is False
        assert len(provider.calls) == 2

        store = ResultCacheStore(factory)
        assert any(store.get(None, key, "research") for key in _research_keys(factory))

    def test_provider_failure_leaves_cache_untouched(self):
        """A failed call stores nothing, so the next call is fresh."""
        factory, trip, _, _ = _make_env()
        failing = make_services(factory, provider=FakeProvider(error=ProviderError("quota exceeded")))
        body = {"trip_id": trip["trip_id"], "plan_version_id": trip["plan_ids"][0]}

        with pytest.raises(ProviderError):
            _run("optimization", body, failing)

        healthy_provider = FakeProvider()
        healthy = make_services(factory, provider=healthy_provider)
        result = _run("optimization", body, healthy)
        assert result["cached"] is False
        assert len(healthy_provider.calls) == 1

    def test_token_usage_stored_with_result(self):
        """The cache row records the model and the tokens of the fresh answer."""
        factory, trip, _, services = _make_env(provider=FakeProvider(tokens_per_call=321))
        _run("optimization", {"trip_id": trip["trip_id"], "plan_version_id": trip["plan_ids"][0]}, services)

        with factory() as session:
            row = session.execute(select(AIResultCacheModel)).scalar_one()
        assert (row.kind, row.model, row.tokens_used) == ("optimization", "fake-model", 321)


def _research_keys(factory):
    with factory() as session:
        return [row.cache_key for row in session.execute(select(AIResultCacheModel)).scalars()]


class TestConversationalBypass:
    """Follow-up plan change turns never touch the cache."""

    def test_follow_up_skips_cache_read_and_write(self):
        """Only opening turns read and write the cache."""
        factory = make_session_factory()
        trip = seed_trip(factory)
        store = SpyCacheStore(factory)
        provider = FakeProvider(responses=[PLAN_CHANGE_RESPONSE, "Follow-up answer"])
        services = make_services(factory, provider=provider, cache_store=store)

        opening = _run("plan_change", _plan_change_body(trip), services)
        assert opening["cached"] is False
        assert (store.gets, store.puts) == (1, 1)

        history = [
            {"role": "assistant", "content": opening["result"]["text"]},
            {"role": "user", "content": "Anything cheaper?"},
        ]
        follow_up = _run("plan_change", _plan_change_body(trip, history), services)

        assert follow_up["cached"] is False
        assert len(provider.calls) == 2
        assert (store.gets, store.puts) == (1, 1)

        reopened = _run("plan_change", _plan_change_body(trip), services)
        assert reopened["cached"] is True
        assert reopened["result"] == opening["result"]

    def test_follow_up_sends_history_after_opening_message(self):
        """The provider sees the opening message then the history."""
        _, trip, provider, services = _make_env()
        history = [
            {"role": "assistant", "content": "Try Lake Villa."},
            {"role": "user", "content": "Anything cheaper?"},
        ]
        _run("plan_change", _plan_change_body(trip, history), services)

        messages = provider.calls[0]["messages"]
        assert [m["role"] for m in messages] == ["user", "assistant", "user"]
        assert "Change request: Somewhere quieter" in messages[0]["content"]
        assert messages[2]["content"] == "Anything cheaper?"

    def test_plan_change_result_structure(self):
        """Plan change results carry text and options."""
        provider = FakeProvider(responses=[PLAN_CHANGE_RESPONSE])
        _, trip, _, services = _make_env(provider=provider)

        response = _run("plan_change", _plan_change_body(trip), services)

        assert response["result"]["text"] == "Here are quieter options."
        assert response["result"]["options"][0]["name"] == "Lake Villa"
        assert response["result"]["options"][0]["applyData"] == {}

    def test_destination_falls_back_to_trip_then_unknown(self):
        """The prompt uses the trip destination, or Unknown."""
        factory = make_session_factory()
        with_destination = seed_trip(factory)
        without_destination = seed_trip(factory, destination=None)
        provider = FakeProvider()
        services = make_services(factory, provider=provider)

        _run("plan_change", _plan_change_body(with_destination), services)
        _run("plan_change", _plan_change_body(without_destination), services)

        assert "trip to Orlando, Florida." in provider.calls[0]["messages"][0]["content"]
        assert "trip to Unknown." in provider.calls[1]["messages"][0]["content"]


class TestStoreOutage:
    """An unavailable cache degrades to fresh provider calls."""

    def test_requests_succeed_without_cache(self):
        """Every request reaches the provider while the store is down."""
        store = FailingCacheStore()
        _, trip, provider, services = _make_env(cache_store=store)
        body = {"trip_id": trip["trip_id"], "plan_version_id": trip["plan_ids"][0]}

        first = _run("optimization", body, services)
        second = _run("optimization", body, services)

        assert first["cached"] is False
        assert second["cached"] is False
        assert first["result"] == "Answer 1"
        assert len(provider.calls) == 2
        assert (store.gets, store.puts) == (2, 2)


# =============================================================================
# Validation and context errors
# =============================================================================


class TestFailures:
    def test_missing_fields_rejected_before_provider(self):
        """Blank required fields fail validation."""
        _, _, provider, services = _make_env()
        with pytest.raises(ValidationError):
            _run("research", {"query": "pizza", "type": None}, services)
        assert provider.calls == []

    def test_invalid_research_type(self):
        """Research types are checked."""
        _, _, _, services = _make_env()
        with pytest.raises(ValidationError):
            _run("research", {"query": "pizza", "type": "nightclub"}, services)

    def test_plan_from_other_trip_not_found(self):
        """A plan of another trip is not found."""
        factory, trip, provider, services = _make_env()
        other = seed_trip(factory)
        with pytest.raises(NotFoundError):
            _run("optimization", {"trip_id": trip["trip_id"], "plan_version_id": other["plan_ids"][0]}, services)
        assert provider.calls == []

    def test_other_users_trip_not_found(self):
        """Another user's trip is not found."""
        factory, _, provider, services = _make_env()
        foreign = seed_trip(factory, owner_id=OTHER_USER_ID)
        with pytest.raises(NotFoundError):
            _run("comparison", {"trip_id": foreign["trip_id"]}, services)
        with pytest.raises(NotFoundError):
            _run("research", {"query": "pizza", "type": "restaurant", "trip_id": foreign["trip_id"]}, services)
        assert provider.calls == []

    def test_comparison_unknown_plan_id(self):
        """Unknown plan ids are not found."""
        _, trip, _, services = _make_env()
        with pytest.raises(NotFoundError):
            _run("comparison", {"trip_id": trip["trip_id"], "plan_version_ids": ["nope", trip["plan_ids"][0]]}, services)

    def test_comparison_needs_two_plans(self):
        """Comparing a single plan is rejected."""
        _, trip, provider, services = _make_env()
        with pytest.raises(ValidationError):
            _run("comparison", {"trip_id": trip["trip_id"], "plan_version_ids": [trip["plan_ids"][0]]}, services)
        assert provider.calls == []


# =============================================================================
# Packing
# =============================================================================


def _packing_body(trip, save_to_trip=True):
    return {
        "destination": "Florida",
        "start_date": "2026-07-20",
        "end_date": "2026-08-03",
        "traveller_count": None,
        "activities": ["boat trip"],
        "itinerary": None,
        "trip_id": trip["trip_id"],
        "save_to_trip": save_to_trip,
    }


class TestPacking:
    def test_items_saved_in_order(self):
        """Saved items keep the generated order and start unpacked."""
        provider = FakeProvider(responses=[PACKING_RESPONSE])
        factory, trip, _, services = _make_env(provider=provider)

        response = _run("packing", _packing_body(trip), services)

        assert response["saved"] is True
        assert response["items_count"] == 2
        assert response["cached"] is False
        with factory() as session:
            rows = session.execute(
                select(PackingItemModel).order_by(PackingItemModel.sort_order)
            ).scalars().all()
            assert [(r.name, r.sort_order, r.packed) for r in rows] == [
                ("T-shirts", 0, False),
                ("Seasickness tablets", 1, False),
            ]
            assert rows[1].linked_to == "Day 5: Boat trip"

    def test_save_failure_keeps_generated_items(self):
        """A failed save still returns the items."""
        provider = FakeProvider(responses=[PACKING_RESPONSE])
        factory = make_session_factory()
        trip = seed_trip(factory)
        services = make_services(
            factory, provider=provider, repository=FailingSaveRepository(factory, USER_ID)
        )

        response = _run("packing", _packing_body(trip), services)

        assert response["saved"] is False
        assert response["save_error"] == "Failed to save items to trip"
        assert [item["name"] for item in response["result"]] == ["T-shirts", "Seasickness tablets"]
        assert response["result"][1]["linkedTo"] == "Day 5: Boat trip"

    def test_not_saved_when_not_requested(self):
        """Nothing is saved without save_to_trip."""
        provider = FakeProvider(responses=[PACKING_RESPONSE])
        _, trip, _, services = _make_env(provider=provider)
        response = _run("packing", _packing_body(trip, save_to_trip=False), services)
        assert response["saved"] is False
        assert "save_error" not in response

    def test_default_traveller_count(self):
        """Two travellers are assumed when none are given."""
        _, trip, provider, services = _make_env()
        _run("packing", _packing_body(trip, save_to_trip=False), services)
        assert "Travellers: 2" in provider.calls[0]["messages"][0]["content"]

    def test_save_requires_trip_id(self):
        """Saving needs a trip."""
        _, trip, _, services = _make_env()
        with pytest.raises(ValidationError):
            _run("packing", {**_packing_body(trip), "trip_id": None}, services)

    def test_packing_is_never_cached(self):
        """Packing never touches the cache."""
        store = FailingCacheStore()
        _, trip, _, services = _make_env(cache_store=store)
        _run("packing", _packing_body(trip, save_to_trip=False), services)
        assert (store.gets, store.puts) == (0, 0)


# =============================================================================
# Link extraction and plan generation
# =============================================================================


class TestLinkExtraction:
    def test_extracts_from_page_text(self):
        """The prompt holds the page text without markup."""
        provider = FakeProvider(responses=['{"name": "Seaside Family Resort", "cost": 1450}'])
        fetcher = FakePageFetcher()
        _, _, _, services = _make_env(provider=provider, page_fetcher=fetcher)

        response = _run("link_extraction", {"url": "https://example.com/resort", "item_type": "accommodation"}, services)

        assert response == {
            "result": {"name": "Seaside Family Resort", "cost": 1450},
            "cached": False,
            "source_url": "https://example.com/resort",
        }
        prompt = provider.calls[0]["messages"][0]["content"]
        assert "Seaside Family Resort" in prompt
        assert "tracking" not in prompt
        assert "<h1>" not in prompt

    def test_short_page_never_reaches_provider(self):
        """Pages with too little text are rejected."""
        provider = FakeProvider()
        fetcher = FakePageFetcher(html="<html><body><p>Loading...</p></body></html>")
        _, _, _, services = _make_env(provider=provider, page_fetcher=fetcher)

        with pytest.raises(ExtractionError):
            _run("link_extraction", {"url": "https://example.com", "item_type": "cost"}, services)
        assert provider.calls == []

    def test_fetch_failure_propagates(self):
        """Fetch failures stop the request."""
        fetcher = FakePageFetcher(error=FetchError("Failed to fetch URL: 404"))
        _, _, provider, services = _make_env(page_fetcher=fetcher)

        with pytest.raises(FetchError):
            _run("link_extraction", {"url": "https://example.com", "item_type": "transport"}, services)
        assert provider.calls == []

    def test_unknown_item_type(self):
        """Item types are checked."""
        _, _, _, services = _make_env()
        with pytest.raises(ValidationError):
            _run("link_extraction", {"url": "https://example.com", "item_type": "restaurant"}, services)


class TestPlanGeneration:
    def test_unparseable_output_yields_empty_plan(self):
        """Unparseable output gives an empty plan."""
        _, _, _, services = _make_env(provider=FakeProvider(responses=["Sorry, no plan today."]))
        response = _run(
            "plan_generation",
            {"destination": "Florida", "start_date": "2026-07-20", "end_date": "2026-08-03"},
            services,
        )
        assert response["result"] == {"days": [], "accommodations": [], "transport": [], "estimated_costs": []}

    def test_end_before_start_rejected(self):
        """The end date must follow the start date."""
        _, _, _, services = _make_env()
        with pytest.raises(ValidationError):
            _run(
                "plan_generation",
                {"destination": "Florida", "start_date": "2026-08-03", "end_date": "2026-07-20"},
                services,
            )


# =============================================================================
# Add to plan
# =============================================================================


def _add_body(trip, suggestion_type, data, plan_index=0):
    return {
        "trip_id": trip["trip_id"],
        "plan_version_id": trip["plan_ids"][plan_index],
        "suggestion_type": suggestion_type,
        "data": data,
    }


def _plan(factory, plan_id):
    return TripRepository(factory, USER_ID).get_plan_version(plan_id)


class TestAddToPlan:
    """Accepted suggestions are written to the plan without a provider call."""

    def test_accommodation_notes_and_apply_data(self):
        """Pros and cons join the notes and applyData overrides the mapped fields."""
        factory, trip, provider, services = _make_env()
        data = {
            "name": "Lake Villa",
            "cost": 1800,
            "description": "Quiet lakeside villa",
            "pros": ["Pool", "Quiet"],
            "cons": ["Far from parks"],
            "applyData": {"check_in": "2026-07-30", "nights": 4},
        }

        response = _run("add_to_plan", _add_body(trip, "accommodation", data), services)

        assert response["success"] is True
        assert response["type"] == "accommodation"
        item = response["item"]
        assert (item["name"], item["type"], item["currency"]) == ("Lake Villa", "hotel", "GBP")
        assert (item["check_in"], item["nights"], item["cost"]) == ("2026-07-30", 4, 1800)
        assert item["notes"] == "Quiet lakeside villa\n\nPros: Pool, Quiet\nCons: Far from parks"
        assert item["amenities"] == []
        assert provider.calls == []
        names = [a["name"] for a in _plan(factory, trip["plan_ids"][0])["accommodations"]]
        assert names == ["Universal Cabana Bay", "Lake Villa"]

    def test_activity_appended_to_day(self):
        """The activity lands after the day's existing activities."""
        factory, trip, _, services = _make_env()
        day = _plan(factory, trip["plan_ids"][0])["itinerary_days"][1]
        data = {
            "name": "Volcano Bay",
            "description": "Water park afternoon",
            "time_start": "13:00",
            "itinerary_day_id": day["id"],
        }

        response = _run("add_to_plan", _add_body(trip, "activity", data), services)

        item = response["item"]
        assert item["day_id"] == day["id"]
        assert (item["sort_order"], item["notes"], item["time_start"]) == (2, "Water park afternoon", "13:00")
        activities = _plan(factory, trip["plan_ids"][0])["itinerary_days"][1]["activities"]
        assert [a["name"] for a in activities] == ["Hagrid's ride", "Lunch", "Volcano Bay"]

    def test_activity_requires_day(self):
        """Activities without a day are rejected before any insert."""
        _, trip, _, services = _make_env()
        with pytest.raises(ValidationError, match="itinerary_day_id is required for activities"):
            _run("add_to_plan", _add_body(trip, "activity", {"name": "Volcano Bay"}), services)

    def test_activity_day_from_other_plan_not_found(self):
        """A day of another plan version is not found."""
        factory, trip, _, services = _make_env()
        day = _plan(factory, trip["plan_ids"][0])["itinerary_days"][0]
        data = {"name": "Beach morning", "itinerary_day_id": day["id"]}

        with pytest.raises(NotFoundError):
            _run("add_to_plan", _add_body(trip, "activity", data, plan_index=1), services)

    def test_cost_reads_category_from_apply_data(self):
        """Costs are estimated, default to misc and only take the category from applyData."""
        _, trip, _, services = _make_env()
        data = {"name": "Airport parking", "applyData": {"category": "transport", "amount": 999}}

        item = _run("add_to_plan", _add_body(trip, "cost", data), services)["item"]

        assert (item["category"], item["item"], item["amount"]) == ("transport", "Airport parking", 0)
        assert item["is_estimated"] is True
        assert item["sort_order"] == 3

    def test_decision_option_from_pros_and_cons(self):
        """A suggestion with pros and cons becomes a pending decision with one option."""
        _, trip, _, services = _make_env()
        data = {"name": "Upgrade to Express passes?", "pros": ["Shorter queues"], "cons": ["£400 extra"]}

        item = _run("add_to_plan", _add_body(trip, "decision", data), services)["item"]

        assert item["title"] == "Upgrade to Express passes?"
        assert item["options"] == [{"name": "Option A", "pros": ["Shorter queues"], "cons": ["£400 extra"]}]
        assert (item["priority"], item["status"]) == ("medium", "pending")
        assert (item["trip_id"], item["plan_version_id"]) == (trip["trip_id"], trip["plan_ids"][0])

    def test_unknown_suggestion_type(self):
        """The error lists the supported suggestion types."""
        _, trip, _, services = _make_env()
        with pytest.raises(ValidationError) as exc_info:
            _run("add_to_plan", _add_body(trip, "restaurant", {"name": "Pizza"}), services)
        assert str(exc_info.value) == (
            "Unknown suggestion_type: restaurant. Must be one of: accommodation, activity, cost, decision"
        )

    def test_insert_failure_is_upstream_error(self):
        """A row the database refuses surfaces as UpstreamError."""
        _, trip, _, services = _make_env()
        with pytest.raises(UpstreamError, match="Failed to add accommodation"):
            _run("add_to_plan", _add_body(trip, "accommodation", {"cost": 100}), services)

    def test_add_to_plan_is_never_cached(self):
        """Neither cache read nor cache write happens."""
        store = FailingCacheStore()
        _, trip, _, services = _make_env(cache_store=store)
        _run("add_to_plan", _add_body(trip, "cost", {"name": "Parking"}), services)
        assert (store.gets, store.puts) == (0, 0)


# =============================================================================
# Graph wiring
# =============================================================================


class TestRouter:
    def test_hit_routes_to_respond(self):
        """A hit skips generation."""
        assert route_after_lookup({"request_id": "r", "cached": True}) == "respond"

    def test_miss_routes_to_generate(self):
        """A miss goes to generation."""
        assert route_after_lookup({"request_id": "r", "cached": False}) == "generate"

    def test_graph_records_transition_trail(self):
        """A miss passes through every node in order."""
        _, trip, _, services = _make_env()
        app = create_ai_request_graph(OPERATIONS["optimization"], services)
        final_state = app.invoke(
            {
                "request_id": "test",
                "operation": "optimization",
                "body": {"trip_id": trip["trip_id"], "plan_version_id": trip["plan_ids"][0]},
                "messages": [],
            }
        )
        nodes = [m["node"] for m in final_state["messages"]]
        assert nodes == ["validate", "fetch_context", "lookup_cache", "generate", "store_result", "respond"]
        assert final_state["cache_key"] is not None
