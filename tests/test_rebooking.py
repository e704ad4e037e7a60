# tests/test_rebooking.py
"""
Test the rebooking matcher.

Verifies greedy first-fit over the next three candidates on the missed
route, and accepting a suggestion.
"""

import pytest

from disruption_engine.errors import NotFound, RebookingRejected
from disruption_engine.network.models import BookingStatus, FlightStatus
from disruption_engine.rebooking import RebookingMatcher

from conftest import at, BASE_TIME


def _stranded(network):
    """A passenger whose DXB->JFK leg missed the JFK->LHR connection."""
    inbound = network.flight("DXB", "JFK", at(-12), at(0, 30), aircraft=network.aircraft())
    missed = network.flight("JFK", "LHR", at(1), at(8), aircraft=network.aircraft())
    first, second = network.itinerary(network.passenger("Maria", "Santos"), inbound, missed)
    first.status = BookingStatus.MISSED_CONNECTION
    second.status = BookingStatus.MISSED_CONNECTION
    network.session.flush()
    return first, second, missed


def _candidates(network, seats_taken, capacity: int = 2):
    """JFK->LHR flights one hour apart, each with `seats_taken[i]` seats sold."""
    flights = []
    for i, taken in enumerate(seats_taken):
        flight = network.flight(
            "JFK", "LHR", at(2 + i), at(9 + i), aircraft=network.aircraft(capacity=capacity)
        )
        network.fill(flight, taken)
        flights.append(flight)
    return flights


class TestSuggest:
    """Tests for suggestion search."""

    def test_third_candidate_with_one_seat(self, network, store):
        """Next two candidates full, one seat left on the third."""
        booking, _, missed = _stranded(network)
        candidates = _candidates(network, [2, 2, 1])

        suggestions = RebookingMatcher(store).suggest(BASE_TIME)

        assert len(suggestions) == 1
        suggestion = suggestions[0]
        assert suggestion.booking_id == booking.id
        assert suggestion.suggested_flight_id == candidates[2].id
        assert suggestion.seats_available == 1
        assert suggestion.missed_flight_id == missed.id
        assert suggestion.passenger_name == "Maria Santos"

    def test_time_saved_can_be_negative(self, network, store):
        """Alternatives arriving after the missed flight report negative savings."""
        _stranded(network)
        _candidates(network, [0])

        suggestion = RebookingMatcher(store).suggest(BASE_TIME)[0]

        # Missed flight arrives at +8h, alternative at +9h
        assert suggestion.time_saved_minutes == -60

    def test_only_first_three_candidates_considered(self, network, store):
        _stranded(network)
        _candidates(network, [2, 2, 2, 0])

        assert RebookingMatcher(store).suggest(BASE_TIME) == []

    def test_candidate_limit_is_configurable(self, network, store):
        _stranded(network)
        candidates = _candidates(network, [2, 2, 2, 0])

        suggestions = RebookingMatcher(store, max_candidates=4).suggest(BASE_TIME)

        assert suggestions[0].suggested_flight_id == candidates[3].id

    def test_departed_and_closed_flights_skipped(self, network, store):
        _stranded(network)
        gone = network.flight("JFK", "LHR", at(-1), at(6), aircraft=network.aircraft())
        cancelled = network.flight(
            "JFK", "LHR", at(2), at(9), aircraft=network.aircraft(), status=FlightStatus.CANCELLED
        )
        ok = network.flight("JFK", "LHR", at(3), at(10), aircraft=network.aircraft())

        suggestion = RebookingMatcher(store).suggest(BASE_TIME)[0]

        assert suggestion.suggested_flight_id == ok.id
        assert suggestion.suggested_flight_id not in {gone.id, cancelled.id}

    def test_other_routes_ignored(self, network, store):
        _stranded(network)
        network.flight("JFK", "CDG", at(2), at(9), aircraft=network.aircraft())
        network.flight("EWR", "LHR", at(2), at(9), aircraft=network.aircraft())

        assert RebookingMatcher(store).suggest(BASE_TIME) == []

    def test_missed_without_onward_leg(self, network, store):
        flight = network.flight("JFK", "LHR", at(1), at(8))
        network.booking(network.passenger(), flight, status=BookingStatus.MISSED_CONNECTION)
        _candidates(network, [0])

        assert RebookingMatcher(store).suggest(BASE_TIME) == []

    def test_suggest_is_read_only(self, network, store):
        booking, onward, _ = _stranded(network)
        _candidates(network, [0])

        RebookingMatcher(store).suggest(BASE_TIME)

        assert booking.status == BookingStatus.MISSED_CONNECTION
        assert onward.status == BookingStatus.MISSED_CONNECTION
        assert len(store.list_bookings()) == 2


class TestAccept:
    """Tests for accepting a rebooking."""

    def test_accept_relinks_itinerary(self, network, store):
        booking, onward, _ = _stranded(network)
        target = _candidates(network, [1])[0]
        matcher = RebookingMatcher(store)

        replacement = matcher.accept(booking.id, target.id, BASE_TIME)

        assert replacement.flight_id == target.id
        assert replacement.status == BookingStatus.REBOOKED
        assert replacement.passenger_id == booking.passenger_id
        assert booking.status == BookingStatus.REBOOKED
        assert booking.next_booking_id == replacement.id
        assert onward.status == BookingStatus.CANCELLED
        assert matcher.seats_available(target) == 0

    def test_accepted_booking_leaves_suggestions(self, network, store):
        booking, _, _ = _stranded(network)
        target = _candidates(network, [0])[0]
        matcher = RebookingMatcher(store)

        matcher.accept(booking.id, target.id, BASE_TIME)

        assert matcher.suggest(BASE_TIME) == []

    def test_full_flight_rejected(self, network, store):
        booking, _, _ = _stranded(network)
        target = _candidates(network, [2])[0]

        with pytest.raises(RebookingRejected):
            RebookingMatcher(store).accept(booking.id, target.id, BASE_TIME)

    def test_wrong_route_rejected(self, network, store):
        booking, _, _ = _stranded(network)
        elsewhere = network.flight("JFK", "CDG", at(2), at(9), aircraft=network.aircraft())

        with pytest.raises(RebookingRejected):
            RebookingMatcher(store).accept(booking.id, elsewhere.id, BASE_TIME)

    def test_departed_flight_rejected(self, network, store):
        booking, onward, _ = _stranded(network)
        airborne = network.flight(
            "JFK", "LHR", at(-1), at(6), aircraft=network.aircraft(), status=FlightStatus.ACTIVE
        )

        with pytest.raises(RebookingRejected):
            RebookingMatcher(store).accept(booking.id, airborne.id, BASE_TIME)

        assert booking.status == BookingStatus.MISSED_CONNECTION
        assert onward.status == BookingStatus.MISSED_CONNECTION

    def test_flight_leaving_now_rejected(self, network, store):
        """Only flights departing strictly after now can be booked."""
        booking, _, _ = _stranded(network)
        boarding = network.flight(
            "JFK", "LHR", at(0), at(7), aircraft=network.aircraft(), status=FlightStatus.BOARDING
        )

        with pytest.raises(RebookingRejected):
            RebookingMatcher(store).accept(booking.id, boarding.id, BASE_TIME)

    def test_connected_booking_rejected(self, network, store):
        flight = network.flight("JFK", "LHR", at(1), at(8))
        booking = network.booking(network.passenger(), flight)
        target = _candidates(network, [0])[0]

        with pytest.raises(RebookingRejected):
            RebookingMatcher(store).accept(booking.id, target.id, BASE_TIME)

    def test_unknown_booking(self, network, store):
        target = _candidates(network, [0])[0]

        with pytest.raises(NotFound):
            RebookingMatcher(store).accept(9999, target.id, BASE_TIME)

    def test_accept_through_service(self, network, session, service):
        booking, _, _ = _stranded(network)
        target = _candidates(network, [0])[0]
        network.commit()

        suggestions = service.suggest_rebookings()
        assert suggestions[0]["suggested_flight_id"] == target.id

        outcome = service.accept_rebooking(booking.id, target.id)

        assert outcome.extra["booking"]["flight_id"] == target.id
        assert service.suggest_rebookings() == []
