"""
Reservation lifecycle:
- booking runs the gate and prices the stay, inserting nothing on failure;
- completing is admin-only and frees the vehicle;
- owners may cancel their own reservations, twice is a no-op;
- completed and cancelled are terminal;
- a failed store write leaves the previous state in place.
"""

from datetime import date
from decimal import Decimal

import pytest

from carhire.exceptions import (
    DataStoreError,
    InvalidDateRangeError,
    InvalidInputError,
    InvalidTransitionError,
    NotAuthenticatedError,
    PermissionDeniedError,
    ReservationNotFoundError,
    VehicleNotFoundError,
    VehicleUnavailableError,
)
from carhire.services.reservation_service import ReservationService
from carhire.utils.constants import ReservationStatus
from conftest import make_location, make_user, make_vehicle

TODAY = date(2024, 6, 1)


def book(store, identity, vid, lid, start="2024-06-01", end="2024-06-04", **kw):
    return ReservationService.create_reservation(identity, vid, start, end, lid, store=store, today=TODAY, **kw)


@pytest.fixture
def fleet(store):
    return make_vehicle(store, rate="50.00"), make_location(store)


def test_booking_prices_and_stores_an_active_reservation(store, user, fleet):
    vid, lid = fleet
    r = book(store, user, vid, lid)
    assert r.status == ReservationStatus.ACTIVE
    assert r.total_price == Decimal("150.00")
    assert r.user_id == user.user_id and r.location_id == lid
    assert not r.notified

    row = store.get("reservations", r.id)
    assert row["start_date"].startswith("2024-06-01")
    # booking leaves the availability flag alone
    assert store.get("vehicles", vid)["is_available"] is True


def test_unauthenticated_booking_inserts_nothing(store, fleet):
    vid, lid = fleet
    with pytest.raises(NotAuthenticatedError):
        book(store, None, vid, lid)
    assert store.count("reservations") == 0


def test_unavailable_vehicle_inserts_nothing(store, user):
    vid = make_vehicle(store, available=False)
    lid = make_location(store)
    with pytest.raises(VehicleUnavailableError):
        book(store, user, vid, lid)
    assert store.count("reservations") == 0


def test_invalid_range_inserts_nothing(store, user, fleet):
    vid, lid = fleet
    with pytest.raises(InvalidDateRangeError):
        book(store, user, vid, lid, start="2024-06-04", end="2024-06-01")
    assert store.count("reservations") == 0


def test_unknown_vehicle(store, user):
    with pytest.raises(VehicleNotFoundError):
        book(store, user, "missing", make_location(store))


def test_inactive_location_is_refused(store, user):
    vid = make_vehicle(store)
    lid = make_location(store, active=False)
    with pytest.raises(InvalidInputError):
        book(store, user, vid, lid)
    assert store.count("reservations") == 0


def test_discount_code_is_recorded_without_changing_total(store, user, fleet):
    vid, lid = fleet
    d = store.insert("discounts", {"code": "SUMMER", "percentage": 20, "start_date": "2024-05-01",
                                   "end_date": "2024-08-31", "is_active": True})
    r = book(store, user, vid, lid, discount_code="summer")
    assert r.discount_id == d["id"]
    assert r.total_price == Decimal("150.00")


def test_unknown_or_expired_discount_code_is_ignored(store, user, fleet):
    vid, lid = fleet
    store.insert("discounts", {"code": "SPRING", "percentage": 10, "start_date": "2024-03-01",
                               "end_date": "2024-05-31", "is_active": True})
    for code in ("NOPE", "spring"):
        r = book(store, user, vid, lid, discount_code=code)
        assert r.discount_id is None
        assert r.total_price == Decimal("150.00")
    assert store.count("reservations") == 2


def test_admin_completes_and_vehicle_becomes_available(store, user, admin, fleet):
    vid, lid = fleet
    r = book(store, user, vid, lid)
    store.update("vehicles", vid, {"is_available": False})

    done = ReservationService.complete_reservation(admin, r.id, store=store)
    assert done.status == ReservationStatus.COMPLETED
    assert store.get("vehicles", vid)["is_available"] is True


def test_owner_cannot_complete(store, user, fleet):
    r = book(store, user, *fleet)
    with pytest.raises(PermissionDeniedError):
        ReservationService.complete_reservation(user, r.id, store=store)
    assert store.get("reservations", r.id)["status"] == ReservationStatus.ACTIVE


def test_owner_cancels_twice_without_error(store, user, fleet):
    r = book(store, user, *fleet)
    first = ReservationService.cancel_reservation(user, r.id, store=store)
    second = ReservationService.cancel_reservation(user, r.id, store=store)
    assert first.status == second.status == ReservationStatus.CANCELLED
    assert first.updated_at == second.updated_at


def test_other_user_cannot_cancel(store, user, fleet):
    r = book(store, user, *fleet)
    mallory = make_user(store, "mallory")
    with pytest.raises(PermissionDeniedError):
        ReservationService.cancel_reservation(mallory, r.id, store=store)
    assert store.get("reservations", r.id)["status"] == ReservationStatus.ACTIVE


def test_admin_may_cancel_any_reservation(store, user, admin, fleet):
    r = book(store, user, *fleet)
    assert ReservationService.cancel_reservation(admin, r.id, store=store).status == ReservationStatus.CANCELLED


@pytest.mark.parametrize("first,then", [
    (ReservationStatus.CANCELLED, ReservationStatus.COMPLETED),
    (ReservationStatus.COMPLETED, ReservationStatus.CANCELLED),
    (ReservationStatus.COMPLETED, ReservationStatus.ACTIVE),
])
def test_terminal_statuses_are_final(store, user, admin, fleet, first, then):
    r = book(store, user, *fleet)
    ReservationService.transition_status(admin, r.id, first, store=store)
    with pytest.raises(InvalidTransitionError):
        ReservationService.transition_status(admin, r.id, then, store=store)
    assert store.get("reservations", r.id)["status"] == first


def test_unknown_status_and_reservation(store, admin, user, fleet):
    r = book(store, user, *fleet)
    with pytest.raises(InvalidInputError):
        ReservationService.transition_status(admin, r.id, "lost", store=store)
    with pytest.raises(ReservationNotFoundError):
        ReservationService.cancel_reservation(admin, "missing", store=store)


def _failing_dump():
    raise OSError("disk full")


def test_failed_write_keeps_previous_status(store, user, admin, fleet, monkeypatch):
    vid, lid = fleet
    r = book(store, user, vid, lid)
    store.update("vehicles", vid, {"is_available": False})

    monkeypatch.setattr(store, "_dump", _failing_dump)
    with pytest.raises(DataStoreError):
        ReservationService.complete_reservation(admin, r.id, store=store)

    assert store.get("reservations", r.id)["status"] == ReservationStatus.ACTIVE
    assert store.get("vehicles", vid)["is_available"] is False


def test_failed_write_on_booking_leaves_no_row(store, user, fleet, monkeypatch):
    monkeypatch.setattr(store, "_dump", _failing_dump)
    with pytest.raises(DataStoreError):
        book(store, user, *fleet)
    assert store.count("reservations") == 0


def test_listings_are_scoped_and_newest_first(store, user, admin, fleet):
    vid, lid = fleet
    older = book(store, user, vid, lid)
    newer = book(store, user, vid, lid, start="2024-07-01", end="2024-07-02")
    ReservationService.cancel_reservation(user, older.id, store=store)
    other = make_user(store, "bob")
    book(store, other, vid, lid)

    mine = ReservationService.reservations_for_user(user, store=store)
    assert [row["reservation"].id for row in mine] == [newer.id, older.id]
    assert mine[0]["vehicle"]["make"] == "Toyota"
    assert mine[0]["location"]["city"] == "Auckland"

    active = ReservationService.reservations_for_user(user, status=ReservationStatus.ACTIVE, store=store)
    assert [row["reservation"].id for row in active] == [newer.id]

    assert len(ReservationService.all_reservations(admin, store=store)) == 3
    with pytest.raises(PermissionDeniedError):
        ReservationService.all_reservations(user, store=store)


def test_get_reservation(store, user, fleet):
    r = book(store, user, *fleet)
    assert ReservationService.get_reservation(r.id, store=store) == r
    with pytest.raises(ReservationNotFoundError):
        ReservationService.get_reservation("missing", store=store)
