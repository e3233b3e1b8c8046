import pytest

from carhire.exceptions import InvalidInputError, PermissionDeniedError
from carhire.services.feedback_service import FeedbackService
from carhire.services.violation_service import ViolationService
from carhire.utils.constants import ViolationStatus
from conftest import make_location, make_user, make_vehicle


def put_reservation(store, identity, status="active"):
    return store.insert("reservations", {
        "user_id": identity.user_id, "vehicle_id": make_vehicle(store), "location_id": make_location(store),
        "start_date": "2030-01-01", "end_date": "2030-01-03", "total_price": "100.00", "status": status,
    })["id"]


@pytest.mark.parametrize("rating", ["", "0", "6", None])
def test_feedback_needs_a_rating(store, user, rating):
    with pytest.raises(InvalidInputError):
        FeedbackService.submit(user, rating, "Great", store=store)


def test_feedback_on_own_reservation(store, user, admin):
    rid = put_reservation(store, user)
    fb = FeedbackService.submit(user, "5", "  Great car ", reservation_id=rid, store=store)
    assert fb.rating == 5 and fb.comment == "Great car"

    rows = FeedbackService.list_feedback(admin, store=store)
    assert rows[0]["author"] == "Alice"


def test_feedback_on_someone_elses_reservation(store, user):
    rid = put_reservation(store, make_user(store, "bob"))
    with pytest.raises(PermissionDeniedError):
        FeedbackService.submit(user, 4, reservation_id=rid, store=store)
    assert store.count("feedback") == 0


def test_violation_report_lifecycle(store, user, admin):
    rid = put_reservation(store, user)
    v = ViolationService.report(user, "Scratched door", reservation_id=rid, store=store)
    assert v.status == ViolationStatus.PENDING

    updated = ViolationService.update_status(admin, v.id, "Resolved", store=store)
    assert updated.status == ViolationStatus.RESOLVED
    assert ViolationService.list_violations(admin, store=store)[0]["reporter"] == "Alice"

    with pytest.raises(InvalidInputError):
        ViolationService.update_status(admin, v.id, "escalated", store=store)
    with pytest.raises(PermissionDeniedError):
        ViolationService.update_status(user, v.id, "dismissed", store=store)


def test_violation_needs_description_and_active_reservation(store, user):
    with pytest.raises(InvalidInputError):
        ViolationService.report(user, "   ", store=store)
    rid = put_reservation(store, user, status="completed")
    with pytest.raises(InvalidInputError, match="active"):
        ViolationService.report(user, "Late return", reservation_id=rid, store=store)
