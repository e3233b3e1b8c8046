from datetime import date

import pytest

from carhire.exceptions import InvalidDateRangeError, InvalidInputError, PermissionDeniedError
from carhire.services.discount_service import DiscountService

PAYLOAD = {"code": "summer24", "percentage": "15", "start_date": "2024-06-01", "end_date": "2024-08-31"}


def test_create_normalises_code(store, admin):
    d = DiscountService.create_discount(admin, PAYLOAD, store=store)
    assert d.code == "SUMMER24"
    assert d.percentage == 15
    assert d.start_date == date(2024, 6, 1)


@pytest.mark.parametrize("changes,error", [
    ({"code": ""}, InvalidInputError),
    ({"percentage": "0"}, InvalidInputError),
    ({"percentage": "101"}, InvalidInputError),
    ({"end_date": ""}, InvalidInputError),
    ({"end_date": "2024-05-01"}, InvalidDateRangeError),
])
def test_invalid_discounts(store, admin, changes, error):
    with pytest.raises(error):
        DiscountService.create_discount(admin, dict(PAYLOAD, **changes), store=store)
    assert store.count("discounts") == 0


def test_codes_are_unique(store, admin):
    DiscountService.create_discount(admin, PAYLOAD, store=store)
    with pytest.raises(InvalidInputError, match="already exists"):
        DiscountService.create_discount(admin, dict(PAYLOAD, code="SUMMER24"), store=store)


def test_find_valid_respects_window_and_active_flag(store, admin):
    d = DiscountService.create_discount(admin, PAYLOAD, store=store)
    assert DiscountService.find_valid("summer24", date(2024, 7, 1), store=store).id == d.id
    with pytest.raises(InvalidInputError):
        DiscountService.find_valid("SUMMER24", date(2024, 9, 1), store=store)

    DiscountService.toggle_active(admin, d.id, store=store)
    with pytest.raises(InvalidInputError):
        DiscountService.find_valid("SUMMER24", date(2024, 7, 1), store=store)


def test_update_and_delete(store, admin, user):
    d = DiscountService.create_discount(admin, PAYLOAD, store=store)
    assert DiscountService.update_discount(admin, d.id, dict(PAYLOAD, percentage="20"), store=store).percentage == 20
    with pytest.raises(PermissionDeniedError):
        DiscountService.delete_discount(user, d.id, store=store)
    DiscountService.delete_discount(admin, d.id, store=store)
    assert DiscountService.list_discounts(store=store) == []
