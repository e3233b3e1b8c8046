import logging

from carhire import create_app
from carhire.exceptions import InvalidInputError
from carhire.models.store import Store
from carhire.services import identity as idp
from carhire.utils.constants import Role

logger = logging.getLogger("seeds")


def ensure_user(store: Store, username: str, password: str, full_name: str, admin: bool = False):
    """
    Ensure a profile with `username` exists (idempotent).
    Existing profiles keep their password; the admin role is added if asked for.
    """
    rows = store.select("profiles", {"username": username})
    if rows:
        uid = rows[0]["id"]
    else:
        try:
            uid = idp.register(username, password, full_name=full_name, store=store).user_id
        except InvalidInputError as e:
            logger.error("Could not create %s: %s", username, e.message)
            return None
    if admin and not store.select("user_roles", {"user_id": uid, "role": Role.ADMIN}):
        store.insert("user_roles", {"user_id": uid, "role": Role.ADMIN})
    return uid


def seed_locations(store: Store) -> list[str]:
    if store.count("locations"):
        return [r["id"] for r in store.select("locations", order_by="name")]
    demo = [
        {"name": "Auckland Airport", "address": "Ray Emery Drive", "city": "Auckland", "country": "New Zealand"},
        {"name": "Wellington CBD", "address": "1 Lambton Quay", "city": "Wellington", "country": "New Zealand"},
        {"name": "Christchurch Central", "address": "100 Cashel Street", "city": "Christchurch",
         "country": "New Zealand"},
    ]
    return [store.insert("locations", dict(loc, is_active=True))["id"] for loc in demo]


def seed_vehicles(store: Store, location_ids: list[str]):
    if store.count("vehicles"):
        return
    demo = [
        ("Toyota", "Corolla", 2023, "sedan", "45.00", 5, "automatic", "hybrid"),
        ("Honda", "CR-V", 2022, "suv", "70.00", 5, "automatic", "gasoline"),
        ("Ford", "Ranger", 2021, "truck", "95.00", 5, "manual", "diesel"),
        ("Toyota", "HiAce", 2020, "van", "110.00", 12, "manual", "diesel"),
        ("BMW", "5 Series", 2024, "luxury", "180.00", 5, "automatic", "gasoline"),
        ("Tesla", "Model 3", 2024, "sports", "150.00", 5, "automatic", "electric"),
    ]
    for i, (make, model, year, vtype, rate, seats, transmission, fuel) in enumerate(demo):
        store.insert("vehicles", {
            "make": make, "model": model, "year": year, "type": vtype,
            "price_per_day": rate, "seats": seats, "transmission": transmission, "fuel_type": fuel,
            "is_available": True, "location_id": location_ids[i % len(location_ids)] if location_ids else None,
            "image_url": None, "description": None, "features": ["Bluetooth", "Air conditioning"],
        })


def seed_discounts(store: Store):
    if store.count("discounts"):
        return
    store.insert("discounts", {
        "code": "WELCOME10", "percentage": 10, "description": "Welcome offer",
        "start_date": "2024-01-01", "end_date": "2030-12-31", "is_active": True,
    })


def main():
    app = create_app()
    with app.app_context():
        store = Store.instance()
        with store.transaction():
            ensure_user(store, "staff", "Staff123", "Staff Member", admin=True)
            ensure_user(store, "customer", "Customer123", "Demo Customer")
            seed_vehicles(store, seed_locations(store))
            seed_discounts(store)

        logger.info("Seed complete.")
        logger.info("Admin login:    %s / %s", app.config["DEFAULT_ADMIN_USERNAME"],
                    app.config["DEFAULT_ADMIN_PASSWORD"])
        logger.info("Staff login:    staff / Staff123")
        logger.info("Customer login: customer / Customer123")


if __name__ == "__main__":
    main()
