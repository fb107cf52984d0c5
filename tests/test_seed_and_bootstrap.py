import pytest

from commodities.models.product import Product
from commodities.models.user import User
from commodities.services.passwords import hash_password, verify_password
from commodities.services.seed import DEMO_PRODUCTS, seed_demo_data
from commodities.services.users import upsert_user


def test_seed_is_skipped_when_users_exist(db):
    assert seed_demo_data(db) is False
    assert db.query(User).count() == 2
    assert db.query(Product).count() == len(DEMO_PRODUCTS)


def test_seeded_passwords_are_hashed(db):
    manager = db.query(User).filter(User.email == "manager@slooze.xyz").first()

    assert manager.password_hash != "manager123"
    assert verify_password("manager123", manager.password_hash)


def test_upsert_user_creates_then_updates(db):
    user, created = upsert_user(
        db,
        email=" Ops@Slooze.xyz ",
        name="Ops",
        role="Store Keeper",
        password="opspass1",
    )
    assert created is True
    assert user.email == "ops@slooze.xyz"

    updated, created_again = upsert_user(
        db,
        email="ops@slooze.xyz",
        name="Ops Lead",
        role="Manager",
        password=None,
    )
    assert created_again is False
    assert updated.id == user.id
    assert updated.role == "Manager"
    assert verify_password("opspass1", updated.password_hash)


def test_upsert_user_requires_password_for_new_user(db):
    with pytest.raises(ValueError):
        upsert_user(db, email="nopass@slooze.xyz", name="No Pass", role="Manager", password=None)


def test_upsert_user_rejects_unknown_role(db):
    with pytest.raises(ValueError):
        upsert_user(db, email="x@slooze.xyz", name="X", role="Admin", password="secret1")


def test_upsert_user_stores_prehashed_password_as_is(db):
    prehashed = hash_password("keeper-secret", rounds=4)

    user, _ = upsert_user(db, email="hashed@slooze.xyz", name="Hashed", role="Store Keeper", password=prehashed)

    assert user.password_hash == prehashed
    assert verify_password("keeper-secret", user.password_hash)
