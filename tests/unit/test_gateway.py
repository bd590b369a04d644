"""
Unit tests for the persistence gateway (SQLite-backed).
"""

import pytest

from userserver.config import ServerConfig
from userserver.db import GatewayError, UserGateway, create_engine, normalize_database_url
from userserver.models import UserPayload


def payload(name: str = "Ada", email: str = "ada@example.com") -> UserPayload:
    return UserPayload(name=name, email=email)


class TestSchema:

    @pytest.mark.parametrize("url,expected", [
        ("postgres://u:p@db:5432/app", "postgresql+psycopg://u:p@db:5432/app"),
        ("postgresql://u:p@db/app", "postgresql+psycopg://u:p@db/app"),
        ("postgresql+psycopg2://u:p@db/app", "postgresql+psycopg2://u:p@db/app"),
        ("sqlite:///users.db", "sqlite:///users.db"),
    ])
    def test_normalize_database_url(self, url: str, expected: str):
        assert normalize_database_url(url) == expected

    def test_ensure_schema_is_idempotent(self, gateway: UserGateway):
        created = gateway.create(payload())
        gateway.ensure_schema()

        assert gateway.read_one(created.id) == created

    def test_unreachable_database(self, tmp_path):
        missing = tmp_path / "no" / "such" / "dir" / "users.db"
        gw = UserGateway(create_engine(ServerConfig(database_url=f"sqlite:///{missing}")))

        with pytest.raises(GatewayError):
            gw.ensure_schema()


class TestUserGateway:

    def test_create_assigns_id(self, gateway: UserGateway):
        user = gateway.create(payload())

        assert user.id is not None
        assert user.name == "Ada"
        assert user.email == "ada@example.com"

    def test_ids_are_unique(self, gateway: UserGateway):
        first = gateway.create(payload(email="a@example.com"))
        second = gateway.create(payload(email="b@example.com"))

        assert first.id != second.id

    def test_duplicate_email(self, gateway: UserGateway):
        gateway.create(payload())

        with pytest.raises(GatewayError):
            gateway.create(payload(name="Other"))

    def test_read_one(self, gateway: UserGateway):
        created = gateway.create(payload())

        assert gateway.read_one(created.id) == created
        assert gateway.read_one(999999) is None

    def test_read_all(self, gateway: UserGateway):
        assert gateway.read_all() == []

        a = gateway.create(payload(email="a@example.com"))
        b = gateway.create(payload(email="b@example.com"))

        assert sorted(gateway.read_all(), key=lambda u: u.id) == [a, b]

    def test_update(self, gateway: UserGateway):
        created = gateway.create(payload())

        assert gateway.update(created.id, payload("Grace", "grace@example.com")) == 1
        updated = gateway.read_one(created.id)
        assert updated.id == created.id
        assert updated.name == "Grace"
        assert updated.email == "grace@example.com"

    def test_update_same_values_still_counts(self, gateway: UserGateway):
        created = gateway.create(payload())
        assert gateway.update(created.id, payload()) == 1

    def test_update_missing(self, gateway: UserGateway):
        assert gateway.update(999999, payload()) == 0

    def test_update_to_taken_email(self, gateway: UserGateway):
        gateway.create(payload(email="a@example.com"))
        b = gateway.create(payload(email="b@example.com"))

        with pytest.raises(GatewayError):
            gateway.update(b.id, payload(email="a@example.com"))

    def test_delete(self, gateway: UserGateway):
        created = gateway.create(payload())

        assert gateway.delete(created.id) == 1
        assert gateway.delete(created.id) == 0
        assert gateway.read_one(created.id) is None
