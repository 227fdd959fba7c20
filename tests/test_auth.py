"""Tests for the role gate and user service."""

from __future__ import annotations

import httpx
import pytest
from kungfu import Ok

from storefront._errors import ErrorKind
from storefront.auth import (
    FULFILLMENT_ROLES,
    Identity,
    Role,
    RoleGate,
    SupabaseIdentityProvider,
    UserService,
    require_role,
)

from conftest import ADMIN, CUSTOMER, WAREHOUSE, load_user


@pytest.fixture
def gate(identity, user_store) -> RoleGate:
    return RoleGate(identity, user_store)


@pytest.fixture
def users(user_store) -> UserService:
    return UserService(user_store)


class TestRoleGate:
    async def test_no_token_is_unauthenticated(self, gate):
        result = await gate.authorize(None, FULFILLMENT_ROLES)
        assert result.unwrap_err().kind is ErrorKind.UNAUTHENTICATED

    async def test_unknown_token_is_unauthenticated(self, gate):
        result = await gate.authorize("tok_expired", FULFILLMENT_ROLES)
        assert result.unwrap_err().kind is ErrorKind.UNAUTHENTICATED

    async def test_session_without_profile_is_forbidden(self, gate):
        result = await gate.authorize("tok_new")
        assert result.unwrap_err().kind is ErrorKind.FORBIDDEN

    async def test_wrong_role_is_forbidden(self, gate):
        result = await gate.authorize("tok_customer", FULFILLMENT_ROLES)
        assert result.unwrap_err().kind is ErrorKind.FORBIDDEN

    @pytest.mark.parametrize("token", ["tok_warehouse", "tok_admin"])
    async def test_fulfillment_roles_pass(self, gate, token):
        user = (await gate.authorize(token, FULFILLMENT_ROLES)).unwrap()
        assert user.role in FULFILLMENT_ROLES

    async def test_any_signed_in_user(self, gate):
        user = (await gate.authorize("tok_customer")).unwrap()
        assert user.id == CUSTOMER

    async def test_identity_outage_is_upstream(self, gate):
        result = await gate.authorize("tok_broken")
        assert result.unwrap_err().kind is ErrorKind.UPSTREAM_FAILURE

    async def test_optional_caller(self, gate):
        assert await gate.optional_caller(None) == Ok(None)
        assert (await gate.optional_caller("tok_customer")).unwrap().id == CUSTOMER
        assert (await gate.optional_caller("tok_bad")).unwrap_err().kind is ErrorKind.UNAUTHENTICATED

    async def test_gate_never_writes(self, gate, user_store):
        await gate.authorize("tok_new")
        assert (await user_store.get("u_new")).unwrap() is None

    async def test_require_role(self, user_store):
        warehouse = await load_user(user_store, WAREHOUSE)
        assert require_role(warehouse, FULFILLMENT_ROLES).unwrap() == warehouse
        assert require_role(warehouse, {Role.ADMIN}).unwrap_err().kind is ErrorKind.FORBIDDEN


class TestUserService:
    async def test_ensure_profile_creates_with_default_role(self, users, user_store):
        identity = Identity(user_id="u_new", email="newbie@example.com", auth_type="google")

        user = (await users.ensure_profile(identity, name="Newbie")).unwrap()

        assert user.role is Role.USER
        assert user.name == "Newbie"
        assert user.auth_type == "google"
        stored = (await user_store.get("u_new")).unwrap()
        assert stored.role is Role.USER

    async def test_ensure_profile_returns_existing(self, users):
        identity = Identity(user_id=WAREHOUSE, email=f"{WAREHOUSE}@example.com")

        user = (await users.ensure_profile(identity)).unwrap()

        assert user.role is Role.WAREHOUSE

    async def test_ensure_profile_is_idempotent(self, users):
        identity = Identity(user_id="u_new", email="newbie@example.com")
        first = (await users.ensure_profile(identity)).unwrap()
        second = (await users.ensure_profile(identity)).unwrap()
        assert first.id == second.id
        assert first.name == "newbie"

    async def test_admin_sets_role(self, users, user_store):
        admin = await load_user(user_store, ADMIN)

        user = (await users.set_role(admin, CUSTOMER, "warehouse")).unwrap()

        assert user.role is Role.WAREHOUSE
        assert (await load_user(user_store, CUSTOMER)).role is Role.WAREHOUSE

    async def test_legacy_customer_role(self, users, user_store):
        admin = await load_user(user_store, ADMIN)
        user = (await users.set_role(admin, WAREHOUSE, "customer")).unwrap()
        assert user.role is Role.USER

    @pytest.mark.parametrize("actor_id", [CUSTOMER, WAREHOUSE])
    async def test_non_admin_is_forbidden(self, users, user_store, actor_id):
        actor = await load_user(user_store, actor_id)

        result = await users.set_role(actor, CUSTOMER, "admin")

        assert result.unwrap_err().kind is ErrorKind.FORBIDDEN
        assert (await load_user(user_store, CUSTOMER)).role is Role.USER

    async def test_invalid_role(self, users, user_store):
        admin = await load_user(user_store, ADMIN)
        result = await users.set_role(admin, CUSTOMER, "overlord")
        assert result.unwrap_err().kind is ErrorKind.INVALID_REQUEST

    async def test_unknown_target(self, users, user_store):
        admin = await load_user(user_store, ADMIN)
        result = await users.set_role(admin, "u_ghost", "manager")
        assert result.unwrap_err().kind is ErrorKind.NOT_FOUND

    async def test_update_profile_writes_only_given_fields(self, users, user_store):
        customer = await load_user(user_store, CUSTOMER)
        (await users.update_profile(customer, {"phone": "+91 90000 00000"})).unwrap()

        user = (await users.update_profile(customer, {"name": " Asha ", "default_address_id": ""})).unwrap()

        assert (user.name, user.phone, user.default_address_id) == ("Asha", "+91 90000 00000", None)
        stored = await load_user(user_store, CUSTOMER)
        assert (stored.name, stored.phone, stored.default_address_id) == ("Asha", "+91 90000 00000", None)

    async def test_update_profile_rejects_other_fields(self, users, user_store):
        customer = await load_user(user_store, CUSTOMER)

        result = await users.update_profile(customer, {"role": "admin"})

        assert result.unwrap_err().kind is ErrorKind.INVALID_REQUEST
        assert (await load_user(user_store, CUSTOMER)).role is Role.USER

    async def test_update_profile_needs_a_field(self, users, user_store):
        customer = await load_user(user_store, CUSTOMER)
        result = await users.update_profile(customer, {})
        assert result.unwrap_err().kind is ErrorKind.INVALID_REQUEST

    async def test_set_default_address(self, users, user_store):
        customer = await load_user(user_store, CUSTOMER)

        user = (await users.set_default_address(customer, "addr_home")).unwrap()

        assert user.default_address_id == "addr_home"
        assert (await load_user(user_store, CUSTOMER)).default_address_id == "addr_home"

    @pytest.mark.parametrize("address_id", [None, ""])
    async def test_default_address_is_required(self, users, user_store, address_id):
        customer = await load_user(user_store, CUSTOMER)

        result = await users.set_default_address(customer, address_id)

        error = result.unwrap_err()
        assert error.kind is ErrorKind.INVALID_REQUEST
        assert "Address ID" in error.message


class TestSupabaseIdentityProvider:
    def _provider(self, handler) -> SupabaseIdentityProvider:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return SupabaseIdentityProvider(client, base_url="https://auth.test/", anon_key="anon")

    async def test_resolves_user(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={
                "id": "u_1",
                "email": "a@b.c",
                "app_metadata": {"provider": "google"},
            })

        identity = (await self._provider(handler).resolve("jwt")).unwrap()

        assert identity == Identity(user_id="u_1", email="a@b.c", auth_type="google")
        assert str(seen[0].url) == "https://auth.test/auth/v1/user"
        assert seen[0].headers["apikey"] == "anon"
        assert seen[0].headers["authorization"] == "Bearer jwt"

    async def test_rejected_token_is_no_session(self):
        provider = self._provider(lambda request: httpx.Response(401, json={"msg": "bad jwt"}))
        assert await provider.resolve("jwt") == Ok(None)

    async def test_empty_token_skips_the_call(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("should not be called")

        assert await self._provider(handler).resolve("") == Ok(None)

    async def test_server_error_is_upstream(self):
        provider = self._provider(lambda request: httpx.Response(503))
        result = await provider.resolve("jwt")
        assert result.unwrap_err().kind is ErrorKind.UPSTREAM_FAILURE

    async def test_malformed_payload_is_upstream(self):
        provider = self._provider(lambda request: httpx.Response(200, json={"email": "no id"}))
        result = await provider.resolve("jwt")
        assert result.unwrap_err().kind is ErrorKind.UPSTREAM_FAILURE
