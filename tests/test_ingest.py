"""
Tests for hookrelay/services/ingest.py - token resolution, verification dispatch, persistence.
"""
import uuid
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from hookrelay.errors import AuthenticationError, NotFoundError, PersistenceError, UnknownProviderError
from hookrelay.models.endpoint import Endpoint, ProviderKind
from hookrelay.providers import sign_payload
from hookrelay.services.ingest import IngestCoordinator, group_headers, parse_token

BODY = b'{"a":1}'
NOW = 1_700_000_000


def _headers(provider: str, secret: str, body: bytes = BODY, **extra) -> dict[str, list[str]]:
    signed = sign_payload(provider, secret, body, timestamp=NOW)
    headers = {name.lower(): [value] for name, value in signed.items()}
    headers["content-type"] = ["application/json"]
    for name, value in extra.items():
        headers[name] = value
    return headers


class TestGroupHeaders:
    def test_groups_repeated_names_in_order(self):
        pairs = [("accept", "a"), ("x-tag", "1"), ("x-tag", "2")]
        assert group_headers(pairs) == {"accept": ["a"], "x-tag": ["1", "2"]}
        assert list(group_headers(pairs)) == ["accept", "x-tag"]


class TestParseToken:
    def test_valid(self):
        token = uuid.uuid4()
        assert parse_token(str(token)) == token

    @pytest.mark.parametrize("value", ["", "not-a-uuid", "1234", None])
    def test_invalid(self, value):
        assert parse_token(value) is None


class TestReceive:
    async def test_accepts_and_stores_github_delivery(self, store, settings):
        endpoint = await store.create_endpoint(ProviderKind.GITHUB, "gh")
        coordinator = IngestCoordinator(store, settings)
        headers = _headers("github", "gh", **{"x-multi": ["1", "2"]})

        message = await coordinator.receive(str(endpoint.token), headers, BODY, now=NOW)

        stored = await store.get_message(message.id)
        assert stored.endpoint_id == endpoint.id
        assert stored.body == BODY.decode()
        assert stored.headers["x-multi"] == ["1", "2"]
        assert stored.headers["x-hub-signature-256"] == headers["x-hub-signature-256"]

    @pytest.mark.parametrize("provider", list(ProviderKind))
    async def test_accepts_every_provider(self, store, settings, provider):
        endpoint = await store.create_endpoint(provider, "shared-secret")
        coordinator = IngestCoordinator(store, settings)

        message = await coordinator.receive(
            str(endpoint.token), _headers(provider.value, "shared-secret"), BODY, now=NOW,
        )
        assert message.id is not None

    async def test_unknown_token_is_not_found(self, store, settings):
        coordinator = IngestCoordinator(store, settings)
        with pytest.raises(NotFoundError) as exc:
            await coordinator.receive(str(uuid.uuid4()), {}, BODY)
        assert exc.value.detail == "endpoint not found"

    async def test_malformed_token_looks_like_unknown_token(self, store, settings):
        coordinator = IngestCoordinator(store, settings)
        with pytest.raises(NotFoundError) as exc:
            await coordinator.receive("definitely-not-a-uuid", {}, BODY)
        assert exc.value.detail == "endpoint not found"

    async def test_bad_signature_rejected_and_nothing_stored(self, store, settings):
        endpoint = await store.create_endpoint(ProviderKind.GITHUB, "gh")
        coordinator = IngestCoordinator(store, settings)
        headers = _headers("github", "wrong-secret")

        with pytest.raises(AuthenticationError) as exc:
            await coordinator.receive(str(endpoint.token), headers, BODY, now=NOW)

        assert exc.value.detail == "invalid signature"
        assert exc.value.reason == "signature_mismatch"
        assert await store.list_messages() == []

    async def test_expired_stripe_delivery_rejected(self, store, settings):
        endpoint = await store.create_endpoint(ProviderKind.STRIPE, "whsec")
        coordinator = IngestCoordinator(store, settings)
        headers = _headers("stripe", "whsec")

        with pytest.raises(AuthenticationError) as exc:
            await coordinator.receive(str(endpoint.token), headers, BODY, now=NOW + 3600)
        assert exc.value.reason == "timestamp_expired"

    async def test_stripe_tolerance_comes_from_settings(self, store, settings):
        settings.stripe_tolerance_seconds = 0
        endpoint = await store.create_endpoint(ProviderKind.STRIPE, "whsec")
        coordinator = IngestCoordinator(store, settings)

        message = await coordinator.receive(
            str(endpoint.token), _headers("stripe", "whsec"), BODY, now=NOW + 3600,
        )
        assert message.id is not None

    async def test_unknown_stored_provider_is_distinct_error(self, store, settings):
        endpoint = Endpoint(token=uuid.uuid4(), provider="square", secret="s")
        store.db.add(endpoint)
        await store.db.flush()
        coordinator = IngestCoordinator(store, settings)

        with pytest.raises(UnknownProviderError) as exc:
            await coordinator.receive(str(endpoint.token), {}, BODY)
        assert not isinstance(exc.value, AuthenticationError)
        assert exc.value.provider == "square"

    async def test_persistence_failure_is_server_error(self, store, settings):
        endpoint = await store.create_endpoint(ProviderKind.GITHUB, "gh")
        coordinator = IngestCoordinator(store, settings)

        with patch.object(
            store, "insert_message",
            new=AsyncMock(side_effect=OperationalError("INSERT", {}, Exception("db down"))),
        ):
            with pytest.raises(PersistenceError) as exc:
                await coordinator.receive(str(endpoint.token), _headers("github", "gh"), BODY, now=NOW)

        assert exc.value.http_status == 500
