import dataclasses
from types import MappingProxyType

import pytest

from grocer_client.core.exceptions import (
    BusinessError,
    SessionExpiredError,
    TransportError,
)
from grocer_client.core.types import (
    Failure,
    FailureKind,
    RequestDescriptor,
    Success,
    is_session_expired,
)


@pytest.mark.unit
def test_descriptor_defaults_and_method_normalization() -> None:
    request = RequestDescriptor("/products", "post", data={"name": "Apples"})

    assert request.method == "POST"
    assert request.retried is False
    assert request.params is None


@pytest.mark.unit
def test_descriptor_freezes_mappings_and_fields() -> None:
    params = {"page": 1}
    request = RequestDescriptor("/products", params=params, headers={"X-Trace": "1"})

    assert isinstance(request.params, MappingProxyType)
    assert isinstance(request.headers, MappingProxyType)
    params["page"] = 2  # caller's dict does not leak into the descriptor
    assert request.params["page"] == 1
    with pytest.raises(dataclasses.FrozenInstanceError):
        request.url = "/cart"  # type: ignore[misc]


@pytest.mark.unit
@pytest.mark.parametrize(
    ("kwargs", "exc"),
    [
        ({"url": ""}, ValueError),
        ({"url": "   "}, ValueError),
        ({"url": 42}, TypeError),
        ({"url": "/x", "method": "FETCH"}, ValueError),
        ({"url": "/x", "method": None}, TypeError),
        ({"url": "/x", "retried": "yes"}, TypeError),
    ],
)
def test_descriptor_rejects_invalid_fields(kwargs, exc) -> None:
    with pytest.raises(exc):
        RequestDescriptor(**kwargs)


@pytest.mark.unit
@pytest.mark.parametrize("data", [{"when": object()}, {"ratio": float("nan")}])
def test_descriptor_rejects_body_that_cannot_be_sent_as_json(data) -> None:
    with pytest.raises(TypeError, match="JSON-serializable"):
        RequestDescriptor("/cart", "POST", data=data)


@pytest.mark.unit
def test_mark_retried_returns_flagged_copy() -> None:
    original = RequestDescriptor("/cart", "GET", params={"id": 7})

    replay = original.mark_retried()

    assert replay.retried is True
    assert original.retried is False
    assert dataclasses.replace(replay, retried=False) == original
    assert replay.mark_retried() is replay


@pytest.mark.unit
def test_failure_kind_and_detail_follow_the_error() -> None:
    business = Failure(BusinessError(4001, "Out of stock"))
    expired = Failure(SessionExpiredError(3005, "Access token expired"))
    transport = Failure(TransportError("boom", status_code=502, data="Bad Gateway"))

    assert business.kind is FailureKind.BUSINESS
    assert business.detail == {"code": 4001, "message": "Out of stock"}
    assert expired.kind is FailureKind.SESSION_EXPIRED
    assert transport.kind is FailureKind.TRANSPORT
    assert transport.detail == {"message": "boom", "status": 502, "data": "Bad Gateway"}


@pytest.mark.unit
def test_is_session_expired_only_matches_reserved_failure() -> None:
    assert is_session_expired(Failure(SessionExpiredError(3005)))
    assert not is_session_expired(Failure(BusinessError(3005)))
    assert not is_session_expired(Success({"code": 3005}))


@pytest.mark.unit
def test_degrade_keeps_code_and_message_but_drops_expiry_kind() -> None:
    expired = SessionExpiredError(3005, "Access token expired")

    degraded = expired.degrade()

    assert type(degraded) is BusinessError
    assert degraded.kind is FailureKind.BUSINESS
    assert (degraded.code, degraded.message) == (3005, "Access token expired")
    assert degraded.__cause__ is expired
