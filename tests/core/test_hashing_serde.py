from __future__ import annotations

import pytest

from kvedge.core.errors import ConfigurationError
from kvedge.core.hashing import hash_parts, hash_payload, json_dumps_canonical
from kvedge.core.serde import DEFAULT_SERIALIZER, CanonicalJsonSerializer, PayloadSerializer


def test_canonical_json_is_key_order_insensitive() -> None:
    a = {"b": "2", "a": {"y": 1, "x": None}}
    b = {"a": {"x": None, "y": 1}, "b": "2"}
    assert json_dumps_canonical(a) == json_dumps_canonical(b)
    assert json_dumps_canonical(a) == '{"a":{"x":null,"y":1},"b":"2"}'


def test_canonical_json_keeps_non_ascii() -> None:
    assert json_dumps_canonical({"k": "größe"}) == '{"k":"größe"}'


def test_hash_payload_is_deterministic() -> None:
    assert hash_payload(b"abc") == hash_payload(b"abc")
    assert hash_payload(b"abc") != hash_payload(b"abd")
    assert len(hash_payload(b"")) == 64


def test_hash_parts_is_boundary_sensitive() -> None:
    assert hash_parts(["ab", "c"]) != hash_parts(["a", "bc"])
    assert hash_parts(["ab", b"c"]) == hash_parts([b"ab", "c"])


def test_default_serializer_satisfies_protocol() -> None:
    assert isinstance(DEFAULT_SERIALIZER, PayloadSerializer)
    assert isinstance(DEFAULT_SERIALIZER, CanonicalJsonSerializer)


def test_serializer_round_trip_and_stable_bytes() -> None:
    s = CanonicalJsonSerializer()
    payload = {"settings": {"b": "2", "a": "1"}, "codec": None}

    data = s.serialize(payload)
    assert data == s.serialize(dict(reversed(list(payload.items()))))
    assert s.deserialize(data) == payload


@pytest.mark.parametrize("data", [b"not json", b"\xff\xfe", b"[1, 2]", b'"text"'])
def test_deserialize_rejects_malformed_payloads(data: bytes) -> None:
    with pytest.raises(ConfigurationError):
        CanonicalJsonSerializer().deserialize(data)
