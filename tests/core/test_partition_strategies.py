from __future__ import annotations

import pytest

from actax.core.errors import SchemaError, UnknownKindError
from actax.core.partition import (
    INFER_FROM_SENTINEL,
    ExplicitWithoutPayload,
    InferFromSentinel,
    derive_partition,
    partition_config_from,
)
from actax.core.payload import NO_PAYLOAD, PayloadKind
from actax.core.schema import ActionSchema
from sample_payloads import Empty

SCHEMAS = [
    ActionSchema({}),
    ActionSchema({"LOG_OUT": NO_PAYLOAD}),
    ActionSchema({"SET_NAME": str}),
    ActionSchema({"SET_NAME": str, "SET_AGE": int, "LOG_OUT": NO_PAYLOAD}),
    ActionSchema({"A": NO_PAYLOAD, "B": NO_PAYLOAD, "C": dict, "D": Empty}),
]


def test_sentinel_partition(user_schema: ActionSchema) -> None:
    p = derive_partition(user_schema)
    assert p.with_payload == ("SET_NAME", "SET_AGE")
    assert p.without_payload == ("LOG_OUT",)
    assert p.kinds == ("SET_NAME", "SET_AGE", "LOG_OUT")
    assert p.payload_type_of("SET_AGE") is int


def test_raw_schemas_are_normalized(user_schema: ActionSchema) -> None:
    raw = {"SET_NAME": str, "SET_AGE": int, "LOG_OUT": NO_PAYLOAD}
    assert derive_partition(raw) == derive_partition(user_schema)
    assert derive_partition(list(raw.items())).without_payload == ("LOG_OUT",)
    with pytest.raises(SchemaError, match="RELOAD"):
        derive_partition(raw, ExplicitWithoutPayload(frozenset({"RELOAD"})))


@pytest.mark.parametrize("schema", SCHEMAS)
def test_partition_is_disjoint_and_complete(schema: ActionSchema) -> None:
    p = derive_partition(schema, INFER_FROM_SENTINEL)
    assert set(p.with_payload).isdisjoint(p.without_payload)
    assert set(p.with_payload) | set(p.without_payload) == set(schema)
    assert p.action_kinds == frozenset(schema)


@pytest.mark.parametrize("schema", SCHEMAS)
def test_partition_is_idempotent(schema: ActionSchema) -> None:
    assert derive_partition(schema) == derive_partition(schema)


def test_empty_schema_partition() -> None:
    p = derive_partition(ActionSchema({}))
    assert p.with_payload == ()
    assert p.without_payload == ()
    assert p.action_kinds == frozenset()


def test_empty_model_payload_is_payload_bearing() -> None:
    p = derive_partition(ActionSchema({"PING": Empty, "LOG_OUT": NO_PAYLOAD}))
    assert p.classify("PING") is PayloadKind.VALUE
    assert p.classify("LOG_OUT") is PayloadKind.NONE


def test_sentinel_rejects_unspecified_descriptors() -> None:
    with pytest.raises(SchemaError, match="'LOG_OUT'"):
        derive_partition(ActionSchema({"SET_NAME": str, "LOG_OUT": None}))


def test_explicit_partition_accepts_unspecified_and_marker() -> None:
    schema = ActionSchema({"SET_NAME": str, "LOG_OUT": None, "RESET": NO_PAYLOAD})
    p = derive_partition(schema, ExplicitWithoutPayload(frozenset({"LOG_OUT", "RESET"})))
    assert p.with_payload == ("SET_NAME",)
    assert p.without_payload == ("LOG_OUT", "RESET")
    assert p.descriptor("LOG_OUT") == NO_PAYLOAD


def test_explicit_matches_sentinel_for_the_same_classification(user_schema: ActionSchema) -> None:
    explicit = derive_partition(user_schema, ExplicitWithoutPayload(frozenset({"LOG_OUT"})))
    assert explicit == derive_partition(user_schema, INFER_FROM_SENTINEL)


def test_explicit_listed_kind_must_exist(user_schema: ActionSchema) -> None:
    with pytest.raises(SchemaError, match="RELOAD"):
        derive_partition(user_schema, ExplicitWithoutPayload(frozenset({"LOG_OUT", "RELOAD"})))


def test_explicit_listed_kind_with_payload_type_conflicts(user_schema: ActionSchema) -> None:
    with pytest.raises(SchemaError, match="listed as payload-less"):
        derive_partition(user_schema, ExplicitWithoutPayload(frozenset({"LOG_OUT", "SET_AGE"})))


def test_explicit_unlisted_marker_conflicts(user_schema: ActionSchema) -> None:
    with pytest.raises(SchemaError, match="missing from the explicit"):
        derive_partition(user_schema, ExplicitWithoutPayload(frozenset()))


def test_explicit_unlisted_unspecified_is_rejected() -> None:
    schema = ActionSchema({"SET_NAME": None})
    with pytest.raises(SchemaError, match="no payload type"):
        derive_partition(schema, ExplicitWithoutPayload(frozenset()))


def test_explicit_names_accept_any_iterable() -> None:
    cfg = ExplicitWithoutPayload(["LOG_OUT", "LOG_OUT"])  # type: ignore[arg-type]
    assert cfg.names == frozenset({"LOG_OUT"})
    assert cfg.strategy == "explicit"
    hash(cfg)


def test_membership_and_lookup(user_schema: ActionSchema) -> None:
    p = derive_partition(user_schema)
    assert "LOG_OUT" in p
    assert "RELOAD" not in p
    assert ["LOG_OUT"] not in p
    with pytest.raises(UnknownKindError) as excinfo:
        p.require("RELOAD")
    assert excinfo.value.kind == "RELOAD"
    assert excinfo.value.known == ("SET_NAME", "SET_AGE", "LOG_OUT")
    with pytest.raises(SchemaError, match="carries no payload"):
        p.payload_type_of("LOG_OUT")


def test_partition_config_from() -> None:
    assert partition_config_from(None) is INFER_FROM_SENTINEL
    assert partition_config_from("sentinel") is INFER_FROM_SENTINEL
    assert isinstance(partition_config_from(None), InferFromSentinel)
    assert partition_config_from(None, ["LOG_OUT"]) == ExplicitWithoutPayload(
        frozenset({"LOG_OUT"})
    )
    assert partition_config_from("EXPLICIT") == ExplicitWithoutPayload(frozenset())
    with pytest.raises(SchemaError, match="do not also list"):
        partition_config_from("sentinel", ["LOG_OUT"])
    with pytest.raises(SchemaError, match="'sentinel' or 'explicit'"):
        partition_config_from("magic")
