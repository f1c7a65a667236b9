"""Tests for capability declarations and the capability resolver.

Critical Invariants:
- A type without the operation tag is always RESTRICTED
- A failing business constraint is RESTRICTED even if authorization passes
- Authorization is only consulted after structure and constraint pass
"""

import asyncio
from dataclasses import dataclass

import pytest
from hypothesis import given
from hypothesis import strategies as st

from crudflow import (
    CapabilityContext,
    CapabilityDecision,
    CapabilityPolicy,
    Operation,
    capabilities_of,
    entity,
    resolve_capability,
    supports,
)
from crudflow.core.capability import get_registry

SINGLE_OPERATIONS = [Operation.CREATE, Operation.READ, Operation.UPDATE, Operation.DELETE]

# One entity type per possible capability set
TYPES_BY_CAPABILITIES = {
    Operation(value): entity(Operation(value))(type(f"Tagged{value}", (), {}))
    for value in range(16)
}


@entity
@dataclass
class BareEntity:
    id: int = 0


@entity(Operation.READ | Operation.UPDATE)
@dataclass
class Document:
    id: int = 0


class SpecialDocument(Document):
    pass


class Untagged:
    pass


def _policy(constraint: bool, authorization: bool) -> CapabilityPolicy:
    return CapabilityPolicy(
        constraints={Operation.CRUD: lambda ctx: constraint},
        authorizations={Operation.CRUD: lambda ctx: authorization},
    )


def _resolve(entity_type: type, operation: Operation, policy: CapabilityPolicy | None = None):
    return asyncio.run(resolve_capability(entity_type, operation, policy))


# Declarations


def test_decorator_declares_capability_set():
    assert capabilities_of(Document) == Operation.READ | Operation.UPDATE
    assert supports(Document, Operation.READ)
    assert supports(Document, Operation.UPDATE)
    assert not supports(Document, Operation.CREATE)
    assert not supports(Document, Operation.DELETE)


def test_bare_decorator_supports_everything():
    assert capabilities_of(BareEntity) == Operation.CRUD
    assert all(supports(BareEntity, op) for op in SINGLE_OPERATIONS)


def test_untagged_type_supports_nothing():
    assert capabilities_of(Untagged) == Operation.NONE
    assert not any(supports(Untagged, op) for op in SINGLE_OPERATIONS)


def test_subclass_inherits_capabilities():
    assert supports(SpecialDocument, Operation.UPDATE)
    assert not supports(SpecialDocument, Operation.DELETE)


def test_descriptor_attached_and_registered():
    descriptor = Document.__crud_entity__  # type: ignore[attr-defined]
    assert descriptor.type_name.endswith("Document")
    assert get_registry().get_descriptor(Document) is descriptor
    assert get_registry().is_registered(SpecialDocument)
    assert not get_registry().is_registered(Untagged)


def test_none_is_never_supported():
    assert not supports(BareEntity, Operation.NONE)


def test_operation_label():
    assert [op.label for op in SINGLE_OPERATIONS] == ["Create", "Read", "Update", "Delete"]


# Resolver ordering properties


@given(
    caps=st.sampled_from(list(TYPES_BY_CAPABILITIES)),
    operation=st.sampled_from(SINGLE_OPERATIONS),
    constraint=st.booleans(),
    authorization=st.booleans(),
)
def test_missing_tag_is_always_restricted(caps, operation, constraint, authorization):
    """CRITICAL: No predicate can lift a structural restriction."""
    if operation in caps:
        return
    decision = _resolve(TYPES_BY_CAPABILITIES[caps], operation, _policy(constraint, authorization))
    assert decision is CapabilityDecision.RESTRICTED


@given(
    operation=st.sampled_from(SINGLE_OPERATIONS),
    authorization=st.booleans(),
)
def test_failed_constraint_is_restricted_regardless_of_authorization(operation, authorization):
    decision = _resolve(BareEntity, operation, _policy(False, authorization))
    assert decision is CapabilityDecision.RESTRICTED


@given(operation=st.sampled_from(SINGLE_OPERATIONS))
def test_failed_authorization_is_unauthorized(operation):
    decision = _resolve(BareEntity, operation, _policy(True, False))
    assert decision is CapabilityDecision.UNAUTHORIZED


@given(operation=st.sampled_from(SINGLE_OPERATIONS))
def test_all_checks_passing_is_allowed(operation):
    assert _resolve(BareEntity, operation, _policy(True, True)) is CapabilityDecision.ALLOWED


def test_default_policy_allows_supported_operations():
    assert _resolve(Document, Operation.READ) is CapabilityDecision.ALLOWED
    assert _resolve(Document, Operation.DELETE) is CapabilityDecision.RESTRICTED


def test_authorization_not_evaluated_when_constraint_fails():
    calls = []

    def authorization(ctx):
        calls.append(ctx.operation)
        return True

    policy = CapabilityPolicy(
        constraints={Operation.UPDATE: lambda ctx: False},
        authorizations={Operation.UPDATE: authorization},
    )
    assert _resolve(Document, Operation.UPDATE, policy) is CapabilityDecision.RESTRICTED
    assert calls == []


def test_predicates_not_evaluated_for_unsupported_operation():
    calls = []
    policy = CapabilityPolicy(constraints={Operation.CRUD: lambda ctx: calls.append(ctx) or True})
    assert _resolve(Document, Operation.CREATE, policy) is CapabilityDecision.RESTRICTED
    assert calls == []


# Policy lookup


def test_specific_operation_predicate_wins_over_group():
    policy = CapabilityPolicy(
        authorizations={
            Operation.DELETE: lambda ctx: False,
            Operation.CRUD: lambda ctx: True,
        }
    )
    assert _resolve(BareEntity, Operation.DELETE, policy) is CapabilityDecision.UNAUTHORIZED
    assert _resolve(BareEntity, Operation.READ, policy) is CapabilityDecision.ALLOWED


def test_group_predicate_applies_to_member_operations():
    policy = CapabilityPolicy(
        constraints={Operation.UPDATE | Operation.DELETE: lambda ctx: False},
    )
    assert _resolve(BareEntity, Operation.UPDATE, policy) is CapabilityDecision.RESTRICTED
    assert _resolve(BareEntity, Operation.DELETE, policy) is CapabilityDecision.RESTRICTED
    assert _resolve(BareEntity, Operation.CREATE, policy) is CapabilityDecision.ALLOWED


@pytest.mark.asyncio
async def test_async_predicates_are_awaited():
    async def constraint(ctx):
        await asyncio.sleep(0)
        return True

    async def authorization(ctx):
        await asyncio.sleep(0)
        return False

    policy = CapabilityPolicy(
        constraints={Operation.READ: constraint},
        authorizations={Operation.READ: authorization},
    )
    decision = await resolve_capability(Document, Operation.READ, policy)
    assert decision is CapabilityDecision.UNAUTHORIZED


@pytest.mark.asyncio
async def test_context_is_passed_to_predicates():
    seen = []
    doc = Document(id=7)
    policy = CapabilityPolicy(constraints={Operation.UPDATE: lambda ctx: seen.append(ctx) or True})
    context = CapabilityContext(operation=Operation.UPDATE, entity_type=Document, entity=doc)

    await resolve_capability(Document, Operation.UPDATE, policy, context)

    assert seen == [context]
    assert seen[0].entity is doc


@pytest.mark.asyncio
async def test_default_context_built_when_omitted():
    seen = []
    policy = CapabilityPolicy(authorizations={Operation.READ: lambda ctx: seen.append(ctx) or True})

    await resolve_capability(Document, Operation.READ, policy)

    assert seen[0].operation is Operation.READ
    assert seen[0].entity_type is Document
    assert seen[0].entity is None
