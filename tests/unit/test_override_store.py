"""Unit tests for OverrideStore."""

import asyncio

import pytest

from rolegate.domain.exceptions import Conflict, InvalidArgument, StaleVersion


@pytest.mark.asyncio
async def test_get_without_record_is_empty(override_store) -> None:
    """Absence is not an error."""
    override = await override_store.get("u1")
    assert override.granted == frozenset()
    assert override.denied == frozenset()
    assert override.version == 0


@pytest.mark.asyncio
async def test_set_granted_is_union(override_store, inspection_catalog, epochs) -> None:
    await override_store.set_granted("u1", ["supplier:read"])
    override = await override_store.set_granted("u1", ["supplier:manage", "supplier:read"])

    assert override.granted == {"supplier:read", "supplier:manage"}
    assert override.version == 2
    assert epochs.current == 2


@pytest.mark.asyncio
async def test_set_denied_removes_from_granted(override_store, inspection_catalog) -> None:
    """Mutual exclusivity on write: a new denial drops the grant."""
    await override_store.set_granted("u1", ["inspection:write", "supplier:read"])
    await override_store.set_denied("u1", ["inspection:write"])

    override = await override_store.get("u1")
    assert "inspection:write" not in override.granted
    assert override.denied == {"inspection:write"}
    assert override.granted == {"supplier:read"}
    assert override.overlap == frozenset()


@pytest.mark.asyncio
async def test_denied_pattern_removes_covered_grants(override_store, inspection_catalog) -> None:
    await override_store.set_granted("u1", ["supplier:read", "supplier:manage", "report:read"])
    override = await override_store.set_denied("u1", ["supplier:*"])

    assert override.granted == {"report:read"}
    assert override.denied == {"supplier:*"}


@pytest.mark.asyncio
async def test_grant_of_denied_permission_stays_denied(override_store, inspection_catalog, epochs) -> None:
    await override_store.set_denied("u1", ["inspection:write"])
    epoch_before = epochs.current

    override = await override_store.set_granted("u1", ["inspection:write"])

    assert override.granted == frozenset()
    assert override.denied == {"inspection:write"}
    assert override.version == 1
    assert epochs.current == epoch_before


@pytest.mark.asyncio
async def test_set_granted_unknown_permission(override_store, inspection_catalog) -> None:
    with pytest.raises(InvalidArgument, match="ghost:read"):
        await override_store.set_granted("u1", ["ghost:read"])
    assert (await override_store.get("u1")).version == 0


@pytest.mark.asyncio
async def test_set_granted_rejects_empty_user(override_store, inspection_catalog) -> None:
    with pytest.raises(InvalidArgument, match="user_id"):
        await override_store.set_granted("", ["supplier:read"])


@pytest.mark.asyncio
async def test_remove_entries(override_store, inspection_catalog) -> None:
    await override_store.set_granted("u1", ["supplier:read", "report:read"])
    await override_store.set_denied("u1", ["inspection:write"])

    override = await override_store.remove("u1", ["report:read"], "granted")
    assert override.granted == {"supplier:read"}

    override = await override_store.remove("u1", ["inspection:write"], "denied")
    assert override.denied == frozenset()


@pytest.mark.asyncio
async def test_clear_one_kind_or_both(override_store, inspection_catalog) -> None:
    await override_store.set_granted("u1", ["supplier:read"])
    await override_store.set_denied("u1", ["inspection:write"])

    override = await override_store.clear("u1", "granted")
    assert override.granted == frozenset()
    assert override.denied == {"inspection:write"}

    await override_store.set_granted("u1", ["supplier:read"])
    override = await override_store.clear("u1")
    assert override.is_empty()


@pytest.mark.asyncio
async def test_clear_invalid_kind(override_store) -> None:
    with pytest.raises(InvalidArgument, match="kind"):
        await override_store.clear("u1", "revoked")


@pytest.mark.asyncio
async def test_stale_override_version(override_store, inspection_catalog) -> None:
    await override_store.set_granted("u1", ["supplier:read"])
    with pytest.raises(StaleVersion):
        await override_store.set_denied("u1", ["supplier:read"], expected_version=0)


@pytest.mark.asyncio
async def test_concurrent_first_writes_one_wins(override_store, inspection_catalog) -> None:
    results = await asyncio.gather(
        override_store.set_granted("u1", ["supplier:read"], expected_version=0),
        override_store.set_denied("u1", ["report:read"], expected_version=0),
        return_exceptions=True,
    )
    assert sum(isinstance(r, Conflict) for r in results) == 1
    assert (await override_store.get("u1")).version == 1


@pytest.mark.asyncio
async def test_override_mutation_advances_only_user_epoch_when_scoped(
    uow_factory, scoped_epochs, inspection_catalog
) -> None:
    from rolegate.application.services import OverrideStore

    store = OverrideStore(uow_factory, scoped_epochs)
    other_before = scoped_epochs.stamp("u2", [])

    await store.set_granted("u1", ["supplier:read"])

    assert scoped_epochs.stamp("u2", []) == other_before
    assert scoped_epochs.stamp("u1", []) > other_before


@pytest.mark.asyncio
async def test_concurrent_first_writes_lose_at_repository_write(
    yielding_override_store, inspection_catalog
) -> None:
    """Both writers see no record (version 0); only one insert is accepted."""
    results = await asyncio.gather(
        yielding_override_store.set_granted("u1", ["supplier:read"]),
        yielding_override_store.set_denied("u1", ["report:read"]),
        return_exceptions=True,
    )

    assert sorted(type(r).__name__ for r in results) == ["Override", "StaleVersion"]
    assert (await yielding_override_store.get("u1")).version == 1
