"""Unit tests for role inheritance and permission sources."""

import pytest

from rolegate.application.services import (
    PermissionResolver,
    ResolutionCache,
    RoleStore,
)
from rolegate.domain.entities import Role
from rolegate.domain.exceptions import Conflict, InvalidArgument, NotFound
from rolegate.domain.value_objects import PermissionSource, SourceKind


async def _viewer_and_inspector(role_store) -> None:
    await role_store.create_role("viewer", "Viewer", ["inspection:read"], priority=10)
    await role_store.create_role(
        "inspector", "Inspector", ["inspection:write"], priority=40, parent="viewer"
    )


@pytest.mark.asyncio
async def test_child_inherits_parent_permissions(role_store, resolver, inspection_catalog) -> None:
    await _viewer_and_inspector(role_store)

    result = await resolver.resolve("u1", ["inspector"])

    assert result.permissions == {"inspection:read", "inspection:write"}
    assert result.primary_role == "inspector"
    assert result.sources_of("inspection:read") == (
        PermissionSource(SourceKind.ROLE, "inspector", "viewer"),
    )
    assert result.sources_of("inspection:write") == (PermissionSource(SourceKind.ROLE, "inspector"),)
    assert result.sources_of("supplier:read") == ()


@pytest.mark.asyncio
async def test_grant_and_role_both_listed_as_sources(
    role_store, override_store, resolver, inspection_catalog
) -> None:
    await _viewer_and_inspector(role_store)
    await role_store.create_role("auditor", "Auditor", ["inspection:read"], priority=20)
    await override_store.set_granted("u1", ["inspection:read", "report:read"])

    result = await resolver.resolve("u1", ["inspector", "auditor"])

    assert result.sources["inspection:read"] == (
        PermissionSource(SourceKind.ROLE, "inspector", "viewer"),
        PermissionSource(SourceKind.ROLE, "auditor"),
        PermissionSource(SourceKind.GRANTED),
    )
    assert result.sources["report:read"] == (PermissionSource(SourceKind.GRANTED),)
    assert list(result.sources) == sorted(result.permissions)


@pytest.mark.asyncio
async def test_denial_applies_to_inherited_permissions(
    role_store, override_store, resolver, inspection_catalog
) -> None:
    await _viewer_and_inspector(role_store)
    await override_store.set_denied("u1", ["inspection:read"])

    result = await resolver.resolve("u1", ["inspector"])

    assert result.permissions == {"inspection:write"}
    assert "inspection:read" not in result.sources


@pytest.mark.asyncio
async def test_inactive_parent_contributes_nothing(role_store, resolver, inspection_catalog) -> None:
    await _viewer_and_inspector(role_store)
    await role_store.set_active("viewer", False)

    result = await resolver.resolve("u1", ["inspector"])

    assert result.permissions == {"inspection:write"}


@pytest.mark.asyncio
async def test_inheritance_stops_at_inactive_middle_ancestor(role_store, resolver, inspection_catalog) -> None:
    await role_store.create_role("base", "Base", ["report:read"])
    await role_store.create_role("viewer", "Viewer", ["inspection:read"], parent="base")
    await role_store.create_role("inspector", "Inspector", ["inspection:write"], parent="viewer")

    assert (await resolver.resolve("u1", ["inspector"])).permissions == {
        "inspection:read",
        "inspection:write",
        "report:read",
    }

    await role_store.set_active("viewer", False)

    assert (await resolver.resolve("u1", ["inspector"])).permissions == {"inspection:write"}


@pytest.mark.asyncio
async def test_inactive_child_inherits_nothing(role_store, resolver, inspection_catalog) -> None:
    await _viewer_and_inspector(role_store)
    await role_store.set_active("inspector", False)

    result = await resolver.resolve("u1", ["inspector"])

    assert result.permissions == frozenset()
    assert result.primary_role is None


@pytest.mark.asyncio
async def test_parent_cycle_rejected(role_store, inspection_catalog, epochs) -> None:
    await _viewer_and_inspector(role_store)
    before = epochs.current

    with pytest.raises(InvalidArgument, match="inherit from itself"):
        await role_store.set_parent("viewer", "inspector")
    with pytest.raises(InvalidArgument):
        await role_store.set_parent("viewer", "viewer")

    assert (await role_store.get("viewer")).parent is None
    assert epochs.current == before


@pytest.mark.asyncio
async def test_create_with_self_as_parent_rejected(role_store, inspection_catalog) -> None:
    with pytest.raises(InvalidArgument):
        await role_store.create_role("viewer", "Viewer", [], parent="viewer")


@pytest.mark.asyncio
async def test_unknown_parent_not_found(role_store, inspection_catalog) -> None:
    with pytest.raises(NotFound, match="ghost"):
        await role_store.create_role("inspector", "Inspector", [], parent="ghost")
    with pytest.raises(NotFound):
        await role_store.get("inspector")

    await role_store.create_role("viewer", "Viewer", [])
    with pytest.raises(NotFound, match="ghost"):
        await role_store.set_parent("viewer", "ghost")


@pytest.mark.asyncio
async def test_parent_with_children_cannot_be_deleted_or_renamed(role_store, inspection_catalog) -> None:
    await _viewer_and_inspector(role_store)

    with pytest.raises(Conflict, match="inspector"):
        await role_store.delete("viewer")
    with pytest.raises(Conflict, match="child roles"):
        await role_store.update("viewer", new_name="reader")

    await role_store.set_parent("inspector", None)
    await role_store.delete("viewer")
    with pytest.raises(NotFound):
        await role_store.get("viewer")


@pytest.mark.asyncio
async def test_clearing_parent_stops_inheritance(role_store, resolver, inspection_catalog) -> None:
    await _viewer_and_inspector(role_store)

    cleared = await role_store.set_parent("inspector", None)

    assert cleared.parent is None
    assert cleared.version == 2
    assert (await resolver.resolve("u1", ["inspector"])).permissions == {"inspection:write"}


@pytest.mark.asyncio
async def test_set_parent_to_current_value_is_noop(role_store, inspection_catalog, epochs) -> None:
    await _viewer_and_inspector(role_store)
    before = epochs.current

    unchanged = await role_store.set_parent("inspector", "viewer")

    assert unchanged.version == 1
    assert epochs.current == before


@pytest.mark.asyncio
async def test_parent_edit_invalidates_scoped_cache_of_children(
    uow_factory, scoped_epochs, inspection_catalog
) -> None:
    """Child entries are keyed by the child's name, so a parent edit must reach them."""
    role_store = RoleStore(uow_factory, scoped_epochs)
    cache = ResolutionCache(PermissionResolver(uow_factory, scoped_epochs), scoped_epochs)
    await _viewer_and_inspector(role_store)
    await role_store.create_role("buyer", "Buyer", ["supplier:read"])

    assert "supplier:manage" not in (await cache.resolve("u1", ["inspector"])).permissions
    buyer_before = await cache.resolve("u2", ["buyer"])

    await role_store.update_permissions("viewer", ["supplier:manage"], "add")

    assert "supplier:manage" in (await cache.resolve("u1", ["inspector"])).permissions
    assert (await cache.resolve("u2", ["buyer"])).permissions == buyer_before.permissions


@pytest.mark.asyncio
async def test_leaf_edit_advances_only_its_own_scoped_epoch(
    uow_factory, scoped_epochs, inspection_catalog
) -> None:
    role_store = RoleStore(uow_factory, scoped_epochs)
    await _viewer_and_inspector(role_store)
    floor = scoped_epochs.catalog_epoch

    await role_store.update_permissions("inspector", ["supplier:read"], "add")

    assert scoped_epochs.catalog_epoch == floor


@pytest.mark.asyncio
async def test_stored_cycle_still_resolves(store, resolver, inspection_catalog) -> None:
    """Rows written outside the role store may loop; resolution still terminates."""
    store.roles["a"] = Role(name="a", description="A", permissions=frozenset({"report:read"}), parent="b")
    store.roles["b"] = Role(name="b", description="B", permissions=frozenset({"supplier:read"}), parent="a")

    result = await resolver.resolve("u1", ["a"])

    assert result.permissions == {"report:read", "supplier:read"}

