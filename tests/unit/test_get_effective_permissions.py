"""Unit tests for GetEffectivePermissionsUseCase."""

from contextlib import asynccontextmanager

import pytest

from rolegate.application.services import (
    OverrideStore,
    PermissionCatalog,
    PermissionResolver,
    ResolutionCache,
    RoleStore,
)
from rolegate.application.use_cases.get_effective_permissions import GetEffectivePermissionsUseCase
from rolegate.domain.exceptions import InvalidArgument


class CountingFactory:
    """UoW factory that counts how many units of work were opened."""

    def __init__(self, inner) -> None:
        self._inner = inner
        self.opened = 0

    @asynccontextmanager
    async def __call__(self):
        self.opened += 1
        async with self._inner() as uow:
            yield uow


@pytest.fixture
def services(uow_factory, scoped_epochs):
    counting = CountingFactory(uow_factory)
    cache = ResolutionCache(PermissionResolver(uow_factory, scoped_epochs), scoped_epochs)
    return {
        "catalog": PermissionCatalog(uow_factory, scoped_epochs),
        "roles": RoleStore(uow_factory, scoped_epochs),
        "overrides": OverrideStore(uow_factory, scoped_epochs),
        "use_case": GetEffectivePermissionsUseCase(counting, cache, scoped_epochs),
        "counting": counting,
    }


@pytest.mark.asyncio
async def test_catalog_loaded_once_while_epoch_unchanged(services) -> None:
    await services["catalog"].register("inspection:read", "View inspections")
    await services["roles"].create_role("viewer", "Viewer", ["inspection:read"])
    use_case = services["use_case"]

    first = await use_case.execute("u1", ["viewer"])
    second = await use_case.execute("u2", ["viewer"])

    assert [p.name for p in first] == ["inspection:read"]
    assert second == first
    assert services["counting"].opened == 1


@pytest.mark.asyncio
async def test_role_and_override_edits_do_not_reload_catalog(services) -> None:
    await services["catalog"].register("inspection:read", "View inspections")
    await services["catalog"].register("report:read", "View reports")
    await services["roles"].create_role("viewer", "Viewer", ["inspection:read"])
    use_case = services["use_case"]
    await use_case.execute("u1", ["viewer"])

    await services["overrides"].set_granted("u1", ["report:read"])
    result = await use_case.execute("u1", ["viewer"])

    assert [p.name for p in result] == ["inspection:read", "report:read"]
    assert services["counting"].opened == 1


@pytest.mark.asyncio
async def test_catalog_changes_reload_map(services) -> None:
    catalog = services["catalog"]
    await catalog.register("inspection:read", "View inspections")
    await services["roles"].create_role("viewer", "Viewer", ["inspection:*"])
    use_case = services["use_case"]
    await use_case.execute("u1", ["viewer"])

    await catalog.register("inspection:write", "Edit inspections")
    await catalog.update("inspection:read", description="Read inspections")
    result = await use_case.execute("u1", ["viewer"])

    assert [(p.name, p.description) for p in result] == [
        ("inspection:read", "Read inspections"),
        ("inspection:write", "Edit inspections"),
    ]
    assert services["counting"].opened == 2


@pytest.mark.asyncio
async def test_empty_result_skips_catalog_load(services) -> None:
    assert await services["use_case"].execute("u1", []) == []
    assert services["counting"].opened == 0


@pytest.mark.asyncio
async def test_rejects_blank_user(services) -> None:
    with pytest.raises(InvalidArgument):
        await services["use_case"].execute("", ["viewer"])
