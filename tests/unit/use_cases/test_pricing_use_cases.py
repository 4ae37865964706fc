"""Unit tests for pricing rule use cases"""

import pytest
from pydantic import ValidationError

from src.app.use_cases.pricing import (
    DeletePricingRule,
    GetPricingRule,
    ListPricingRules,
    ResolvePrice,
    SetPricingRule,
    SetPricingRuleCommandDTO,
)


def test_blank_path_rejected():
    with pytest.raises(ValidationError):
        SetPricingRuleCommandDTO(path="   ", credits=1)


def test_negative_credits_rejected():
    with pytest.raises(ValidationError):
        SetPricingRuleCommandDTO(path="/a", credits=-1)


@pytest.mark.asyncio
class TestSetPricingRule:

    async def test_creates_rule(self, fake_uow, rule_repo):
        result = await SetPricingRule(fake_uow, rule_repo).execute(
            SetPricingRuleCommandDTO(path="/movies", credits=5, is_folder=True, created_by=1)
        )

        assert result.value.path == "/movies"
        assert result.value.credits == 5
        assert rule_repo.rows["/movies"].is_folder is True
        assert fake_uow.commits == 1

    async def test_updates_existing_rule_in_place(self, fake_uow, rule_repo):
        original = rule_repo.add("/movies", 5, is_folder=True)

        result = await SetPricingRule(fake_uow, rule_repo).execute(
            SetPricingRuleCommandDTO(path="/movies", credits=8, is_folder=True, inheritable=False)
        )

        assert result.value.id == original.id
        assert result.value.credits == 8
        assert result.value.inheritable is False
        assert len(rule_repo.rows) == 1

    async def test_revives_deleted_rule(self, fake_uow, rule_repo):
        original = rule_repo.add("/movies", 5, is_folder=True)
        await DeletePricingRule(fake_uow, rule_repo).execute("/movies")

        result = await SetPricingRule(fake_uow, rule_repo).execute(
            SetPricingRuleCommandDTO(path="/movies", credits=3, created_by=9)
        )

        assert result.value.id == original.id
        assert result.value.created_by == 9
        assert rule_repo.rows["/movies"].deleted_at is None


@pytest.mark.asyncio
class TestReadAndDelete:

    async def test_get_is_exact_only(self, rule_repo):
        rule_repo.add("/movies", 5, is_folder=True)
        use_case = GetPricingRule(rule_repo)

        exact = await use_case.execute("/movies")
        child = await use_case.execute("/movies/x.mp4")

        assert exact.value.credits == 5
        assert child.error.code == "RULE_NOT_FOUND"

    async def test_delete_hides_rule_from_resolution(self, fake_uow, rule_repo, resolver):
        rule_repo.add("/movies", 5, is_folder=True)

        deleted = await DeletePricingRule(fake_uow, rule_repo).execute("/movies")
        resolved = await ResolvePrice(resolver).execute("/movies/x.mp4")

        assert deleted.is_ok()
        assert rule_repo.rows["/movies"].deleted_at is not None
        assert resolved.value.credits == 0
        assert resolved.value.rule_path is None

    async def test_delete_unknown_rule(self, fake_uow, rule_repo):
        result = await DeletePricingRule(fake_uow, rule_repo).execute("/nothing")

        assert result.error.code == "RULE_NOT_FOUND"
        assert fake_uow.commits == 0

    async def test_list_skips_deleted(self, fake_uow, rule_repo):
        rule_repo.add("/a", 1)
        rule_repo.add("/b", 2)
        rule_repo.add("/c", 3)
        await DeletePricingRule(fake_uow, rule_repo).execute("/b")

        result = await ListPricingRules(rule_repo).execute(page=1, page_size=10)

        assert result.value.total == 2
        assert {r.path for r in result.value.rules} == {"/a", "/c"}


@pytest.mark.asyncio
class TestResolvePrice:

    async def test_exact_rule(self, rule_repo, resolver):
        rule_repo.add("/a/b/c.zip", 7)

        result = await ResolvePrice(resolver).execute("/a/b/c.zip")

        assert result.value.credits == 7
        assert result.value.inherited is False

    async def test_inherited_rule(self, rule_repo, resolver):
        rule_repo.add("/a", 5, is_folder=True)
        rule_repo.add("/a/b", 2, is_folder=True)

        result = await ResolvePrice(resolver).execute("/a/b/c.zip")

        assert result.value.credits == 2
        assert result.value.rule_path == "/a/b"
        assert result.value.inherited is True

    async def test_unpriced_path_is_free(self, resolver):
        result = await ResolvePrice(resolver).execute("/anything")

        assert result.value.credits == 0
        assert result.value.inherited is False
