"""Unit tests for PricingResolver"""

import pytest

from src.app.services.pricing_resolver import PricingResolver


def test_ancestor_paths_are_character_prefixes():
    assert PricingResolver.ancestor_paths("/a/b") == ["/", "/a", "/a/"]
    assert PricingResolver.ancestor_paths("/") == []


@pytest.mark.asyncio
class TestResolve:

    async def test_exact_rule_beats_inherited_folder_rule(self, rule_repo, resolver):
        rule_repo.add("/a", 5, is_folder=True, inheritable=True)
        rule_repo.add("/a/b", 2)

        assert await resolver.resolve("/a/b/c") == 5
        assert await resolver.resolve("/a/b") == 2
        assert await resolver.resolve("/x") == 0

    async def test_longest_folder_rule_wins(self, rule_repo, resolver):
        rule_repo.add("/movies", 5, is_folder=True)
        rule_repo.add("/movies/4k", 20, is_folder=True)

        assert await resolver.resolve("/movies/4k/film.mkv") == 20
        assert await resolver.resolve("/movies/sd/film.mkv") == 5

    async def test_non_inheritable_folder_prices_only_itself(self, rule_repo, resolver):
        rule_repo.add("/private", 9, is_folder=True, inheritable=False)

        assert await resolver.resolve("/private") == 9
        assert await resolver.resolve("/private/file") == 0

    async def test_disabled_and_deleted_rules_are_ignored(self, rule_repo, resolver):
        rule_repo.add("/a", 5, is_folder=True)
        rule_repo.add("/a/b", 7, is_folder=True, enabled=False)
        deleted = rule_repo.add("/a/b/c", 1)
        deleted.deleted_at = deleted.created_at

        assert await resolver.resolve("/a/b/c") == 5

    async def test_zero_credit_exact_rule_makes_file_free(self, rule_repo, resolver):
        rule_repo.add("/paid", 10, is_folder=True)
        rule_repo.add("/paid/sample.txt", 0)

        rule = await resolver.resolve_rule("/paid/sample.txt")

        assert rule.path == "/paid/sample.txt"
        assert await resolver.resolve("/paid/sample.txt") == 0

    async def test_prefix_match_is_by_characters(self, rule_repo, resolver):
        rule_repo.add("/a", 4, is_folder=True)

        assert await resolver.resolve("/ab") == 4
