"""
Tests for catalog queries - defaults, profiles, visibility, budgets, tags.
"""

from prompt_directives.core import catalog


class TestDefaultsAndProfiles:
    """First-run defaults and profile switching."""

    def test_default_enabled_targets(self, make_prompt):
        prompts = [
            make_prompt("a", "@default-enabled"),
            make_prompt("b", "@default-enabled", enabled=True),
            make_prompt("c"),
        ]
        assert catalog.default_enabled_targets(prompts) == ["a"]

    def test_profiles_first_seen_order(self, make_prompt):
        prompts = [
            make_prompt("a", "@profile cozy, grim"),
            make_prompt("b", "@profile grim", "@profile comedy"),
        ]
        assert catalog.profiles(prompts) == ["cozy", "grim", "comedy"]

    def test_profile_changes(self, make_prompt):
        prompts = [
            make_prompt("cozy-only", "@profile cozy"),
            make_prompt("grim-only", "@profile grim", enabled=True),
            make_prompt("both", "@profile cozy, grim", enabled=True),
            make_prompt("neutral", enabled=True),
        ]

        changes = catalog.profile_changes("cozy", prompts)

        assert changes.to_enable == ["cozy-only"]
        assert changes.to_disable == ["grim-only"]
        assert changes.skipped == 1
        assert not changes.is_empty


class TestVisibility:
    """Conditional display rules."""

    def test_plain_prompt_is_visible(self, make_prompt):
        prompt = make_prompt("a")
        assert catalog.is_visible(prompt, [prompt])

    def test_hidden(self, make_prompt):
        prompt = make_prompt("a", "@hidden")
        assert not catalog.is_visible(prompt, [prompt])

    def test_if_enabled(self, make_prompt):
        prompt = make_prompt("a", "@if-enabled b, c")
        assert not catalog.is_visible(prompt, [prompt, make_prompt("b"), make_prompt("c")])
        assert catalog.is_visible(prompt, [prompt, make_prompt("b"), make_prompt("c", enabled=True)])

    def test_if_disabled(self, make_prompt):
        prompt = make_prompt("a", "@if-disabled b")
        assert catalog.is_visible(prompt, [prompt, make_prompt("b")])
        assert catalog.is_visible(prompt, [prompt])
        assert not catalog.is_visible(prompt, [prompt, make_prompt("b", enabled=True)])

    def test_if_api(self, make_prompt):
        prompt = make_prompt("a", "@if-api openai, claude")
        assert catalog.is_visible(prompt, [prompt], api="Claude")
        assert not catalog.is_visible(prompt, [prompt], api="gemini")
        assert catalog.is_visible(prompt, [prompt], api=None)


class TestTokenCost:
    """Token budget over enabled prompts."""

    def test_summary(self, make_prompt):
        prompts = [
            make_prompt("a", "@token-cost 300", "@token-cost-warn 1000", enabled=True),
            make_prompt("b", "@token-cost 900", "@token-cost-warn 800", enabled=True),
            make_prompt("c", "@token-cost 5000"),
        ]

        summary = catalog.token_cost_summary(prompts)

        assert summary.total == 1200
        assert summary.warn_threshold == 800
        assert summary.exceeded
        assert summary.percentage == 100.0

    def test_no_threshold(self, make_prompt):
        summary = catalog.token_cost_summary([make_prompt("a", "@token-cost 10", enabled=True)])
        assert summary.total == 10
        assert not summary.exceeded
        assert summary.percentage is None

    def test_percentage_under_threshold(self, make_prompt):
        prompts = [make_prompt("a", "@token-cost 250", "@token-cost-warn 1000", enabled=True)]
        assert catalog.token_cost_summary(prompts).percentage == 25.0


class TestTagsGroupsSearch:
    """Organisation helpers."""

    def test_tag_counts(self, make_prompt):
        prompts = [
            make_prompt("a", "@tags pacing, tone"),
            make_prompt("b", "@tags pacing"),
            make_prompt("c", "@tags style"),
        ]
        counts = catalog.tag_counts(prompts)
        assert counts[0] == ("pacing", 2)
        assert len(counts) == 3
        assert len(catalog.tag_counts(prompts, limit=1)) == 1

    def test_group_index(self, make_prompt):
        prompts = [
            make_prompt("a", "@group Pacing", "@group-description How fast things move"),
            make_prompt("b", "@group Pacing"),
            make_prompt("c", "@group Tone"),
            make_prompt("d"),
        ]

        groups = catalog.group_index(prompts)

        assert list(groups) == ["Pacing", "Tone"]
        assert groups["Pacing"].members == ["a", "b"]
        assert groups["Pacing"].description == "How fast things move"
        assert groups["Tone"].description is None

    def test_search(self, make_prompt):
        prompts = [
            make_prompt("a", "@tags pacing", name="Fast"),
            make_prompt("b", "@tooltip Slows the PACING down", name="Slow"),
            make_prompt("c", name="Tone"),
        ]
        assert [p.identifier for p in catalog.search("pacing", prompts)] == ["a", "b"]
        assert [p.identifier for p in catalog.search("tone", prompts)] == ["c"]
        assert len(catalog.search("  ", prompts)) == 3
