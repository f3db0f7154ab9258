"""
Unit tests for merge strategies.
"""

import pytest

from action_cache.context import ActionContext
from action_cache.merge import OverwriteMergeStrategy, ParanoidMergeStrategy, get_merge_strategy
from action_cache_shared.errors import ConfigurationError


class TestParanoidMergeStrategy:
    """Test cases for ParanoidMergeStrategy."""

    @pytest.fixture
    def strategy(self):
        """Create ParanoidMergeStrategy instance."""
        return ParanoidMergeStrategy()

    def test_live_wins_and_nothing_is_dropped(self, strategy):
        """Test live values override while live-only and cached-only fields survive."""
        live = ActionContext(a=1, b=2)
        cached = ActionContext(a=9, c=3)

        merged = strategy.merge(live, cached)

        assert merged == {"a": 1, "b": 2, "c": 3}

    def test_unset_live_value_keeps_cached(self, strategy):
        """Test a None live value does not erase a cached value."""
        merged = strategy.merge(ActionContext(greeting=None, name="Ann"), ActionContext(greeting="Hi Ann"))

        assert merged == {"greeting": "Hi Ann", "name": "Ann"}

    def test_live_only_none_is_preserved(self, strategy):
        """Test live-only fields are kept even when None."""
        merged = strategy.merge(ActionContext(trace=None), ActionContext())

        assert "trace" in merged
        assert merged["trace"] is None

    def test_falsy_live_values_win(self, strategy):
        """Test explicitly set falsy values still override."""
        merged = strategy.merge(ActionContext(count=0, flag=False), ActionContext(count=5, flag=True))

        assert merged == {"count": 0, "flag": False}

    def test_returns_new_context(self, strategy):
        """Test neither input is mutated."""
        live = ActionContext(a=1)
        cached = ActionContext(b=2)

        merged = strategy.merge(live, cached)

        assert merged is not live and merged is not cached
        assert live == {"a": 1}
        assert cached == {"b": 2}


class TestOverwriteMergeStrategy:
    """Test cases for OverwriteMergeStrategy."""

    def test_cached_replaces_live(self):
        """Test the cached context wins outright."""
        merged = OverwriteMergeStrategy().merge(ActionContext(a=1, b=2), ActionContext(a=9, c=3))

        assert merged == {"a": 9, "c": 3}

    def test_preserved_fields_come_from_live(self):
        """Test identity fields listed in preserve survive."""
        strategy = OverwriteMergeStrategy(preserve=["request_id", "missing"])

        merged = strategy.merge(ActionContext(request_id="r2", a=1), ActionContext(request_id="r1", a=9))

        assert merged == {"request_id": "r2", "a": 9}


class TestGetMergeStrategy:
    """Test cases for merge strategy lookup."""

    def test_known_names(self):
        """Test configured names resolve."""
        assert isinstance(get_merge_strategy("paranoid"), ParanoidMergeStrategy)
        assert isinstance(get_merge_strategy("Overwrite"), OverwriteMergeStrategy)

    def test_unknown_name(self):
        """Test unknown names raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            get_merge_strategy("deep")
