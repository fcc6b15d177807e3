"""Tests for cache key generation."""

from portal.cache.keys import CacheKeys


class TestCacheKeys:
    """Test cache key generation."""

    def test_key_is_namespaced(self) -> None:
        """Logical names are prefixed with the namespace."""
        keys = CacheKeys("portal")
        assert keys.key(CacheKeys.STUDENTS) == "portal:StudentData"

    def test_pattern_defaults_to_whole_namespace(self) -> None:
        keys = CacheKeys("portal")
        assert keys.pattern() == "portal:*"
        assert keys.pattern("Course*") == "portal:Course*"

    def test_field_is_lower_cased(self) -> None:
        assert CacheKeys.field("SV001") == "sv001"

    def test_owns_requires_separator(self) -> None:
        """A namespace sharing a textual prefix is not owned."""
        keys = CacheKeys("portal")
        assert keys.owns("portal:StudentData")
        assert not keys.owns("portal2:StudentData")
        assert not keys.owns("other:StudentData")
