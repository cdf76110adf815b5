"""
Tests for PropertyBinding and PropertyRegistry.
"""
import logging
from unittest.mock import MagicMock

from livesettings.errors import StoreUnavailable
from livesettings.settings import MemoryStore, PreferenceType, PropertyBinding, PropertyRegistry, WriteGuard


def _binding(reader, writer=None, notify=None, guard=None, pref_type=PreferenceType.INTEGER):
    return PropertyBinding(
        key="retries",
        pref_type=pref_type,
        reader=reader,
        writer=writer or MagicMock(),
        notify=notify or MagicMock(),
        guard=guard or WriteGuard(),
    )


class TestInitialization:
    """Bindings populate themselves from the store on creation."""

    def test_initial_read_populates_value_without_notifying(self):
        notify = MagicMock()
        binding = _binding(reader=lambda: 4, notify=notify)

        assert binding.get() == 4
        notify.assert_not_called()

    def test_initial_read_failure_keeps_type_default(self, caplog):
        def reader():
            raise StoreUnavailable("retries")

        with caplog.at_level(logging.ERROR, logger="livesettings.settings.bindings"):
            binding = _binding(reader=reader)

        assert binding.get() == 0
        assert "Failed to read retries" in caplog.text

    def test_boolean_default(self):
        def reader():
            raise StoreUnavailable("enabled")

        binding = _binding(reader=reader, pref_type=PreferenceType.BOOLEAN)

        assert binding.get() is False


class TestSet:
    """Write-through behaviour of PropertyBinding.set()."""

    def test_equal_value_is_noop(self):
        writer, notify = MagicMock(), MagicMock()
        binding = _binding(reader=lambda: 3, writer=writer, notify=notify)

        assert binding.set(3) == 3

        writer.assert_not_called()
        notify.assert_not_called()

    def test_new_value_writes_caches_and_notifies_once(self):
        writer, notify = MagicMock(), MagicMock()
        binding = _binding(reader=lambda: 0, writer=writer, notify=notify)

        assert binding.set(5) == 5

        writer.assert_called_once_with(5)
        notify.assert_called_once_with("retries")
        assert binding.get() == 5

    def test_value_is_coerced_before_comparison(self):
        writer = MagicMock()
        binding = _binding(reader=lambda: 3, writer=writer)

        binding.set("3")

        writer.assert_not_called()

    def test_uncoercible_value_is_ignored(self, caplog):
        writer = MagicMock()
        binding = _binding(reader=lambda: 3, writer=writer)

        with caplog.at_level(logging.WARNING, logger="livesettings.settings.bindings"):
            assert binding.set("lots") == 3

        writer.assert_not_called()
        assert "Ignoring 'lots' for retries" in caplog.text

    def test_cache_is_committed_before_notify_and_guard_held(self):
        guard = WriteGuard()
        seen = []
        binding = None

        def notify(key):
            seen.append((key, binding.get(), guard.raised))

        binding = _binding(reader=lambda: 0, notify=notify, guard=guard)
        binding.set(9)

        assert seen == [("retries", 9, True)]
        assert not guard.raised

    def test_writer_failure_keeps_new_value(self, caplog):
        guard = WriteGuard()
        notify = MagicMock()
        writer = MagicMock(side_effect=StoreUnavailable("retries"))
        binding = _binding(reader=lambda: 0, writer=writer, notify=notify, guard=guard)

        with caplog.at_level(logging.ERROR, logger="livesettings.settings.bindings"):
            assert binding.set(7) == 7

        assert binding.get() == 7
        notify.assert_called_once_with("retries")
        assert not guard.raised
        assert "Failed to persist retries" in caplog.text


class TestRefresh:
    """Re-reading values from the store."""

    def test_refresh_replaces_value_and_notifies(self):
        values = iter([1, 2])
        notify = MagicMock()
        binding = _binding(reader=lambda: next(values), notify=notify)

        assert binding.refresh() is True

        assert binding.get() == 2
        notify.assert_called_once_with("retries")

    def test_refresh_failure_keeps_value_and_does_not_notify(self):
        calls = {"n": 0}
        notify = MagicMock()

        def reader():
            calls["n"] += 1
            if calls["n"] > 1:
                raise StoreUnavailable("retries")
            return 6

        binding = _binding(reader=reader, notify=notify)

        assert binding.refresh() is False

        assert binding.get() == 6
        notify.assert_not_called()


class TestPropertyRegistry:
    """Registry wiring against a real store."""

    def test_create_reads_through_store(self):
        store = MemoryStore({"retries": "int"}, values={"retries": 8})
        registry = PropertyRegistry(store, WriteGuard(), MagicMock())

        registry.create("retries", PreferenceType.INTEGER)

        assert "retries" in registry
        assert registry.get("retries") == 8
        assert registry.keys() == ["retries"]

    def test_set_writes_to_store(self):
        store = MemoryStore({"retries": "int"})
        registry = PropertyRegistry(store, WriteGuard(), MagicMock())
        registry.create("retries", PreferenceType.INTEGER)

        registry.set("retries", 2)

        assert store.get_int("retries") == 2

    def test_refresh_unknown_key_is_noop(self):
        registry = PropertyRegistry(MemoryStore({}), WriteGuard(), MagicMock())

        assert registry.refresh("missing") is False

    def test_snapshot(self):
        store = MemoryStore({"retries": "int", "label": ("string", "x")})
        registry = PropertyRegistry(store, WriteGuard(), MagicMock())
        registry.create("retries", PreferenceType.INTEGER)
        registry.create("label", PreferenceType.STRING)

        assert registry.snapshot() == {"retries": 0, "label": "x"}
