"""Tests for the Ok / StorageError result types."""

from laundromat_ops.core.result import Ok, StorageError


class TestOk:
    def test_is_ok(self) -> None:
        assert Ok(1).is_ok is True

    def test_unwrap_or_returns_value(self) -> None:
        assert Ok({"a": 1}).unwrap_or({}) == {"a": 1}

    def test_unwrap_or_keeps_none_value(self) -> None:
        assert Ok(None).unwrap_or("default") is None


class TestStorageError:
    def test_is_not_ok(self) -> None:
        assert StorageError("lookup", RuntimeError("down")).is_ok is False

    def test_unwrap_or_returns_default(self) -> None:
        assert StorageError("prune", RuntimeError("down")).unwrap_or(0) == 0

    def test_str_names_operation_and_cause(self) -> None:
        assert str(StorageError("store", RuntimeError("disk full"))) == "store failed: disk full"
