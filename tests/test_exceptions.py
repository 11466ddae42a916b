"""Tests for the centralized exception hierarchy."""

import pytest

from anonid.exceptions import (
    AnonIdError,
    ConfigurationError,
    CorruptStorageError,
    InvalidIdentityError,
    InvalidInputError,
    NothingSelectedError,
    StorageError,
    StorageUnavailableError,
    TransferIntegrityError,
)


class TestExceptionHierarchy:
    """Verify the exception class hierarchy is correct."""

    def test_base_exception_exists(self):
        assert issubclass(AnonIdError, Exception)

    @pytest.mark.parametrize(
        "exc_cls",
        [InvalidInputError, StorageError, TransferIntegrityError],
    )
    def test_direct_subclasses_of_anonid_error(self, exc_cls):
        assert issubclass(exc_cls, AnonIdError)
        assert exc_cls.__bases__ == (AnonIdError,)

    @pytest.mark.parametrize(
        "exc_cls",
        [InvalidIdentityError, NothingSelectedError, ConfigurationError],
    )
    def test_input_error_subclasses(self, exc_cls):
        assert issubclass(exc_cls, InvalidInputError)
        assert not issubclass(exc_cls, StorageError)

    @pytest.mark.parametrize("exc_cls", [CorruptStorageError, StorageUnavailableError])
    def test_storage_error_subclasses(self, exc_cls):
        assert issubclass(exc_cls, StorageError)
        assert not issubclass(exc_cls, InvalidInputError)


class TestExceptionCatching:
    def test_catch_all_with_base(self):
        with pytest.raises(AnonIdError):
            raise CorruptStorageError("bad blob")

    def test_message_preserved(self):
        err = NothingSelectedError("pick something")
        assert str(err) == "pick something"

    def test_storage_errors_distinguishable(self):
        with pytest.raises(CorruptStorageError):
            try:
                raise CorruptStorageError("malformed")
            except StorageUnavailableError:
                pytest.fail("corrupt data is not an availability failure")
