"""Unit tests for domain exceptions."""

import pytest

from wirebox_di.domain.exceptions import (
    CyclicDependencyError,
    DIException,
    DiscoveryError,
    InvalidLifecycleError,
    InvalidNameError,
    ServiceConstructionError,
    ServiceNotFoundError,
    StaleIndexError,
)


class TestDIException:
    """Test cases for the base DIException class."""

    def test_di_exception_is_exception(self):
        """Test that DIException inherits from Exception."""
        assert issubclass(DIException, Exception)

    def test_di_exception_can_be_raised(self):
        """Test that DIException can be raised with a message."""
        with pytest.raises(DIException, match="Test error"):
            raise DIException("Test error")

    @pytest.mark.parametrize(
        "error_class",
        [
            InvalidNameError,
            ServiceNotFoundError,
            CyclicDependencyError,
            InvalidLifecycleError,
            StaleIndexError,
            DiscoveryError,
            ServiceConstructionError,
        ],
    )
    def test_all_errors_inherit_from_di_exception(self, error_class):
        """Test that every container error can be caught as DIException."""
        assert issubclass(error_class, DIException)


class TestInvalidNameError:
    """Test cases for the InvalidNameError class."""

    def test_without_name(self):
        """Test message when no name was given."""
        error = InvalidNameError()

        assert error.name is None
        assert str(error) == "No service name provided"

    def test_empty_name(self):
        """Test that an empty name is reported as missing."""
        assert str(InvalidNameError("")) == "No service name provided"

    def test_with_reserved_suffix(self):
        """Test message for a name ending in the optional marker."""
        error = InvalidNameError("logger?")

        assert error.name == "logger?"
        assert str(error) == "Invalid service name: logger?"


class TestServiceNotFoundError:
    """Test cases for the ServiceNotFoundError class."""

    def test_message_contains_name(self):
        """Test that the missing name is part of the message."""
        error = ServiceNotFoundError("mailer")

        assert error.name == "mailer"
        assert str(error) == "No service was found: mailer"


class TestCyclicDependencyError:
    """Test cases for the CyclicDependencyError class."""

    def test_without_chain(self):
        """Test that the chain defaults to the closing name."""
        error = CyclicDependencyError("a")

        assert error.name == "a"
        assert error.chain == ["a"]
        assert str(error) == "Cyclic dependency while resolving 'a'"

    def test_with_chain(self):
        """Test that the chain is rendered in the message."""
        error = CyclicDependencyError("b", ["b", "c", "b"])

        assert error.chain == ["b", "c", "b"]
        assert "b -> c -> b" in str(error)


class TestInvalidLifecycleError:
    """Test cases for the InvalidLifecycleError class."""

    def test_attributes_and_message(self):
        """Test that name and declared value are kept."""
        error = InvalidLifecycleError("cache", "forever")

        assert error.name == "cache"
        assert error.lifecycle == "forever"
        assert str(error) == "Service 'cache' has invalid lifecycle: forever"


class TestStaleIndexError:
    """Test cases for the StaleIndexError class."""

    def test_attributes_and_message(self):
        """Test that name and file are kept and reported."""
        error = StaleIndexError("users", "/app/src/users.py")

        assert error.name == "users"
        assert error.filename == "/app/src/users.py"
        assert "/app/src/users.py" in str(error)
        assert "'users'" in str(error)


class TestDiscoveryError:
    """Test cases for the DiscoveryError class."""

    def test_without_reason(self):
        """Test message identifying the file."""
        error = DiscoveryError("/app/src/broken.py")

        assert error.filename == "/app/src/broken.py"
        assert str(error) == "Could not load /app/src/broken.py"

    def test_with_reason(self):
        """Test that the reason is appended."""
        error = DiscoveryError("/app/src/broken.py", "invalid syntax")

        assert error.reason == "invalid syntax"
        assert str(error) == "Could not load /app/src/broken.py. Reason: invalid syntax"


class TestServiceConstructionError:
    """Test cases for the ServiceConstructionError class."""

    def test_with_reason(self):
        """Test message with a reason."""
        error = ServiceConstructionError("db", "connection refused")

        assert error.name == "db"
        assert str(error) == "Cannot construct service: db. Reason: connection refused"

    def test_without_reason(self):
        """Test message without a reason."""
        assert str(ServiceConstructionError("db")) == "Cannot construct service: db"
