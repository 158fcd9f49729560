"""Tests for the kavita_source.exceptions module."""

import pytest

from kavita_source.exceptions import (
    AuthenticationError,
    ConfigurationError,
    InvalidPathError,
    KavitaError,
    ParseError,
)


class TestKavitaError:
    """Tests for the base KavitaError exception."""

    def test_default_message(self):
        error = KavitaError()
        assert error.message == "An error occurred talking to Kavita"
        assert str(error) == "An error occurred talking to Kavita"

    def test_custom_message(self):
        error = KavitaError("Custom error message")
        assert error.message == "Custom error message"
        assert str(error) == "Custom error message"


@pytest.mark.parametrize("error_class", [ConfigurationError, AuthenticationError, ParseError])
class TestSubclasses:
    """Shared behaviour of the concrete error types."""

    def test_inherits_from_kavita_error(self, error_class):
        assert isinstance(error_class(), KavitaError)

    def test_caught_as_kavita_error(self, error_class):
        with pytest.raises(KavitaError):
            raise error_class()

    def test_has_default_message(self, error_class):
        assert error_class().message

    def test_custom_message(self, error_class):
        assert error_class("custom").message == "custom"


class TestDefaultMessages:
    def test_configuration_error_mentions_configure(self):
        assert "kavita configure" in ConfigurationError().message

    def test_authentication_error_default(self):
        assert AuthenticationError().message == "Unable to log into kavita"


class TestInvalidPathError:
    """Tests for the InvalidPathError exception."""

    def test_is_parse_error(self):
        assert isinstance(InvalidPathError("a/b"), ParseError)

    def test_message_with_expected_segments(self):
        error = InvalidPathError("a/b", 3)
        assert error.message == "Invalid path 'a/b': expected 3 '/'-separated segments"
        assert error.path == "a/b"

    def test_message_without_expected_segments(self):
        assert InvalidPathError("a/b").message == "Invalid path 'a/b'"

    def test_message_without_path(self):
        error = InvalidPathError()
        assert error.message == "Invalid path"
        assert error.path is None
