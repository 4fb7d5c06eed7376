"""Pytest configuration and shared fixtures for SCAD parser tests."""

import pytest
from scad_parser import getSCADParser


@pytest.fixture
def parser():
    """Create a parser instance for testing."""
    return getSCADParser()


def parse_success(parser, code):
    """Helper function to parse code and assert success."""
    result = parser.parse(code)
    assert result is not None
    return result


def parse_failure(parser, code):
    """Helper function to parse code and assert failure."""
    with pytest.raises(Exception):
        parser.parse(code)
