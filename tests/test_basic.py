"""Basic tests for lmms-pkg."""

from importlib.util import find_spec


def test_import():
    """Test that package is importable without side effects."""
    assert find_spec("lmms_pkg") is not None


def test_cli_import():
    """Test that CLI can be imported."""
    try:
        from lmms_pkg.cli import app

        assert app is not None
    except ImportError:
        assert False, "Failed to import CLI"
