"""
Pytest configuration and shared fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Import itemshift modules
import itemshift.config
from itemshift.parser import parse_file


# =============================================================================
# PATH FIXTURES
# =============================================================================

@pytest.fixture
def fixtures_dir():
    """Path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def items_dir(fixtures_dir):
    """Path to item table fixtures."""
    return fixtures_dir / "items"


@pytest.fixture
def shared_items_file(items_dir):
    """Table dialect source."""
    return items_dir / "shared_items.lua"


@pytest.fixture
def pasted_fragment_file(items_dir):
    """Flexible dialect source."""
    return items_dir / "pasted_fragment.lua"


@pytest.fixture
def craftables_file(items_dir):
    """Craft dialect source."""
    return items_dir / "craftables.lua"


@pytest.fixture
def no_items_file(items_dir):
    """Source with no recognizable items."""
    return items_dir / "no_items.lua"


# =============================================================================
# PARSED FIXTURES
# =============================================================================

@pytest.fixture
def shared_items(shared_items_file):
    """Items parsed from the table dialect fixture."""
    return parse_file(shared_items_file).items


# =============================================================================
# CONFIG ISOLATION
# =============================================================================

@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep tests away from ~/.itemshift and ITEMSHIFT_* variables."""
    monkeypatch.setattr(itemshift.config, "CONFIG_SEARCH_PATHS", [tmp_path / "no_config.yaml"])
    for env_var in itemshift.config.ENV_MAPPINGS:
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.setattr(itemshift.config, "_config", None)

