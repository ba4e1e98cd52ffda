"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

# Add src to Python path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))


@pytest.fixture
def temp_settings_manager(tmp_path):
    """SettingsManager persisting to a temporary user_settings.json."""
    from utils.settings_manager import SettingsManager, reset_settings_manager

    reset_settings_manager()
    with patch("utils.settings_manager.get_config") as mock_config:
        mock_app_config = Mock()
        mock_app_config.user_settings_file = tmp_path / "user_settings.json"
        mock_app_config.user_data_dir = tmp_path
        mock_config.return_value.app = mock_app_config

        manager = SettingsManager()
        yield manager

    reset_settings_manager()


@pytest.fixture
def make_transaction():
    """Factory for Transaction models with sensible defaults."""
    from models.finance import Transaction

    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "id": f"tx-{counter['n']}",
            "date": "2024-01-15",
            "asset_name": "AAPL",
            "asset_type": "STOCK",
            "transaction_type": "BUY",
            "volume": 1.0,
            "item_price": 100.0,
            "transaction_amount": -100.0,
            "currency": "USD",
        }
        data.update(overrides)
        return Transaction.model_validate(data)

    return _make
