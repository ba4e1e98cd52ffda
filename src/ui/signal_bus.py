"""Central signal bus for UI events using PyQt6 signals.

Provides a singleton event bus for decoupled communication between UI components.
"""

from PyQt6.QtCore import QObject, pyqtSignal


class SignalBus(QObject):
    """Central event bus for application-wide signals."""

    # Finance state signals
    state_changed = pyqtSignal(object)  # Emits FinanceState snapshot
    wallets_loaded = pyqtSignal(list)  # Emits list of Wallet
    wallet_selected = pyqtSignal(object)  # Emits wallet_id or None for summary

    # Upload signals
    upload_started = pyqtSignal(str)  # Emits file name
    upload_completed = pyqtSignal(object)  # Emits UploadResult

    # Session signals
    session_restored = pyqtSignal(object)  # Emits backend user id or None
    session_failed = pyqtSignal(str)  # Emits error message

    # Asset signals
    # Emitted as object so the asset name and value stay Python types
    asset_value_changed = pyqtSignal(object, object)  # (asset_name, value or None)

    # General signals
    error_occurred = pyqtSignal(str)  # Emits error message
    status_message = pyqtSignal(str)  # Emits status message
    info_message = pyqtSignal(str)  # Emits info message


# Global singleton instance
_signal_bus = None


def get_signal_bus(signal_bus: SignalBus | None = None) -> SignalBus:
    """Get the global signal bus instance.

    Args:
        signal_bus: Optional signal bus to use instead of singleton.
                    If provided on first call, sets the singleton.
                    Useful for dependency injection.

    Returns:
        Global SignalBus singleton
    """
    global _signal_bus  # noqa: PLW0603
    if signal_bus is not None:
        _signal_bus = signal_bus
        return _signal_bus
    if _signal_bus is None:
        _signal_bus = SignalBus()
    return _signal_bus


def reset_signal_bus() -> None:
    """Reset the global signal bus.

    Primarily for testing.
    """
    global _signal_bus  # noqa: PLW0603
    _signal_bus = None
