"""UI dialogs package."""

from .auth_dialog import AuthDialog
from .preferences_dialog import PreferencesDialog

__all__ = ["AuthDialog", "PreferencesDialog"]
