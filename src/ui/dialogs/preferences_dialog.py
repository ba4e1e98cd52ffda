"""User preferences dialog for application-wide settings."""

from __future__ import annotations

import logging

from PyQt6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSpinBox,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from ui.styles import AppStyles
from ui.widgets.pagination_bar import ROWS_PER_PAGE_OPTIONS
from utils.settings_manager import SettingsManager, get_settings_manager

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class PreferencesDialog(QDialog):
    """Dialog for editing user preferences.

    Covers the transaction table page size and logging preferences in a
    tabbed interface.
    """

    def __init__(
        self,
        settings_manager: SettingsManager | None = None,
        parent: QWidget | None = None,
    ) -> None:
        """Initialize preferences dialog.

        Args:
            settings_manager: Settings manager instance (uses global if None)
            parent: Parent widget
        """
        super().__init__(parent)
        self._settings = settings_manager or get_settings_manager()

        self.setWindowTitle("User Preferences")
        self.setMinimumWidth(520)

        self._setup_ui()
        self._load_current_values()

    def _setup_ui(self) -> None:
        """Setup user interface with tabbed layout."""
        layout = QVBoxLayout(self)

        self.tabs = QTabWidget()
        layout.addWidget(self.tabs)
        self.tabs.addTab(self._create_table_tab(), "Transactions")
        self.tabs.addTab(self._create_logging_tab(), "Logging")

        # Button row
        button_layout = QHBoxLayout()
        button_layout.addStretch()

        self.apply_button = QPushButton("Apply")
        self.apply_button.setStyleSheet(AppStyles.BUTTON_PRIMARY)
        self.apply_button.clicked.connect(self._on_apply)
        button_layout.addWidget(self.apply_button)

        self.ok_button = QPushButton("OK")
        self.ok_button.setStyleSheet(AppStyles.BUTTON_PRIMARY)
        self.ok_button.clicked.connect(self._on_ok)
        button_layout.addWidget(self.ok_button)

        self.cancel_button = QPushButton("Cancel")
        self.cancel_button.setStyleSheet(AppStyles.BUTTON_SECONDARY)
        self.cancel_button.clicked.connect(self.reject)
        button_layout.addWidget(self.cancel_button)

        layout.addLayout(button_layout)

    def _create_table_tab(self) -> QWidget:
        widget = QWidget()
        layout = QVBoxLayout(widget)

        group = QGroupBox("Transaction Table")
        group.setStyleSheet(AppStyles.GROUP_BOX)
        form = QFormLayout(group)

        self.rows_combo = QComboBox()
        self.rows_combo.setStyleSheet(AppStyles.COMBOBOX)
        for option in ROWS_PER_PAGE_OPTIONS:
            self.rows_combo.addItem(str(option), option)
        form.addRow("Rows per page:", self.rows_combo)

        help_label = QLabel(
            "Number of transactions requested from the server per page. "
            "Takes effect the next time a wallet page is loaded."
        )
        help_label.setWordWrap(True)
        help_label.setStyleSheet("color: #888; font-size: 10px;")
        form.addRow("", help_label)

        layout.addWidget(group)
        layout.addStretch()
        return widget

    def _create_logging_tab(self) -> QWidget:
        """Create logging preferences tab."""
        widget = QWidget()
        layout = QVBoxLayout(widget)

        logging_group = QGroupBox("Log File Settings")
        logging_group.setStyleSheet(AppStyles.GROUP_BOX)
        logging_layout = QFormLayout(logging_group)

        self.log_file_checkbox = QCheckBox("Save logs to files")
        self.log_file_checkbox.setStyleSheet(AppStyles.CHECKBOX)
        logging_layout.addRow("File Logging:", self.log_file_checkbox)

        self.retention_spin = QSpinBox()
        self.retention_spin.setRange(1, 365)
        self.retention_spin.setSuffix(" files")
        self.retention_spin.setStyleSheet(AppStyles.SPINBOX)
        logging_layout.addRow("Retention:", self.retention_spin)

        retention_help = QLabel(
            "Number of log files to keep. Older files are automatically deleted. "
            "Each file represents one application session."
        )
        retention_help.setWordWrap(True)
        retention_help.setStyleSheet("color: #888; font-size: 10px;")
        logging_layout.addRow("", retention_help)

        self.log_level_combo = QComboBox()
        self.log_level_combo.addItems(LOG_LEVELS)
        self.log_level_combo.setStyleSheet(AppStyles.COMBOBOX)
        logging_layout.addRow("Log Level:", self.log_level_combo)

        level_help = QLabel("Changes apply after restarting the application.")
        level_help.setWordWrap(True)
        level_help.setStyleSheet("color: #888; font-size: 10px;")
        logging_layout.addRow("", level_help)

        layout.addWidget(logging_group)
        layout.addStretch()
        return widget

    def _load_current_values(self) -> None:
        """Load current settings into UI controls."""
        rows = self._settings.get_rows_per_page()
        if rows is not None:
            index = self.rows_combo.findData(rows)
            if index < 0:
                self.rows_combo.addItem(str(rows), rows)
                index = self.rows_combo.count() - 1
            self.rows_combo.setCurrentIndex(index)
        else:
            self.rows_combo.setCurrentIndex(self.rows_combo.count() - 1)

        self.log_file_checkbox.setChecked(self._settings.get_logging_save_to_file())
        self.retention_spin.setValue(self._settings.get_logging_retention_count())
        level = self._settings.get_logging_level()
        self.log_level_combo.setCurrentIndex(
            LOG_LEVELS.index(level) if level in LOG_LEVELS else 1
        )

    def selected_rows_per_page(self) -> int:
        return int(self.rows_combo.currentData())

    def _on_apply(self) -> None:
        """Apply settings without closing dialog."""
        self._save_settings()

    def _on_ok(self) -> None:
        """Apply settings and close dialog."""
        if self._save_settings():
            self.accept()

    def _save_settings(self) -> bool:
        """Save all settings from UI controls."""
        try:
            self._settings.set_rows_per_page(self.selected_rows_per_page())
            self._settings.set_logging_save_to_file(self.log_file_checkbox.isChecked())
            self._settings.set_logging_retention_count(self.retention_spin.value())
            self._settings.set_logging_level(self.log_level_combo.currentText())
        except (OSError, ValueError) as e:
            logger.exception("Failed to save preferences: %s", e)
            return False
        logger.info("User preferences saved successfully")
        return True
