"""Sign-in dialog for the backend session."""

import logging

from PyQt6.QtWidgets import (
    QDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
)

from data.clients import AuthSession
from ui.styles import AppStyles

logger = logging.getLogger(__name__)


class AuthDialog(QDialog):
    """Collects the email and bearer token used for backend requests."""

    def __init__(self, session: AuthSession, parent=None):
        """Initialize sign-in dialog.

        Args:
            session: Session whose credentials are replaced on accept
            parent: Parent widget
        """
        super().__init__(parent)
        self._session = session

        self.setWindowTitle("Sign In")
        self.setMinimumWidth(420)

        self._setup_ui()

    def _setup_ui(self) -> None:
        """Setup user interface."""
        layout = QVBoxLayout(self)

        instructions = QLabel(
            "Enter the email you use with the finance backend. A bearer token is "
            "only needed when the backend requires one."
        )
        instructions.setWordWrap(True)
        layout.addWidget(instructions)

        group = QGroupBox("Credentials")
        group.setStyleSheet(AppStyles.GROUP_BOX)
        form = QFormLayout(group)

        self.email_edit = QLineEdit(self._session.email or "")
        self.email_edit.setStyleSheet(AppStyles.LINE_EDIT)
        self.email_edit.setPlaceholderText("you@example.com")
        form.addRow("Email:", self.email_edit)

        self.token_edit = QLineEdit(self._session.token or "")
        self.token_edit.setStyleSheet(AppStyles.LINE_EDIT)
        self.token_edit.setEchoMode(QLineEdit.EchoMode.Password)
        form.addRow("Token:", self.token_edit)
        layout.addWidget(group)

        self.status_label = QLabel("")
        self.status_label.setStyleSheet(AppStyles.LABEL_INFO)
        self.status_label.setWordWrap(True)
        layout.addWidget(self.status_label)

        button_layout = QHBoxLayout()
        button_layout.addStretch()
        self.sign_in_button = QPushButton("Sign In")
        self.sign_in_button.setStyleSheet(AppStyles.BUTTON_PRIMARY)
        self.sign_in_button.clicked.connect(self._on_sign_in)
        button_layout.addWidget(self.sign_in_button)

        self.cancel_button = QPushButton("Cancel")
        self.cancel_button.setStyleSheet(AppStyles.BUTTON_SECONDARY)
        self.cancel_button.clicked.connect(self.reject)
        button_layout.addWidget(self.cancel_button)
        layout.addLayout(button_layout)

    def _on_sign_in(self) -> None:
        """Validate the email against the whitelist and update the session."""
        email = self.email_edit.text().strip() or None
        token = self.token_edit.text().strip() or None
        if email is None:
            self.status_label.setText("Email is required.")
            return
        if not self._session.is_authorized(email):
            logger.warning("Sign-in rejected for %s", email)
            self.status_label.setText(f"{email} is not authorized to use this app.")
            return
        self._session.sign_in(token, email)
        self.accept()
