"""Main application window."""

import asyncio
import logging
import sys
from collections.abc import Coroutine
from typing import Any

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtGui import QAction, QCloseEvent
from PyQt6.QtWidgets import (
    QApplication,
    QLabel,
    QMainWindow,
    QMessageBox,
    QSplitter,
    QStatusBar,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)
from qasync import QEventLoop, asyncSlot

from services.finance_manager import FinanceState
from ui.dialogs import AuthDialog, PreferencesDialog
from ui.styles import apply_dark_theme
from ui.tabs import AssetsTab, SummaryTab, WalletTab
from ui.widgets import ErrorBanner, WalletSidebar
from utils import (
    ServiceKeys,
    configure_container,
    get_container,
    global_config,
    setup_logging,
)
from utils.exceptions import FinanceManagerError
from utils.settings_manager import get_settings_manager

logger = logging.getLogger(__name__)

MAIN_WINDOW_VIEW = "main_window"
DEFAULT_WINDOW_SIZE = {"width": 1100, "height": 720}


class MainWindow(QMainWindow):
    """Main application window."""

    def __init__(self):
        """Initialize main window."""
        super().__init__()

        # Initialize DI container and configure services
        configure_container()
        container = get_container()

        # Resolve core services from container
        self._signal_bus = container.resolve(ServiceKeys.SIGNAL_BUS)
        self._settings = container.resolve(ServiceKeys.SETTINGS_MANAGER)
        self._session = container.resolve(ServiceKeys.AUTH_SESSION)
        self._api_client = container.resolve(ServiceKeys.API_CLIENT)
        self._finance_manager = container.resolve(ServiceKeys.FINANCE_MANAGER)
        self._asset_service = container.resolve(ServiceKeys.ASSET_SERVICE)
        self._mutual_fund_service = container.resolve(ServiceKeys.MUTUAL_FUND_SERVICE)

        self._background_tasks: set[asyncio.Task] = set()
        self._unsubscribe = self._finance_manager.subscribe(self._on_state_changed)
        self._last_selected_wallet_id: str | None = None

        self.setWindowTitle(f"{global_config.app.name} v{global_config.app.version}")
        # Window size is kept in the main_window view settings
        window_size = {
            **DEFAULT_WINDOW_SIZE,
            **self._settings.get_ui_settings(MAIN_WINDOW_VIEW).col_widths,
        }
        self.resize(window_size["width"], window_size["height"])
        self.setMinimumSize(800, 560)

        self._setup_ui()
        self._connect_signals()
        self._render(self._finance_manager.state)

    @asyncSlot()
    async def initialize_async(self):
        """Restore the backend session, load wallets and reselect the last wallet."""
        self.status_bar.showMessage("Loading wallets...")
        await self._finance_manager.initialize(restore_session=self._restore_session)
        state = self._finance_manager.state
        if state.error is None:
            self.status_bar.showMessage(f"Loaded {len(state.wallets)} wallets", 5000)
        self.tab_widget.setEnabled(True)

    async def _restore_session(self) -> str | None:
        try:
            user_id = await self._session.restore(self._api_client.users.register)
        except FinanceManagerError as e:
            self._signal_bus.session_failed.emit(str(e))
            raise
        self._signal_bus.session_restored.emit(user_id)
        return user_id

    def _setup_ui(self) -> None:
        """Setup user interface."""
        self._create_menu_bar()

        central_widget = QWidget()
        central_layout = QVBoxLayout(central_widget)
        central_layout.setContentsMargins(6, 6, 6, 0)
        central_layout.setSpacing(6)

        self._error_banner = ErrorBanner()
        central_layout.addWidget(self._error_banner)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.setChildrenCollapsible(False)

        self._sidebar = WalletSidebar()
        self._sidebar.setMinimumWidth(200)
        splitter.addWidget(self._sidebar)

        self.tab_widget = QTabWidget()
        self.summary_tab = SummaryTab(self._finance_manager)
        self.tab_widget.addTab(self.summary_tab, "Summary")
        self.wallet_tab = WalletTab(self._finance_manager)
        self.tab_widget.addTab(self.wallet_tab, "Wallet")
        self.assets_tab = AssetsTab(
            finance_manager=self._finance_manager,
            asset_service=self._asset_service,
            mutual_fund_service=self._mutual_fund_service,
        )
        self.tab_widget.addTab(self.assets_tab, "Assets")
        # Enabled once the first wallet load has finished
        self.tab_widget.setEnabled(False)
        splitter.addWidget(self.tab_widget)
        splitter.setStretchFactor(1, 1)

        central_layout.addWidget(splitter, stretch=1)
        self.setCentralWidget(central_widget)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self._loading_label = QLabel("")
        self.status_bar.addPermanentWidget(self._loading_label)
        self._session_label = QLabel("")
        self.status_bar.addPermanentWidget(self._session_label)
        self._update_session_label()
        self.status_bar.showMessage("Ready")

    def _create_menu_bar(self) -> None:
        """Create menu bar."""
        menubar = self.menuBar()
        if not menubar:
            return

        file_menu = menubar.addMenu("&File")
        if not file_menu:
            return

        sign_in_action = QAction("&Sign In...", self)
        sign_in_action.triggered.connect(self._on_sign_in)
        file_menu.addAction(sign_in_action)

        sign_out_action = QAction("Sign &Out", self)
        sign_out_action.triggered.connect(self._on_sign_out)
        file_menu.addAction(sign_out_action)

        file_menu.addSeparator()

        refresh_action = QAction("&Refresh", self)
        refresh_action.setShortcut("F5")
        refresh_action.triggered.connect(
            lambda: self._run(self._finance_manager.refresh())
        )
        file_menu.addAction(refresh_action)

        preferences_action = QAction("&Preferences...", self)
        preferences_action.setShortcut("Ctrl+,")
        preferences_action.triggered.connect(self._on_preferences)
        file_menu.addAction(preferences_action)

        file_menu.addSeparator()

        exit_action = QAction("E&xit", self)
        exit_action.setShortcut("Ctrl+Q")
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        help_menu = menubar.addMenu("&Help")
        if not help_menu:
            return

        about_action = QAction("&About", self)
        about_action.triggered.connect(self._on_about)
        help_menu.addAction(about_action)

    def _connect_signals(self) -> None:
        """Connect widget and signal bus signals to handlers."""
        self._sidebar.wallet_selected.connect(
            lambda wallet_id: self._run(self._finance_manager.select_wallet(wallet_id))
        )
        self._sidebar.add_requested.connect(
            lambda name: self._run(self._finance_manager.add_wallet(name))
        )
        self._sidebar.remove_requested.connect(
            lambda wallet_id: self._run(self._finance_manager.remove_wallet(wallet_id))
        )
        self._error_banner.dismissed.connect(self._finance_manager.dismiss_error)

        self._signal_bus.status_message.connect(self._on_status_message)
        self._signal_bus.error_occurred.connect(self._on_error)
        self._signal_bus.info_message.connect(self._on_info)
        self._signal_bus.upload_started.connect(
            lambda name: self.status_bar.showMessage(f"Uploading {name}...")
        )
        self._signal_bus.upload_completed.connect(self._on_upload_completed)
        self._signal_bus.session_restored.connect(lambda _: self._update_session_label())
        self._signal_bus.session_failed.connect(
            lambda message: self.status_bar.showMessage(message, 10000)
        )

    def _run(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = asyncio.ensure_future(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    # ------------------------------------------------------------------
    # State rendering
    # ------------------------------------------------------------------

    def _on_state_changed(self, state: FinanceState) -> None:
        """Forward manager state to the views via the signal bus."""
        self._render(state)
        self._signal_bus.state_changed.emit(state)

    def _render(self, state: FinanceState) -> None:
        self._error_banner.show_error(state.error)
        self._sidebar.set_wallets(state.wallets, state.selected_wallet_id)
        self._loading_label.setText("Loading..." if state.loading else "")

        if state.selected_wallet_id != self._last_selected_wallet_id:
            self._last_selected_wallet_id = state.selected_wallet_id
            self._signal_bus.wallet_selected.emit(state.selected_wallet_id)
            if state.selected_wallet_id is None:
                self.tab_widget.setCurrentWidget(self.summary_tab)
            else:
                self.tab_widget.setCurrentWidget(self.wallet_tab)
        self.tab_widget.setTabEnabled(
            self.tab_widget.indexOf(self.wallet_tab),
            state.selected_wallet_id is not None,
        )

    def _update_session_label(self) -> None:
        email = self._session.email
        self._session_label.setText(email or "Not signed in")

    # ------------------------------------------------------------------
    # Menu actions
    # ------------------------------------------------------------------

    def _on_sign_in(self) -> None:
        """Show the sign-in dialog and reload with the new identity."""
        dialog = AuthDialog(self._session, self)
        if dialog.exec():
            self._update_session_label()
            self._run(self._finance_manager.initialize(restore_session=self._restore_session))

    def _on_sign_out(self) -> None:
        self._session.sign_out()
        self._finance_manager.reset()
        self._update_session_label()
        self.status_bar.showMessage("Signed out", 5000)

    def _on_preferences(self) -> None:
        """Show preferences dialog."""
        dialog = PreferencesDialog(self._settings, self)
        if dialog.exec():
            limit = dialog.selected_rows_per_page()
            if limit != self._finance_manager.state.pagination.rows_per_page:
                self._run(self._finance_manager.change_rows_per_page(limit))
        logger.info("Preferences dialog closed")

    def _on_about(self) -> None:
        """Show about dialog."""
        about_text = f"""
        <h2>{global_config.app.name}</h2>
        <p>Version {global_config.app.version}</p>
        <p>Desktop client for tracking wallets, investment transactions and
        balance growth against the finance backend.</p>
        <p>Backend: {global_config.api.base_url}</p>
        """
        msg_box = QMessageBox(self)
        msg_box.setWindowTitle("About")
        msg_box.setTextFormat(Qt.TextFormat.RichText)
        msg_box.setText(about_text)
        msg_box.setStandardButtons(QMessageBox.StandardButton.Ok)
        msg_box.setIcon(QMessageBox.Icon.Information)
        msg_box.exec()

    # ------------------------------------------------------------------
    # Signal bus handlers
    # ------------------------------------------------------------------

    def _on_status_message(self, message: str) -> None:
        self.status_bar.showMessage(message, 5000)

    def _on_error(self, message: str) -> None:
        """Handle error message.

        Args:
            message: Error message
        """
        self.status_bar.showMessage(f"Error: {message}", 10000)
        QMessageBox.critical(self, "Error", message)

    def _on_info(self, message: str) -> None:
        self.status_bar.showMessage(message, 5000)
        QMessageBox.information(self, "Information", message)

    def _on_upload_completed(self, result) -> None:
        if result.has_failures:
            self.status_bar.showMessage(
                f"Upload finished: {result.processed_count} imported, "
                f"{result.failed_count} failed",
                10000,
            )
        else:
            self.status_bar.showMessage(
                result.message or f"Imported {result.processed_count} transactions",
                5000,
            )

    def closeEvent(self, event: QCloseEvent) -> None:  # noqa: N802
        """Handle window close event (Qt method override).

        Args:
            event: Close event
        """
        self._settings.update_ui_settings(
            MAIN_WINDOW_VIEW,
            col_widths={"width": self.width(), "height": self.height()},
        )
        self._unsubscribe()

        # Cancel background tasks
        for task in self._background_tasks:
            if not task.done():
                task.cancel()

        async def cleanup():
            try:
                await self._api_client.close()
            except Exception as e:
                logger.error("Error during cleanup: %s", e)

        loop = asyncio.get_event_loop()
        if loop.is_running():
            task = asyncio.ensure_future(cleanup())
            self._background_tasks.add(task)
            task.add_done_callback(lambda t: self._background_tasks.discard(t))
        else:
            loop.run_until_complete(cleanup())

        event.accept()


def _session_context() -> tuple[str | None, str | None]:
    """User id and email attached to remote log entries."""
    session = get_container().resolve_optional(ServiceKeys.AUTH_SESSION)
    if session is None:
        return None, None
    return session.user_id, session.email


def main_window() -> int:
    """Main entry point for the application.

    Returns:
        Exit code
    """
    # Setup logging with file rotation
    settings_manager = get_settings_manager()
    setup_logging(settings_manager=settings_manager, user_context=_session_context)

    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("qasync").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    # Create Qt application
    app = QApplication(sys.argv)
    app.setApplicationName(global_config.app.name)
    app.setApplicationVersion(global_config.app.version)

    apply_dark_theme(app)

    # Setup async event loop
    loop = QEventLoop(app)
    asyncio.set_event_loop(loop)

    window = MainWindow()
    window.show()

    # Schedule async initialization after window is shown
    QTimer.singleShot(0, window.initialize_async)

    with loop:
        return loop.run_forever()
