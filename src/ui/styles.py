"""Dark theme for the finance client.

Every stylesheet is built from ``COLORS`` so the palette is changed in one
place. Widgets pick a ready-made sheet from ``AppStyles``; the balance chart
reads its series colours and symbols from ``GraphStyles``.

Usage:
    from ui.styles import AppStyles, GraphStyles

    upload_button.setStyleSheet(AppStyles.BUTTON_PRIMARY)
    pen = pg.mkPen(GraphStyles.COLORS["Balance"], width=GraphStyles.BALANCE_LINE_WIDTH)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from PyQt6.QtWidgets import QApplication


@dataclass(frozen=True)
class ColorPalette:
    """Colours shared by widgets and charts."""

    # Accent
    PRIMARY: str = "#0d7377"
    PRIMARY_HOVER: str = "#14a1a8"
    PRIMARY_PRESSED: str = "#0a5a5d"

    # Neutral controls
    SECONDARY: str = "#323232"
    SECONDARY_HOVER: str = "#454545"
    SECONDARY_PRESSED: str = "#252525"

    # Surfaces, darkest first
    BG_DARK: str = "#1a1a1a"
    BG_MEDIUM: str = "#1e1e1e"
    BG_LIGHT: str = "#2b2b2b"
    BG_RAISED: str = "#3d3d3d"

    TEXT_PRIMARY: str = "#fff"
    TEXT_SECONDARY: str = "#ccc"
    TEXT_MUTED: str = "#888"
    TEXT_DISABLED: str = "#555"

    BORDER_DARK: str = "#333"
    BORDER_MEDIUM: str = "#444"
    BORDER_LIGHT: str = "#555"
    BORDER_HIGHLIGHT: str = "#888"

    # Money: gains, losses and destructive actions
    GAIN: str = "#50c050"
    LOSS: str = "#e05050"
    DANGER: str = "#c94040"
    DANGER_PRESSED: str = "#a03030"
    ERROR_BACKGROUND: str = "#3a1f1f"

    # Balance chart series
    BALANCE: str = "#1f77b4"
    DEPOSITS: str = "#2ca02c"
    INCOME: str = "#ff7f0e"


COLORS = ColorPalette()


def _button(
    background: str,
    hover: str,
    pressed: str,
    border: str = "none",
    hover_border: str | None = None,
    padding: str = "6px 12px",
    extra: str = "",
) -> str:
    """Build a QPushButton sheet with hover, pressed and disabled states."""
    hover_rule = f"border: {hover_border};" if hover_border else ""
    return f"""
        QPushButton {{
            background-color: {background};
            color: white;
            border: {border};
            border-radius: 4px;
            padding: {padding};
            font-weight: bold;
        }}
        QPushButton:hover {{ background-color: {hover}; {hover_rule} }}
        QPushButton:pressed {{ background-color: {pressed}; }}
        QPushButton:disabled {{ color: {COLORS.TEXT_DISABLED}; }}
        {extra}
    """


def _label(color: str, bold: bool = True, extra: str = "") -> str:
    weight = "font-weight: bold;" if bold else ""
    return f"QLabel {{ color: {color}; {weight} border: none; {extra} }}"


def _input(widget: str, padding: str = "4px 8px") -> str:
    """Sheet for a text-entry widget (QLineEdit, QSpinBox)."""
    return f"""
        {widget} {{
            background-color: {COLORS.BG_LIGHT};
            color: {COLORS.TEXT_PRIMARY};
            border: 1px solid {COLORS.BORDER_LIGHT};
            border-radius: 4px;
            padding: {padding};
        }}
        {widget}:hover {{ border: 1px solid {COLORS.PRIMARY}; }}
        {widget}:focus {{
            border: 1px solid {COLORS.PRIMARY_HOVER};
            background-color: {COLORS.BG_RAISED};
        }}
        {widget}:disabled {{
            background-color: {COLORS.BG_DARK};
            color: {COLORS.TEXT_DISABLED};
        }}
    """


class AppStyles:
    """Stylesheets for the finance views, dialogs and widgets."""

    BUTTON_PRIMARY: ClassVar[str] = _button(
        COLORS.PRIMARY,
        COLORS.PRIMARY_HOVER,
        COLORS.PRIMARY_PRESSED,
        extra=f"QPushButton:disabled {{ background-color: {COLORS.SECONDARY}; }}",
    )
    BUTTON_SECONDARY: ClassVar[str] = _button(
        COLORS.SECONDARY,
        COLORS.SECONDARY_HOVER,
        COLORS.SECONDARY_PRESSED,
        border=f"1px solid {COLORS.BORDER_LIGHT}",
        hover_border=f"1px solid {COLORS.BORDER_HIGHLIGHT}",
    )
    BUTTON_DANGER: ClassVar[str] = _button(
        COLORS.DANGER, COLORS.LOSS, COLORS.DANGER_PRESSED
    )
    # Pager buttons; the current page is shown checked
    BUTTON_SMALL: ClassVar[str] = _button(
        COLORS.BG_RAISED,
        COLORS.SECONDARY_HOVER,
        COLORS.SECONDARY_PRESSED,
        border=f"1px solid {COLORS.BORDER_LIGHT}",
        hover_border=f"1px solid {COLORS.BORDER_HIGHLIGHT}",
        padding="4px 8px",
        extra=f"""
        QPushButton {{ color: {COLORS.TEXT_SECONDARY}; font-size: 11px; }}
        QPushButton:checked {{
            background-color: {COLORS.PRIMARY};
            color: white;
            border: 1px solid {COLORS.PRIMARY_HOVER};
        }}
        """,
    )

    PANEL_DARK: ClassVar[str] = f"""
        QFrame {{
            background-color: {COLORS.BG_LIGHT};
            border: 1px solid {COLORS.BORDER_LIGHT};
            border-radius: 4px;
        }}
        {_label(COLORS.TEXT_SECONDARY, bold=False)}
    """

    ERROR_BANNER: ClassVar[str] = f"""
        QFrame {{
            background-color: {COLORS.ERROR_BACKGROUND};
            border: 1px solid {COLORS.DANGER};
            border-radius: 4px;
        }}
        {_label(COLORS.LOSS, bold=False)}
        QPushButton {{
            background: transparent;
            color: {COLORS.TEXT_SECONDARY};
            border: none;
            font-weight: bold;
        }}
        QPushButton:hover {{ color: {COLORS.TEXT_PRIMARY}; }}
    """

    TABLE: ClassVar[str] = f"""
        QTableView {{
            font-size: 11px;
            gridline-color: {COLORS.BORDER_DARK};
            background-color: {COLORS.BG_LIGHT};
            color: {COLORS.TEXT_SECONDARY};
            selection-background-color: {COLORS.PRIMARY};
        }}
        QTableView::item {{ padding: 1px 4px; }}
        QHeaderView::section {{
            font-size: 11px;
            padding: 2px 4px;
            background-color: {COLORS.BG_MEDIUM};
            color: {COLORS.TEXT_SECONDARY};
            border: 1px solid {COLORS.BORDER_DARK};
        }}
    """

    LABEL_HEADER: ClassVar[str] = _label(
        COLORS.TEXT_PRIMARY,
        extra=(
            "font-size: 12px; padding: 4px 0 2px 0; "
            f"border-bottom: 1px solid {COLORS.BORDER_LIGHT};"
        ),
    )
    LABEL_INFO: ClassVar[str] = _label(COLORS.TEXT_MUTED, bold=False, extra="font-style: italic;")
    LABEL_CAPTION: ClassVar[str] = _label(COLORS.TEXT_MUTED, bold=False, extra="font-size: 11px;")
    LABEL_VALUE: ClassVar[str] = _label(COLORS.TEXT_SECONDARY)
    LABEL_POSITIVE: ClassVar[str] = _label(COLORS.GAIN)
    LABEL_NEGATIVE: ClassVar[str] = _label(COLORS.LOSS)

    COMBOBOX: ClassVar[str] = f"""
        QComboBox {{
            background-color: {COLORS.BG_LIGHT};
            color: {COLORS.TEXT_SECONDARY};
            border: 1px solid {COLORS.BORDER_LIGHT};
            border-radius: 4px;
            padding: 4px 8px;
            min-height: 20px;
        }}
        QComboBox:hover {{ border: 1px solid {COLORS.PRIMARY}; }}
        QComboBox QAbstractItemView {{
            background-color: {COLORS.BG_LIGHT};
            color: {COLORS.TEXT_SECONDARY};
            selection-background-color: {COLORS.PRIMARY};
            outline: none;
        }}
    """

    # Wallet sidebar
    LIST_WIDGET: ClassVar[str] = f"""
        QListWidget {{
            background-color: {COLORS.BG_MEDIUM};
            border: 1px solid {COLORS.BORDER_MEDIUM};
            border-radius: 4px;
        }}
        QListWidget::item {{
            padding: 6px;
            border-bottom: 1px solid {COLORS.BORDER_DARK};
        }}
        QListWidget::item:selected {{ background-color: {COLORS.PRIMARY}; }}
        QListWidget::item:hover {{ background-color: {COLORS.BG_LIGHT}; }}
    """

    LINE_EDIT: ClassVar[str] = _input("QLineEdit")
    SPINBOX: ClassVar[str] = _input("QSpinBox", padding="2px 4px")

    CHECKBOX: ClassVar[str] = f"""
        QCheckBox {{ color: {COLORS.TEXT_SECONDARY}; spacing: 6px; }}
        QCheckBox::indicator {{
            width: 16px;
            height: 16px;
            border: 2px solid {COLORS.BORDER_LIGHT};
            border-radius: 3px;
            background-color: {COLORS.BG_LIGHT};
        }}
        QCheckBox::indicator:checked {{
            background-color: {COLORS.PRIMARY};
            border-color: {COLORS.PRIMARY_HOVER};
        }}
    """

    GROUP_BOX: ClassVar[str] = f"""
        QGroupBox {{
            font-weight: bold;
            border: 1px solid {COLORS.BORDER_LIGHT};
            border-radius: 4px;
            margin-top: 8px;
            padding-top: 8px;
            background-color: {COLORS.BG_LIGHT};
            color: {COLORS.TEXT_PRIMARY};
        }}
        QGroupBox::title {{
            subcontrol-origin: margin;
            subcontrol-position: top left;
            padding: 0 4px;
        }}
    """

    GLOBAL_STYLESHEET: ClassVar[str] = f"""
        QWidget {{
            background-color: {COLORS.BG_MEDIUM};
            color: {COLORS.TEXT_SECONDARY};
        }}
        QScrollBar {{
            background-color: {COLORS.BG_DARK};
            border: none;
            border-radius: 6px;
        }}
        QScrollBar:vertical {{ width: 12px; }}
        QScrollBar:horizontal {{ height: 12px; }}
        QScrollBar::handle {{
            background-color: {COLORS.BG_RAISED};
            border-radius: 5px;
            margin: 2px;
        }}
        QScrollBar::handle:vertical {{ min-height: 30px; }}
        QScrollBar::handle:horizontal {{ min-width: 30px; }}
        QScrollBar::add-line, QScrollBar::sub-line {{ width: 0px; height: 0px; }}
        QTabBar::tab {{
            background-color: {COLORS.BG_LIGHT};
            padding: 6px 14px;
            border: 1px solid {COLORS.BORDER_DARK};
        }}
        QTabBar::tab:selected {{ background-color: {COLORS.PRIMARY}; color: white; }}
        QToolTip {{
            background-color: {COLORS.BG_LIGHT};
            color: {COLORS.TEXT_PRIMARY};
            border: 1px solid {COLORS.BORDER_LIGHT};
            padding: 4px;
        }}
    """


class GraphStyles:
    """Series styling for the balance growth chart (pyqtgraph)."""

    COLORS: ClassVar[dict[str, str]] = {
        "Balance": COLORS.BALANCE,
        "Deposits": COLORS.DEPOSITS,
        "Income": COLORS.INCOME,
    }
    # pyqtgraph symbol codes: circle, square, triangle
    SYMBOLS: ClassVar[dict[str, str]] = {
        "Balance": "o",
        "Deposits": "s",
        "Income": "t",
    }

    DEFAULT_LINE_WIDTH: ClassVar[float] = 1.5
    BALANCE_LINE_WIDTH: ClassVar[float] = 2.5
    DEFAULT_SYMBOL_SIZE: ClassVar[int] = 6
    SYMBOL_OUTLINE: ClassVar[str] = ColorPalette.BG_DARK

    BACKGROUND: ClassVar[str] = ColorPalette.BG_LIGHT
    GRID_ALPHA: ClassVar[float] = 0.3


def apply_dark_theme(app: QApplication) -> None:
    """Apply the global dark stylesheet to the application."""
    app.setStyle("Fusion")
    app.setStyleSheet(AppStyles.GLOBAL_STYLESHEET)
