"""
Theme definitions for the Marksheet Toolkit GUI.
"""


class Colors:
    # Primary
    PRIMARY = "#4F46E5"
    PRIMARY_HOVER = "#4338CA"
    PRIMARY_PRESSED = "#3730A3"

    # Backgrounds
    BACKGROUND = "#f5f5f5"
    SURFACE = "#ffffff"
    DISABLED_BG = "#e0e0e0"

    # Text
    TEXT_PRIMARY = "#1f1f1f"
    TEXT_SECONDARY = "#666666"
    TEXT_DISABLED = "#757575"
    TEXT_ON_PRIMARY = "#ffffff"

    # Borders
    BORDER = "#e0e0e0"
    BORDER_FOCUS = "#6366F1"

    # Status
    ERROR = "#d32f2f"
    SUCCESS = "#388e3c"
    WARNING = "#f57c00"


class Fonts:
    UI_FONT = "-apple-system, 'SF Pro Text', 'Segoe UI', Roboto, Helvetica, Arial, sans-serif"
    MONO_FONT = "Consolas, Monaco, Menlo, 'Courier New', monospace"

    BODY = "13pt"
    SMALL = "11pt"
    CONSOLE = "11pt"

    WEIGHT_MEDIUM = "500"


class Styles:
    BUTTON_PRIMARY = f"""
        QPushButton {{
            background-color: {Colors.PRIMARY};
            color: {Colors.TEXT_ON_PRIMARY};
            border-radius: 6px;
            padding: 8px 16px;
            font-weight: {Fonts.WEIGHT_MEDIUM};
            border: none;
        }}
        QPushButton:hover {{
            background-color: {Colors.PRIMARY_HOVER};
        }}
        QPushButton:pressed {{
            background-color: {Colors.PRIMARY_PRESSED};
        }}
        QPushButton:disabled {{
            background-color: {Colors.DISABLED_BG};
            color: {Colors.TEXT_DISABLED};
        }}
    """

    BUTTON_SECONDARY = f"""
        QPushButton {{
            background-color: {Colors.SURFACE};
            color: {Colors.TEXT_PRIMARY};
            border: 1px solid {Colors.BORDER};
            border-radius: 6px;
            padding: 8px 16px;
        }}
        QPushButton:disabled {{
            color: {Colors.TEXT_DISABLED};
        }}
    """

    STATUS_ERROR = f"color: {Colors.ERROR};"
    STATUS_SUCCESS = f"color: {Colors.SUCCESS};"
    STATUS_NORMAL = f"color: {Colors.TEXT_SECONDARY};"


GLOBAL_STYLESHEET = f"""
    * {{
        font-family: {Fonts.UI_FONT};
        font-size: {Fonts.BODY};
        color: {Colors.TEXT_PRIMARY};
    }}

    QMainWindow, QWidget {{
        background-color: {Colors.BACKGROUND};
    }}

    QLabel {{
        background-color: transparent;
    }}

    QGroupBox {{
        background-color: {Colors.SURFACE};
        border: 1px solid {Colors.BORDER};
        border-radius: 6px;
        margin-top: 12px;
    }}
    QGroupBox::title {{
        subcontrol-origin: margin;
        left: 8px;
        padding: 0 4px;
        background-color: {Colors.BACKGROUND};
    }}

    QListWidget, QLineEdit, QSpinBox, QComboBox {{
        background-color: {Colors.SURFACE};
        border: 1px solid {Colors.BORDER};
        border-radius: 4px;
        padding: 4px;
    }}
    QLineEdit:focus, QSpinBox:focus, QComboBox:focus {{
        border: 1px solid {Colors.BORDER_FOCUS};
    }}

    QProgressBar {{
        border: 1px solid {Colors.BORDER};
        border-radius: 4px;
        text-align: center;
        background-color: {Colors.SURFACE};
    }}
    QProgressBar::chunk {{
        background-color: {Colors.PRIMARY};
        border-radius: 3px;
    }}
"""
