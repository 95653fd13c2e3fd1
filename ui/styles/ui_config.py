from PySide6.QtCore import QSize, Qt
from PySide6.QtWidgets import QSizePolicy


class UIConfig:
    """Central UI design system"""

    # =====================
    # Window
    # =====================
    DEFAULT_WINDOW_SIZE = QSize(1200, 720)
    MIN_WINDOW_SIZE = QSize(800, 500)
    LOGIN_MIN_WIDTH = 420
    SIDEBAR_WIDTH = 200
    NOTICE_MAX_WIDTH = 460

    # =====================
    # Spacing
    # =====================
    SPACING_XS = 4
    SPACING_SM = 8
    SPACING_MD = 12
    SPACING_LG = 24

    MARGIN_SM = 8
    MARGIN_MD = 12
    MARGIN_LG = 24

    # =====================
    # Buttons
    # =====================
    BUTTON_HEIGHT = 28
    BUTTON_MIN_WIDTH_SM = 120
    BTN_FIXED_HEIGHT = QSizePolicy(QSizePolicy.Preferred, QSizePolicy.Fixed)

    ALIGN_CENTER = Qt.AlignCenter

    # =====================
    # Text styles
    # =====================
    TITLE_LARGE_STYLE = "font-size: 18px; font-weight: 600;"
    INFO_TEXT_STYLE = "color: #5f6b7a;"
    DENIED_TITLE_STYLE = "font-size: 18px; font-weight: 600; color: #c0392b;"
    INSUFFICIENT_TITLE_STYLE = "font-size: 18px; font-weight: 600; color: #b7791f;"
    NOTICE_BOX_STYLE = (
        "QFrame#guardNotice { border: 1px solid #e2e8f0; border-radius: 8px;"
        " background: #ffffff; }"
    )
    WARNING_BANNER_STYLE = (
        "QFrame#sessionBanner { border: 1px solid #f6ad55; border-radius: 6px;"
        " background: #fffaf0; } QLabel { color: #9c4221; }"
    )
