from PySide6.QtGui import QColor, QIcon, QPixmap
from PySide6.QtWidgets import QFrame


def color_icon(color: str, size: int = 12) -> QIcon:
    """
    A solid square icon in ``color``, for project selectors and lists.

    Args:
        color: Hex color string

    Keyword Args:
        size: Edge length in pixels

    Returns:
        The icon

    """
    pixmap = QPixmap(size, size)
    pixmap.fill(QColor(color))
    return QIcon(pixmap)


def color_bar(color: str, width: int, height: int = 8) -> QFrame:
    """
    A solid rectangle in ``color``.
    """
    bar = QFrame()
    bar.setFixedSize(width, height)
    bar.setStyleSheet(f"background-color: {color}; border-radius: 2px;")
    return bar
