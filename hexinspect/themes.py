"""
Hex Inspector Themes
Colour schemes for the main window, the hex view and the inspector panel
"""

THEMES = {
    "Dark": {
        "name": "Dark",
        "background": "#1e1e1e",
        "foreground": "#d4d4d4",
        "panel_bg": "#252526",
        "editor_bg": "#000000",
        "editor_fg": "#e2e8f0",
        "offset_fg": "#64748b",
        "ascii_fg": "#94a3b8",
        "selection_bg": "#dc2626",
        "selection_fg": "#ffffff",
        "hover_bg": "#334155",
        "border": "#3e3e42",
        "label_fg": "#b0b0b0",
        "button_bg": "#0e639c",
        "button_hover": "#1177bb",
        "button_disabled": "#3e3e42",
        "error_fg": "#ff6b6b",
    },
    "Light": {
        "name": "Light",
        "background": "#f3f3f3",
        "foreground": "#1e1e1e",
        "panel_bg": "#f5f5f5",
        "editor_bg": "#ffffff",
        "editor_fg": "#2c3e50",
        "offset_fg": "#7a7a7a",
        "ascii_fg": "#5a5a5a",
        "selection_bg": "#dc2626",
        "selection_fg": "#ffffff",
        "hover_bg": "#e2e8f0",
        "border": "#c0c0c0",
        "label_fg": "#5a5a5a",
        "button_bg": "#007acc",
        "button_hover": "#0098ff",
        "button_disabled": "#c0c0c0",
        "error_fg": "#c62828",
    },
    "Dracula": {
        "name": "Dracula",
        "background": "#282a36",
        "foreground": "#f8f8f2",
        "panel_bg": "#21222c",
        "editor_bg": "#21222c",
        "editor_fg": "#f8f8f2",
        "offset_fg": "#6272a4",
        "ascii_fg": "#8be9fd",
        "selection_bg": "#ff79c6",
        "selection_fg": "#282a36",
        "hover_bg": "#44475a",
        "border": "#44475a",
        "label_fg": "#bd93f9",
        "button_bg": "#bd93f9",
        "button_hover": "#cfa8ff",
        "button_disabled": "#44475a",
        "error_fg": "#ff5555",
    },
}

DEFAULT_THEME = "Dark"


def get_theme_colors(theme_name):
    """Get colour values for a theme (falls back to Dark)"""
    return THEMES.get(theme_name, THEMES[DEFAULT_THEME])


def is_dark(theme_name):
    """True when the theme background is dark"""
    bg_hex = get_theme_colors(theme_name)["background"].lstrip('#')
    r, g, b = int(bg_hex[:2], 16), int(bg_hex[2:4], 16), int(bg_hex[4:6], 16)
    return (r + g + b) / 3 < 128


def get_theme_stylesheet(theme_name):
    """Generate the Qt stylesheet for a given theme"""
    theme = get_theme_colors(theme_name)
    return f"""
        QMainWindow, QWidget {{
            background-color: {theme['background']};
            color: {theme['foreground']};
        }}
        QListWidget {{
            background-color: {theme['panel_bg']};
            border: 1px solid {theme['border']};
        }}
        QLabel {{
            color: {theme['foreground']};
        }}
        QLabel#sectionTitle {{
            color: {theme['selection_bg']};
            font-weight: bold;
        }}
        QLabel#error {{
            color: {theme['error_fg']};
        }}
        QPushButton {{
            background-color: {theme['button_bg']};
            color: white;
            border: none;
            padding: 6px 16px;
            border-radius: 3px;
        }}
        QPushButton:hover {{
            background-color: {theme['button_hover']};
        }}
        QPushButton:disabled {{
            background-color: {theme['button_disabled']};
            color: #666;
        }}
        QLineEdit, QComboBox {{
            background-color: {theme['panel_bg']};
            color: {theme['foreground']};
            border: 1px solid {theme['border']};
            padding: 4px;
        }}
        QScrollBar:vertical {{
            background-color: {theme['panel_bg']};
            border: none;
        }}
        QScrollBar::handle:vertical {{
            background-color: {theme['border']};
            border-radius: 4px;
        }}
        QStatusBar {{
            background-color: {theme['background']};
            color: {theme['foreground']};
            border-top: 1px solid {theme['border']};
        }}
    """
