from .settings import (
    ClassifierSettings,
    ReviewSourceSettings,
    Settings,
    SheetsSettings,
    WebSettings,
    get_settings,
)

__all__ = [
    "ClassifierSettings",
    "ReviewSourceSettings",
    "Settings",
    "SheetsSettings",
    "WebSettings",
    "get_settings",
]
