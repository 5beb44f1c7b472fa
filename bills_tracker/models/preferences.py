"""
Display preferences.

Stored in the same local store as the expense list, one key per setting.
"""

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_SEED_COLOR = "#1A73E8"


class AppPreferences(BaseModel):
    """Theme settings chosen on the settings page."""
    model_config = ConfigDict(str_strip_whitespace=True)

    dark_mode: bool = Field(
        default=False,
        description="Use the dark theme"
    )
    seed_color: str = Field(
        default=DEFAULT_SEED_COLOR,
        pattern="^#[0-9A-Fa-f]{6}$",
        description="Accent colour as #RRGGBB"
    )
