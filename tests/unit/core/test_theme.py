"""Unit tests for theme module.

Tests for theme loading, validation, and Rich theme generation.
"""

# pyright: reportPrivateUsage=false

from pathlib import Path
from unittest.mock import patch

import mirrorshuttle.core.theme as theme_module
import pytest
from mirrorshuttle.core.theme import (
    ThemeColors,
    _load_toml_colors,
    get_rich_theme,
    get_theme,
    get_user_theme_path,
    load_theme,
)
from rich.theme import Theme


class TestThemeColors:
    """Tests for ThemeColors Pydantic model."""

    def test_default_values(self) -> None:
        """ThemeColors has sensible defaults."""
        colors = ThemeColors()
        assert colors.text == "#ffffff"
        assert colors.header == "#69B9A1"
        assert colors.moved == "#0e8ac8"

    def test_short_hex_accepted(self) -> None:
        """ThemeColors accepts #RGB codes."""
        assert ThemeColors(muted="#abc").muted == "#abc"

    @pytest.mark.parametrize(
        ("value", "message"),
        [
            ("ffffff", "must start with '#'"),
            ("#ff", "must be #RGB or #RRGGBB"),
            ("#gggggg", "invalid hex color"),
        ],
    )
    def test_invalid_colors(self, value: str, message: str) -> None:
        """ThemeColors rejects malformed colors."""
        with pytest.raises(ValueError, match=message):
            ThemeColors(text=value)

    def test_extra_fields_forbidden(self) -> None:
        """ThemeColors rejects unknown fields."""
        with pytest.raises(ValueError):
            ThemeColors(unknown_field="#ffffff")  # type: ignore[call-arg]


class TestLoadTomlColors:
    """Tests for _load_toml_colors internal function."""

    def test_loads_valid_toml(self, tmp_path: Path) -> None:
        """Loads string colors and ignores other values."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text('[colors]\ntext = "#000000"\nsize = 3\n')

        assert _load_toml_colors(theme_file) == {"text": "#000000"}

    def test_returns_none_for_missing_file(self, tmp_path: Path) -> None:
        """Returns None when file doesn't exist."""
        assert _load_toml_colors(tmp_path / "nonexistent.toml") is None

    def test_returns_none_for_invalid_toml(self, tmp_path: Path) -> None:
        """Returns None for malformed TOML."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text("not valid [ toml syntax")

        assert _load_toml_colors(theme_file) is None


class TestLoadTheme:
    """Tests for load_theme function."""

    def test_defaults_without_user_theme(self, tmp_path: Path) -> None:
        """Without a user file the defaults are used."""
        with patch(
            "mirrorshuttle.core.theme.get_user_theme_path",
            return_value=tmp_path / "missing.toml",
        ):
            assert load_theme() == ThemeColors()

    def test_partial_user_overrides(self, tmp_path: Path) -> None:
        """User values override only the given colors."""
        user_theme = tmp_path / "theme.toml"
        user_theme.write_text('[colors]\nsuccess = "#00ff00"\n')

        colors = load_theme(user_theme)

        assert colors.success == "#00ff00"
        assert colors.header == "#69B9A1"

    def test_invalid_user_colors_fall_back(self, tmp_path: Path) -> None:
        """Invalid colors fall back to the defaults."""
        user_theme = tmp_path / "theme.toml"
        user_theme.write_text('[colors]\nsuccess = "green"\n')

        assert load_theme(user_theme) == ThemeColors()


class TestGetRichTheme:
    """Tests for get_rich_theme and get_theme functions."""

    def test_includes_styles(self) -> None:
        """Theme includes base, summary and convenience styles."""
        theme = get_rich_theme(ThemeColors())

        for name in ("text", "error", "created", "moved", "unmoved", "failed", "bold_header"):
            assert name in theme.styles

    def test_caches_theme(self) -> None:
        """get_theme returns the cached instance on subsequent calls."""
        theme_module._cached_theme = None

        theme1 = get_theme()
        theme2 = get_theme()

        assert isinstance(theme1, Theme)
        assert theme1 is theme2

    def test_user_theme_path(self) -> None:
        """The user theme lives under ~/.config/mirrorshuttle/."""
        path = get_user_theme_path()

        assert path.parts[-2:] == ("mirrorshuttle", "theme.toml")
        assert ".config" in path.parts
