from app.theme import FONT_OPTIONS, PRESET_COLORS, build_css, safe_color, safe_font
from db.models import AdminSettings


def test_css_uses_settings():
    css = build_css(AdminSettings(primary_color="#2563eb", secondary_color="#1d4ed8", font_family="Open Sans"))
    assert "#2563eb" in css
    assert "#1d4ed8" in css
    assert "family=Open+Sans" in css
    assert "'Open Sans'" in css


def test_unsafe_values_fall_back():
    css = build_css(AdminSettings(primary_color="red;}</style><script>", font_family="Comic Sans"))
    assert "<script>" not in css
    assert "#16a34a" in css
    assert "'Inter'" in css


def test_helpers():
    assert safe_color("#ABCDEF", "#000000") == "#ABCDEF"
    assert safe_color("#abc", "#000000") == "#000000"
    assert safe_font("Nunito") == "Nunito"
    assert safe_font("") == FONT_OPTIONS[0]


def test_presets_are_valid_colors():
    for preset in PRESET_COLORS:
        assert safe_color(preset["primary"], "") == preset["primary"]
        assert safe_color(preset["secondary"], "") == preset["secondary"]
