import textwrap
from pathlib import Path

import pytest

from MarkdownPress import style_config
from MarkdownPress.errors import FontNotFoundError
from MarkdownPress.fonts import DEFAULT_FONT, lookup_font_family, resolve_font
from MarkdownPress.styling import (
    Margins,
    TextAlignment,
    default_style_table,
    resolve_styles,
)


def test_no_overrides_returns_defaults():
    defaults = default_style_table()
    assert resolve_styles(defaults, None) == defaults
    assert resolve_styles(defaults, {}) == defaults


def test_heading_size_override_keeps_other_fields():
    defaults = default_style_table()
    styles = resolve_styles(defaults, {"heading.1": {"size": 28}})

    assert styles.heading_1.size == 28
    assert styles.heading_1.bold == defaults.heading_1.bold
    assert styles.heading_1.alignment == defaults.heading_1.alignment
    assert styles.heading_1.text_color == defaults.heading_1.text_color
    assert styles.heading_2 == defaults.heading_2


def test_nested_heading_sections_accept_string_and_int_keys():
    defaults = default_style_table()
    styles = resolve_styles(defaults, {"heading": {"2": {"size": 18}, 3: {"italic": True}}})
    assert styles.heading_2.size == 18
    assert styles.heading_3.italic is True
    assert styles.heading_1 == defaults.heading_1


@pytest.mark.parametrize(
    "section",
    [
        {"size": "big"},
        {"size": 0},
        {"size": 300},
        {"size": True},
        {"bold": "yes"},
        {"textcolor": [1, 2]},
        {"textcolor": [0, 0, 256]},
        {"alignment": "diagonal"},
        {"beforespacing": "lots"},
        {"unknown": 1},
    ],
)
def test_mistyped_values_keep_default(section):
    defaults = default_style_table()
    styles = resolve_styles(defaults, {"text": section})
    assert styles.text == defaults.text


def test_colour_alignment_and_flags():
    styles = resolve_styles(
        default_style_table(),
        {
            "text": {
                "textcolor": (10, 20, 30),
                "backgroundcolor": [200, 200, 200],
                "alignment": "Justify",
                "underline": True,
                "strikethrough": True,
                "beforespacing": 1,
                "afterspacing": 0.75,
            }
        },
    )
    assert styles.text.text_color == (10, 20, 30)
    assert styles.text.background_color == (200, 200, 200)
    assert styles.text.alignment is TextAlignment.JUSTIFY
    assert styles.text.underline and styles.text.strikethrough
    assert styles.text.before_spacing == 1.0
    assert styles.text.after_spacing == 0.75


def test_partial_margins():
    styles = resolve_styles(default_style_table(), {"margin": {"top": 10, "left": 32.5, "right": "wide"}})
    assert styles.margins == Margins(top=10.0, right=20.0, bottom=20.0, left=32.5)


def test_font_family_is_resolved():
    styles = resolve_styles(
        default_style_table(),
        {"text": {"fontfamily": "Times New Roman"}, "code": {"fontfamily": "comic sans"}},
    )
    assert styles.text.font_family == "times"
    assert styles.code.font_family == DEFAULT_FONT


def test_defaults_are_not_mutated():
    defaults = default_style_table()
    snapshot = default_style_table()
    resolve_styles(defaults, {"link": {"bold": True}, "margin": {"top": 5}})
    assert defaults == snapshot


def test_font_refs_cover_defaults():
    assert default_style_table().font_refs() == {"calibri", "courier"}


def test_heading_lookup_falls_back_to_text():
    styles = default_style_table()
    assert styles.for_heading(2) is styles.heading_2
    assert styles.for_heading(5) is styles.text


def test_resolve_font_aliases():
    assert resolve_font("Arial") == "arial"
    assert resolve_font(" courier new ") == "courier"
    assert resolve_font(None) == DEFAULT_FONT
    assert resolve_font("nonexistent") == DEFAULT_FONT


def test_lookup_font_family():
    family = lookup_font_family("courier")
    assert family.variant() == "Courier New"
    assert family.variant(bold=True, italic=True) == "Courier New"
    with pytest.raises(FontNotFoundError):
        lookup_font_family("wingdings")


def test_load_yaml_overrides(tmp_path: Path):
    path = tmp_path / "style.yaml"
    path.write_text(
        textwrap.dedent(
            """\
            margin:
              top: 15
            heading:
              1:
                size: 24
                textcolor: {r: 20, g: 40, b: 120}
            text:
              backgroundcolor: {r: 1, g: 2, b: 3}
            """
        ),
        encoding="utf-8",
    )
    overrides = style_config.load_style_overrides(path)
    assert overrides == {
        "margin": {"top": 15},
        "heading": {"1": {"size": 24, "textcolor": (20, 40, 120)}},
        "text": {"backgroundcolor": (1, 2, 3)},
    }

    styles = resolve_styles(default_style_table(), overrides)
    assert styles.heading_1.size == 24
    assert styles.heading_1.text_color == (20, 40, 120)
    assert styles.text.background_color == (1, 2, 3)
    assert styles.margins.top == 15.0


def test_missing_style_file_keeps_defaults(tmp_path: Path):
    assert style_config.load_style_overrides(tmp_path / "absent.yaml") is None


@pytest.mark.parametrize("content", ["margin: [unclosed", "- just\n- a list\n"])
def test_unusable_style_file_keeps_defaults(tmp_path: Path, content):
    path = tmp_path / "style.yaml"
    path.write_text(content, encoding="utf-8")
    assert style_config.load_style_overrides(path) is None


def test_incomplete_colour_is_ignored(tmp_path: Path):
    path = tmp_path / "style.yaml"
    path.write_text("text:\n  textcolor: {r: 1, g: 2}\n", encoding="utf-8")
    defaults = default_style_table()
    styles = resolve_styles(defaults, style_config.load_style_overrides(path))
    assert styles.text.text_color == defaults.text.text_color


def test_style_file_discovery(tmp_path: Path, monkeypatch):
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: home))
    monkeypatch.chdir(work)

    assert style_config.find_style_file() is None

    (work / style_config.STYLE_FILENAME).write_text("text:\n  size: 12\n", encoding="utf-8")
    assert style_config.find_style_file() == work / style_config.STYLE_FILENAME

    (home / style_config.STYLE_FILENAME).write_text("text:\n  size: 14\n", encoding="utf-8")
    assert style_config.find_style_file() == home / style_config.STYLE_FILENAME
    assert style_config.load_style_overrides() == {"text": {"size": 14}}
