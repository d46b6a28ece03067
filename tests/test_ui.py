import pytest

from rustlings import ui


@pytest.fixture
def plain(monkeypatch):
    monkeypatch.setenv("NO_EMOJI", "1")
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.delenv("CLICOLOR_FORCE", raising=False)


@pytest.fixture
def forced_colors(monkeypatch):
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setenv("CLICOLOR_FORCE", "1")


def test_no_emoji_reflects_environment(monkeypatch):
    monkeypatch.setenv("NO_EMOJI", "1")
    assert ui.no_emoji() is True
    monkeypatch.delenv("NO_EMOJI")
    assert ui.no_emoji() is False


def test_emoji_uses_plain_fallback(monkeypatch):
    monkeypatch.setenv("NO_EMOJI", "1")
    assert ui.emoji("🎉", "★") == "★"


def test_emoji_uses_fancy_form(monkeypatch):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    assert ui.emoji("🎉", "★") == "🎉"


@pytest.mark.parametrize("style", [ui.bold, ui.red, ui.green, ui.blue])
def test_styles_are_plain_without_colors(plain, style):
    assert style("some text") == "some text"


@pytest.mark.parametrize("style", [ui.bold, ui.red, ui.green, ui.blue])
def test_styles_wrap_text_with_colors(forced_colors, style):
    styled = style("some text")
    assert "some text" in styled
    assert styled.startswith("\x1b[")
    assert len(styled) > len("some text")


def test_styles_are_distinct(forced_colors):
    results = {style("x") for style in (ui.bold, ui.red, ui.green, ui.blue)}
    assert len(results) == 4


def test_styles_accept_numbers(plain):
    assert ui.blue(12) == "12"


def test_warn_plain(plain, capsys):
    ui.warn("Compiling of intro1 failed!")
    assert capsys.readouterr().out == "! Compiling of intro1 failed!\n"


def test_success_plain(plain, capsys):
    ui.success("Successfully ran intro1")
    assert capsys.readouterr().out == "✓ Successfully ran intro1\n"


def test_warn_with_emoji(monkeypatch, capsys):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    monkeypatch.setenv("NO_COLOR", "1")
    ui.warn("oops")
    out = capsys.readouterr().out
    assert out.startswith("⚠️")
    assert out.endswith("oops\n")


def test_success_with_emoji(monkeypatch, capsys):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    monkeypatch.setenv("NO_COLOR", "1")
    ui.success("fine")
    assert capsys.readouterr().out == "✅ fine\n"