import io

from rich.console import Console

from ask_gemini.display import LOADING_TEXT, PlainSurface, RichSurface


def make_console():
    return Console(file=io.StringIO(), force_terminal=False, width=80)


def test_rich_surface_renders_markdown_panel():
    console = make_console()
    surface = RichSurface(console=console)
    handle = surface.create()
    surface.render(handle, "**hello** world")
    surface.destroy(handle)
    output = console.file.getvalue()
    assert "Gemini Response" in output
    assert "hello world" in output
    assert handle.closed
    assert not handle.live.is_started


def test_rich_surface_ignores_render_after_destroy():
    surface = RichSurface(console=make_console())
    handle = surface.create()
    surface.destroy(handle)
    surface.render(handle, "late")
    surface.destroy(handle)
    assert handle.rendered is None


def test_rich_surface_shows_loading_until_render():
    console = make_console()
    surface = RichSurface(console=console)
    handle = surface.create()
    surface.destroy(handle)
    assert LOADING_TEXT in console.file.getvalue()


def test_plain_surface_prints_final_text_only():
    console = make_console()
    surface = PlainSurface(console=console)
    handle = surface.create()
    surface.render(handle, "# Title\n*raw*")
    surface.destroy(handle)
    assert console.file.getvalue() == "# Title\n*raw*\n"
