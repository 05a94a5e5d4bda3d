import io

from ascii_camera.terminal import (
    CLEAR_SCREEN,
    CURSOR_HOME,
    FALLBACK_CLEAR_LINES,
    HIDE_CURSOR,
    SHOW_CURSOR,
    TerminalDisplay,
    supports_ansi,
)


def make_display(context, use_ansi=True):
    stream = io.StringIO()
    return TerminalDisplay(context.log, stream=stream, use_ansi=use_ansi), stream


def test_string_stream_is_not_ansi_capable(monkeypatch):
    monkeypatch.setenv("TERM", "xterm-256color")
    assert supports_ansi(io.StringIO()) is False


def test_dumb_terminal_is_not_ansi_capable(monkeypatch):
    class Tty(io.StringIO):
        def isatty(self):
            return True

    monkeypatch.setenv("TERM", "dumb")
    assert supports_ansi(Tty()) is False
    monkeypatch.setenv("TERM", "xterm")
    assert supports_ansi(Tty()) is True


def test_clear_hides_cursor_once(context):
    display, stream = make_display(context)
    display.clear()
    display.clear()
    output = stream.getvalue()
    assert output.count(HIDE_CURSOR) == 1
    assert output.count(CLEAR_SCREEN) == 2


def test_write_homes_cursor_and_counts_frames(context):
    display, stream = make_display(context)
    display.write("ab\ncd")
    display.write("")
    assert stream.getvalue().startswith(CURSOR_HOME + "ab\ncd")
    assert display.frame_count == 1


def test_status_line_follows_frame(context):
    display, stream = make_display(context)
    display.write("xy")
    display.write_status_line("FPS: 15.0")
    assert "xy" in stream.getvalue()
    assert "\nFPS: 15.0" in stream.getvalue()


def test_restore_baseline_is_idempotent(context):
    display, stream = make_display(context)
    display.clear()
    display.restore_baseline()
    display.restore_baseline()
    output = stream.getvalue()
    assert output.count(SHOW_CURSOR) == 1
    assert output.endswith(CLEAR_SCREEN + CURSOR_HOME)


def test_plain_fallback_uses_newlines(context):
    display, stream = make_display(context, use_ansi=False)
    display.clear()
    display.write("frame")
    display.restore_baseline()
    output = stream.getvalue()
    assert "\x1b" not in output
    assert output == "\n" * FALLBACK_CLEAR_LINES + "frame"
