import io
import sys
from pathlib import Path

import pytest

from ascii_camera import cli
from ascii_camera.config import AppConfig, AppContext

from conftest import FakeCapture


def test_parse_args_defaults():
    config = cli.parse_args([])
    assert config == AppConfig()
    assert config.frame_period == pytest.approx(1 / 15)


def test_parse_args_flags():
    config = cli.parse_args(
        ["--device", "2", "--fps", "30", "--save-dir", "out", "--save-png", "--log-level", "debug"]
    )
    assert config.device == 2
    assert config.render_fps == 30.0
    assert config.save_dir == Path("out")
    assert config.save_png is True
    assert config.log_level == "DEBUG"


def test_run_exits_nonzero_when_camera_does_not_open(capsys):
    context = AppContext(config=AppConfig(startup_delay=0.0))
    capture = FakeCapture(opens=False)
    assert cli.run(context, capture=capture) == 1
    assert capture.opened_with == (0, 640, 480, 30.0)
    assert "Could not open camera device 0." in capsys.readouterr().err


def test_run_until_quit(monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO("q\n"))
    context = AppContext(config=AppConfig(startup_delay=0.0))
    capture = FakeCapture()
    assert cli.run(context, capture=capture) == 0
    assert capture.closed == 1
    assert not context.running


def test_list_cameras(monkeypatch, capsys):
    monkeypatch.setattr(cli, "list_cameras", lambda log: [0, 2])
    context = AppContext(config=AppConfig(list_cameras=True))
    assert cli.run(context) == 0
    assert "Detected cameras: 0, 2" in capsys.readouterr().out


def test_main_reports_no_cameras(monkeypatch, capsys):
    monkeypatch.setattr(cli, "list_cameras", lambda log: [])
    assert cli.main(["--list-cameras"]) == 0
    assert "No cameras detected." in capsys.readouterr().out
