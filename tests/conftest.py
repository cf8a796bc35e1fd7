import os
from unittest.mock import MagicMock

import pytest
import pytesseract
from PIL import Image

import ctx_ui
import image_ops
import ocr_ops


class FakeProcess:
    """Stands in for subprocess.Popen results."""

    def __init__(self, stdout=b"", stderr=b"", returncode=0):
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode
        self.killed = False

    def communicate(self, timeout=None):
        return self.stdout, self.stderr

    def poll(self):
        return None if not self.killed else self.returncode

    def kill(self):
        self.killed = True


class PopenRecorder:
    """Records argument vectors; handler(args) returns the FakeProcess to hand back."""

    def __init__(self):
        self.calls = []
        self.handler = lambda args: FakeProcess(b"")

    def __call__(self, args, **kwargs):
        self.calls.append(list(args))
        return self.handler(args)


@pytest.fixture
def popen(monkeypatch):
    recorder = PopenRecorder()
    monkeypatch.setattr(ocr_ops.subprocess, "Popen", recorder)
    return recorder


@pytest.fixture
def ui(monkeypatch):
    """Replaces the tk widgets with mocks and resets the surface state."""
    window = MagicMock()
    window.after.side_effect = lambda ms, func=None, *args: func(*args)

    canvas = MagicMock()
    canvas.winfo_width.return_value = 200
    canvas.winfo_height.return_value = 100

    monkeypatch.setattr(ctx_ui, "window", window)
    monkeypatch.setattr(ctx_ui, "image_canvas", canvas)
    monkeypatch.setattr(ctx_ui, "text_output", MagicMock())
    monkeypatch.setattr(ctx_ui, "status_label", MagicMock())
    monkeypatch.setattr(ctx_ui, "language", "eng")
    monkeypatch.setattr(ctx_ui, "current_image_path", None)
    monkeypatch.setattr(ctx_ui, "batch_running", False)
    monkeypatch.setattr(ctx_ui, "installed_languages", [])

    monkeypatch.setattr(image_ops, "displayed_image", None)
    monkeypatch.setattr(image_ops, "img_resized", None)
    monkeypatch.setattr(image_ops, "image_offset", (0, 0))
    monkeypatch.setattr(image_ops, "last_display_width", 0)
    monkeypatch.setattr(image_ops, "last_display_height", 0)
    monkeypatch.setattr(image_ops, "selecting", False)
    monkeypatch.setattr(image_ops, "selection_start", (0, 0))
    monkeypatch.setattr(image_ops, "selection_rect", None)
    monkeypatch.setattr(image_ops, "drop_listeners", [])
    monkeypatch.setattr(image_ops, "region_listeners", [])
    monkeypatch.setattr(image_ops.ImageTk, "PhotoImage", MagicMock())
    return ctx_ui


@pytest.fixture(autouse=True)
def tesseract_cmd(monkeypatch):
    monkeypatch.setattr(pytesseract.pytesseract, "tesseract_cmd", "tesseract")


def make_image(directory, name, size=(400, 400), color="white", fmt=None):
    path = os.path.join(str(directory), name)
    Image.new("RGB", size, color).save(path, fmt)
    return path


def mouse(x, y):
    event = MagicMock()
    event.x = x
    event.y = y
    return event
