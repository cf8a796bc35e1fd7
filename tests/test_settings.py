import copy
import json
import os
import tkinter as tk
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

import settings


@pytest.fixture
def fresh(monkeypatch):
    values = copy.deepcopy(settings.DEFAULT_SETTINGS)
    monkeypatch.setattr(settings, "settings", values)
    return values


def test_load_merges_over_defaults(fresh, tmp_path):
    config_file = os.path.join(str(tmp_path), "config.json")
    with open(config_file, "w") as f:
        json.dump({"window": {"width": 800}, "language": "deu", "tesseract_cmd": "/usr/local/bin/tesseract"}, f)

    settings.load(fresh, config_file)

    assert fresh["window"]["width"] == 800
    assert fresh["window"]["height"] == 600
    assert fresh["tesseract_cmd"] == "/usr/local/bin/tesseract"
    assert settings.default_language(fresh) == "deu"
    assert fresh["batch_extensions"] == [".png", ".jpg"]


def test_load_ignores_broken_file(fresh, tmp_path):
    config_file = os.path.join(str(tmp_path), "config.json")
    with open(config_file, "w") as f:
        f.write("{not json")

    assert settings.load(fresh, config_file) == settings.DEFAULT_SETTINGS


def test_default_language_falls_back_to_english():
    assert settings.default_language({"language": "klingon"}) == "eng"
    assert settings.default_language({}) == "eng"


def test_ocr_timeout():
    assert settings.ocr_timeout({"ocr_timeout": 10}) == 10.0
    assert settings.ocr_timeout({"ocr_timeout": 0}) is None
    assert settings.ocr_timeout({"ocr_timeout": "soon"}) == 30.0


def test_save_writes_window_state(fresh, tmp_path):
    window = MagicMock()
    window.winfo_width.return_value = 1200
    window.winfo_height.return_value = 700
    window.winfo_x.return_value = 10
    window.winfo_y.return_value = 20
    ctx = SimpleNamespace(window=window, main_frame=None, left_frame=None,
                          current_image_path=os.path.join(str(tmp_path), "scans", "a.png"),
                          language="spa")
    config_file = os.path.join(str(tmp_path), "config.json")

    settings.save(ctx, config_file)

    with open(config_file) as f:
        saved = json.load(f)
    assert saved["window"] == {"width": 1200, "height": 700, "x": 10, "y": 20}
    assert saved["last_directory"] == os.path.join(str(tmp_path), "scans")
    # The menu language is not persisted
    assert saved["language"] == "eng"


def test_apply_sets_language_and_geometry(fresh):
    fresh["language"] = "spa"
    ctx = SimpleNamespace(window=MagicMock(), language_var=MagicMock(), language="eng")

    settings.apply(ctx)

    ctx.window.geometry.assert_called_once_with("1000x600")
    assert ctx.language == "spa"
    ctx.language_var.set.assert_called_once_with("spa")


@pytest.mark.parametrize("content", ["[1, 2]", '"x"', "42", "null"])
def test_load_ignores_non_object_file(fresh, tmp_path, content):
    config_file = os.path.join(str(tmp_path), "config.json")
    with open(config_file, "w") as f:
        f.write(content)

    assert settings.load(fresh, config_file) == settings.DEFAULT_SETTINGS


def test_load_keeps_defaults_for_wrong_typed_values(fresh, tmp_path):
    config_file = os.path.join(str(tmp_path), "config.json")
    with open(config_file, "w") as f:
        json.dump({"window": None, "batch_extensions": ".png", "language": "spa"}, f)

    settings.load(fresh, config_file)

    assert fresh["window"] == settings.DEFAULT_SETTINGS["window"]
    assert fresh["batch_extensions"] == [".png", ".jpg"]
    assert fresh["language"] == "spa"

    # Still usable by apply and save afterwards
    ctx = SimpleNamespace(window=MagicMock(), language_var=MagicMock(), language="eng",
                          main_frame=None, left_frame=None, current_image_path=None)
    settings.apply(ctx)
    ctx.window = None
    settings.save(ctx, config_file)
    with open(config_file) as f:
        assert isinstance(json.load(f)["window"], dict)


def test_apply_survives_bad_geometry(fresh):
    fresh["window"]["width"] = "wide"
    window = MagicMock()
    window.geometry.side_effect = tk.TclError('bad geometry specifier "widex600"')
    ctx = SimpleNamespace(window=window, language_var=MagicMock(), language="eng")

    settings.apply(ctx)

    assert ctx.language == "eng"
