import os
import copy
import json
import tkinter as tk

import text_ops

CONFIG_FILE = os.path.join(os.path.expanduser("~"), ".tess_ocr_gui.json")

LANGUAGES = [
    ("eng", "English"),
    ("spa", "Spanish"),
    ("deu", "German"),
]

DEFAULT_SETTINGS = {
    "window": {
        "width": 1000,
        "height": 600,
        "x": None,
        "y": None
    },
    "pane_ratio": 0.5,  # share of the window given to the image canvas
    "language": "eng",
    "tesseract_cmd": "tesseract",
    "ocr_timeout": 30,  # seconds per tesseract run
    "batch_extensions": [".png", ".jpg"],
    "batch_case_sensitive": True,
    "last_directory": ""
}

settings = copy.deepcopy(DEFAULT_SETTINGS)

def merge(base, loaded):
    """Recursively merge loaded values over base, keeping keys missing from the file."""
    for key, value in loaded.items():
        default = base.get(key)
        if isinstance(default, dict) and isinstance(value, dict):
            merge(default, value)
        elif isinstance(default, (dict, list)) and not isinstance(value, type(default)):
            text_ops.log(f"Ignoring setting {key!r}: expected {type(default).__name__}, got {value!r}")
        else:
            base[key] = value
    return base

def load(settings, config_file=None):
    config_file = config_file or CONFIG_FILE
    try:
        if os.path.exists(config_file):
            with open(config_file, 'r') as f:
                loaded_settings = json.load(f)
            if isinstance(loaded_settings, dict):
                merge(settings, loaded_settings)
            else:
                text_ops.log(f"Ignoring {config_file}: settings must be a JSON object")
    except (OSError, ValueError) as e:
        text_ops.log(f"Error loading settings: {e}")
    return settings

def default_language(settings):
    codes = [code for code, _ in LANGUAGES]
    language = settings.get("language", "eng")
    return language if language in codes else "eng"

def ocr_timeout(settings):
    try:
        timeout = float(settings.get("ocr_timeout", 30))
    except (TypeError, ValueError):
        return 30.0
    return timeout if timeout > 0 else None

def save(ctx_ui, config_file=None):
    config_file = config_file or CONFIG_FILE
    if ctx_ui.window is not None:
        settings["window"]["width"] = ctx_ui.window.winfo_width()
        settings["window"]["height"] = ctx_ui.window.winfo_height()
        settings["window"]["x"] = ctx_ui.window.winfo_x()
        settings["window"]["y"] = ctx_ui.window.winfo_y()
    if ctx_ui.main_frame is not None and ctx_ui.main_frame.winfo_width() > 0:
        settings["pane_ratio"] = ctx_ui.left_frame.winfo_width() / ctx_ui.main_frame.winfo_width()
    # The language menu choice only lives for the session
    if ctx_ui.current_image_path:
        settings["last_directory"] = os.path.dirname(ctx_ui.current_image_path)
    try:
        with open(config_file, 'w') as f:
            json.dump(settings, f, indent=4)
    except OSError as e:
        text_ops.log(f"Error saving settings: {e}")

def apply(ctx_ui):
    width = settings["window"]["width"]
    height = settings["window"]["height"]
    x = settings["window"]["x"]
    y = settings["window"]["y"]
    geometry = f"{width}x{height}"
    if x is not None and y is not None:
        geometry += f"+{x}+{y}"
    try:
        ctx_ui.window.geometry(geometry)
    except tk.TclError as e:
        text_ops.log(f"Ignoring saved window geometry {geometry}: {e}")

    ctx_ui.language = default_language(settings)
    ctx_ui.language_var.set(ctx_ui.language)
