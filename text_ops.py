import logging
import tkinter as tk
import pyperclip

import ctx_ui
import ui_ops

logger = logging.getLogger("tess_ocr_gui")

def set_text(text):
    """Replace the content of the extracted text pane."""
    ctx_ui.text_output.config(state=tk.NORMAL)
    ctx_ui.text_output.delete("1.0", tk.END)
    ctx_ui.text_output.insert(tk.END, text)
    ctx_ui.text_output.config(state=tk.DISABLED)

def get_text():
    """Highlighted part of the result pane, or the whole result."""
    if ctx_ui.text_output.tag_ranges(tk.SEL):
        return ctx_ui.text_output.get(tk.SEL_FIRST, tk.SEL_LAST)
    # end-1c drops the newline tk always keeps after the last line
    return ctx_ui.text_output.get("1.0", "end-1c")

def copy_to_clipboard():
    text = get_text()
    if not text.strip():
        ui_ops.set_status("Nothing to copy.")
        return
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        log(f"Clipboard unavailable: {e}", logging.WARNING)
        ui_ops.set_status(f"Clipboard unavailable: {e}")
        return
    ui_ops.set_status(f"Copied {len(text)} characters to clipboard.")

def log(message, level=logging.INFO):
    """Log messages to the application logger."""
    logger.log(level, message)
