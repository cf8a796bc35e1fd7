import os
import time
import tempfile
import threading
import subprocess
from dataclasses import dataclass

import pytesseract
from PIL import Image

import ctx_ui
import text_ops
from geometry import is_empty, to_box

STDOUT_TARGET = "-"

# Modes Pillow can write straight to PNG
PNG_MODES = ("1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16")

@dataclass
class OcrSuccess:
    text: str
    elapsed_ms: float = 0
    ok = True

@dataclass
class DecodeFailed:
    path: str
    message: str
    ok = False
    text = ""

@dataclass
class ProcessFailed:
    exit_code: object
    message: str
    text: str = ""
    ok = False

@dataclass
class TimedOut:
    timeout: float
    text: str = ""
    ok = False

# For OCR cancellation
ocr_generation = 0
ocr_generation_lock = threading.Lock()
current_process = None

def build_command(input_path, output_target, language):
    """Argument vector for one tesseract run: <input> <output> -l <language>."""
    return [pytesseract.pytesseract.tesseract_cmd, input_path, output_target, "-l", language]

def run_command(args, timeout=None, on_process=None):
    """
    Runs tesseract and captures its standard output.
    Returns an OcrSuccess, ProcessFailed or TimedOut outcome.
    """
    start_time = time.time()
    text_ops.log(f"Running: {' '.join(args)}")
    try:
        proc = subprocess.Popen(args, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    except OSError as e:
        text_ops.log(f"Cannot start {args[0]}: {e}")
        return ProcessFailed(None, f"Cannot start {args[0]}: {e}")

    if on_process is not None:
        on_process(proc)

    try:
        stdout, stderr = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        proc.kill()
        stdout, stderr = proc.communicate()
        text_ops.log(f"{args[0]} timed out after {timeout}s")
        return TimedOut(timeout, decode_output(stdout))

    text = decode_output(stdout)
    if proc.returncode != 0:
        message = decode_output(stderr).strip() or f"exit code {proc.returncode}"
        text_ops.log(f"{args[0]} failed ({proc.returncode}): {message}")
        return ProcessFailed(proc.returncode, message, text)

    return OcrSuccess(text, (time.time() - start_time) * 1000)

def decode_output(data):
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")

def crop_to_temp(image_path, region):
    """
    Crops region (in original image pixels) out of the image file on disk
    and writes it to a new temporary PNG. The caller removes the file.
    """
    with Image.open(image_path) as original:
        cropped = original.crop(to_box(region))
    if cropped.mode not in PNG_MODES:
        cropped = cropped.convert("RGB")

    fd, crop_path = tempfile.mkstemp(prefix="ocr_crop_", suffix=".png")
    os.close(fd)
    try:
        cropped.save(crop_path, "PNG")
    except OSError:
        os.remove(crop_path)
        raise
    return crop_path

def recognize(image_path, region=None, language="eng", timeout=None, on_process=None):
    """
    Recognizes text in the whole image, or in region when one is given.

    Args:
        image_path: path of the original image file
        region: Rect in original image pixels, or None for the whole image
        language: tesseract language code
        timeout: seconds to wait for tesseract, None waits forever
        on_process: called with the running Popen, so callers can terminate it

    Returns:
        OcrSuccess, DecodeFailed, ProcessFailed or TimedOut
    """
    if is_empty(region):
        return run_command(build_command(image_path, STDOUT_TARGET, language), timeout, on_process)

    try:
        crop_path = crop_to_temp(image_path, region)
    except (OSError, Image.DecompressionBombError) as e:
        text_ops.log(f"Cannot crop {image_path}: {e}")
        return DecodeFailed(image_path, str(e))

    try:
        return run_command(build_command(crop_path, STDOUT_TARGET, language), timeout, on_process)
    finally:
        try:
            os.remove(crop_path)
        except OSError as e:
            text_ops.log(f"Cannot remove temporary crop {crop_path}: {e}")

def schedule_on_ui(callback):
    # The window is gone once on_closing ran
    if ctx_ui.window is not None:
        ctx_ui.window.after(0, callback)

def recognize_async(image_path, region, language, on_done, timeout=None, schedule=None):
    """
    Runs recognize() in a background thread.
    Starting a new request cancels the previous one; on_done only receives
    the outcome of the newest request and is invoked through schedule.
    """
    global ocr_generation
    schedule = schedule or schedule_on_ui

    with ocr_generation_lock:
        ocr_generation += 1
        my_generation = ocr_generation
        terminate_current()

    def track_process(proc):
        global current_process
        with ocr_generation_lock:
            if my_generation != ocr_generation:
                proc.kill()
                return
            current_process = proc

    def ocr_task():
        global current_process
        outcome = recognize(image_path, region, language, timeout, track_process)
        with ocr_generation_lock:
            if my_generation != ocr_generation:
                return  # Superseded or cancelled, drop the result
            current_process = None

        def update_ui():
            if my_generation != ocr_generation:
                return
            on_done(outcome)
        schedule(update_ui)

    thread = threading.Thread(target=ocr_task, daemon=True)
    thread.start()
    return thread

def terminate_current():
    """Kills the running tesseract process. Caller holds ocr_generation_lock."""
    global current_process
    if current_process is not None and current_process.poll() is None:
        text_ops.log("Terminating previous OCR process")
        current_process.kill()
    current_process = None

def cancel_pending():
    """Drops the in-flight OCR request and terminates its process."""
    global ocr_generation
    with ocr_generation_lock:
        ocr_generation += 1
        terminate_current()

def check_engine():
    """Returns the installed tesseract version, or None if it cannot be run."""
    try:
        return str(pytesseract.get_tesseract_version())
    except (pytesseract.TesseractNotFoundError, OSError) as e:
        text_ops.log(f"Tesseract not available: {e}")
        return None

def installed_languages():
    try:
        return pytesseract.get_languages(config="")
    except (pytesseract.TesseractNotFoundError, pytesseract.TesseractError, OSError) as e:
        text_ops.log(f"Cannot list tesseract languages: {e}")
        return []
