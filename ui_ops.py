from tkinter import filedialog
import os
import time
import threading

import ctx_ui
import settings
import image_ops
import ocr_ops
import batch_ops
import text_ops
from geometry import display_to_source, is_empty

resize_delay = 300  # Milliseconds

IMAGE_FILETYPES = [
    ("Images", "*.png *.jpg *.jpeg *.bmp *.tif *.tiff *.gif *.webp"),
    ("All files", "*.*"),
]

status_message = ""

def set_status(message):
    """Displays message in the status bar."""
    global status_message
    status_message = message
    ctx_ui.status_label.config(text=status_message)

def load_image(file_path):
    """
    Loads and displays an image, then runs OCR over the whole image.
    If the file cannot be decoded the current image stays as it is.
    """
    start_time = time.time()
    if not image_ops.load_pixel_file(file_path):
        set_status(f"Cannot load image: {file_path}")
        return False

    image_load_time = (time.time() - start_time) * 1000
    ctx_ui.current_image_path = file_path
    text_ops.log(f"Loaded {file_path} in {image_load_time:.2f}ms")
    ctx_ui.window.title(f"Tesseract OCR GUI - {os.path.basename(file_path)}")
    process_image()
    return True

def on_image_dropped(file_path):
    load_image(file_path)

def open_image():
    """Opens a file dialog to pick an image."""
    initial_dir = settings.settings.get("last_directory") or os.getcwd()
    if ctx_ui.current_image_path:
        initial_dir = os.path.dirname(ctx_ui.current_image_path)
    file_path = filedialog.askopenfilename(title="Open Image", initialdir=initial_dir,
                                           filetypes=IMAGE_FILETYPES)
    if file_path:
        load_image(file_path)

def on_region_selected(rect):
    """
    Runs OCR on the selected region of the original image.
    A click without dragging gives an empty rect and recognizes the whole image.
    """
    if not ctx_ui.current_image_path:
        return
    if is_empty(rect):
        process_image()
        return
    geometry = image_ops.display_geometry()
    if geometry is None:
        return
    offset, displayed_size, source_size = geometry
    region = display_to_source(rect, offset, displayed_size, source_size)
    text_ops.log(f"Selection {tuple(rect)} on screen -> {tuple(region)} in image")
    if is_empty(region):
        set_status("Selection is outside the image.")
        return
    process_image(region)

def process_image(region=None):
    """Starts OCR of the current image in the background with the selected language."""
    text_ops.set_text("Processing image...")
    what = "region" if region is not None else "image"
    set_status(f"Recognizing {what} ({ctx_ui.language})...")
    ocr_ops.recognize_async(ctx_ui.current_image_path, region, ctx_ui.language,
                            show_outcome, timeout=settings.ocr_timeout(settings.settings))

def show_outcome(outcome):
    """Replaces the text pane with the OCR result and reports how it went."""
    text_ops.set_text(outcome.text)
    if isinstance(outcome, ocr_ops.OcrSuccess):
        set_status(f"OCR ({ctx_ui.language}): {outcome.elapsed_ms:.2f}ms - {len(outcome.text)} characters")
    elif isinstance(outcome, ocr_ops.DecodeFailed):
        set_status(f"Error: cannot decode {outcome.path}: {outcome.message}")
    elif isinstance(outcome, ocr_ops.TimedOut):
        set_status(f"Error: tesseract timed out after {outcome.timeout:g}s")
    elif outcome.exit_code is None:
        set_status(f"Error: {outcome.message}")
    else:
        set_status(f"Error: tesseract exited with code {outcome.exit_code}: {outcome.message}")

def set_language(code):
    """Changes the language used by the following OCR runs."""
    codes = [c for c, _ in settings.LANGUAGES]
    if code not in codes:
        raise ValueError(f"Unsupported language: {code}")
    ctx_ui.language = code
    text_ops.log(f"Language set to {code}")
    if not language_installed(code):
        set_status(f"Language '{code}' is not installed for tesseract")
    else:
        set_status(f"Language: {code}")

def on_language_selected():
    set_language(ctx_ui.language_var.get())

def batch_process_folder():
    """Asks for a folder and runs OCR over every image in it, writing .txt files."""
    if ctx_ui.batch_running:
        set_status("A batch is already running.")
        return
    initial_dir = settings.settings.get("last_directory") or os.getcwd()
    folder = filedialog.askdirectory(title="Select Folder", initialdir=initial_dir)
    if not folder:
        return
    start_batch(folder)

def start_batch(folder):
    ctx_ui.batch_running = True
    settings.settings["last_directory"] = folder
    set_status(f"Batch processing {folder} ({ctx_ui.language})...")
    batch_ops.run_batch_async(
        folder, ctx_ui.language, on_batch_done, on_batch_progress,
        extensions=tuple(settings.settings["batch_extensions"]),
        case_sensitive=settings.settings["batch_case_sensitive"],
        timeout=settings.ocr_timeout(settings.settings),
        should_stop=lambda: ctx_ui.window is None,
    )

def on_batch_progress(index, total, path):
    set_status(f"Batch {index + 1}/{total}: {os.path.basename(path)}")

def on_batch_done(report):
    ctx_ui.batch_running = False
    for path, message in report.failed:
        text_ops.log(f"Batch failed for {path}: {message}")
    set_status(report.summary())

def language_installed(code):
    # An empty list means the packs are unknown, not that none are installed
    return not ctx_ui.installed_languages or code in ctx_ui.installed_languages

def check_engine():
    """Looks up the tesseract version and its language packs off the UI thread."""
    def engine_task():
        version = ocr_ops.check_engine()
        languages = ocr_ops.installed_languages() if version else []
        ocr_ops.schedule_on_ui(lambda: show_engine(version, languages))

    thread = threading.Thread(target=engine_task, daemon=True)
    thread.start()
    return thread

def show_engine(version, languages):
    ctx_ui.installed_languages = languages
    if version is None:
        set_status(f"Tesseract not found ({settings.settings['tesseract_cmd']}). Drop an image to try anyway.")
    elif not language_installed(ctx_ui.language):
        set_status(f"Tesseract {version} ready, but language '{ctx_ui.language}' is not installed.")
    else:
        set_status(f"Tesseract {version} ready. Drop an image or use File > Open.")

def on_resize(event):
    """
    Handle window resize events with throttling to prevent performance issues.
    Only triggers image resize when the window size has stabilized.
    """
    if event.widget != ctx_ui.window:
        return

    # Cancel any pending resize tasks
    if hasattr(ctx_ui.window, '_resize_job'):
        ctx_ui.window.after_cancel(ctx_ui.window._resize_job)

    ctx_ui.window._resize_job = ctx_ui.window.after(resize_delay, image_ops.display_image)

# Save settings on window close
def on_closing():
    ocr_ops.cancel_pending()
    settings.save(ctx_ui)
    window = ctx_ui.window
    ctx_ui.window = None
    window.destroy()
