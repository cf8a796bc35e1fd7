import io
import time
from urllib.parse import urlparse
from urllib.request import url2pathname

from PIL import Image, ImageTk
from tkinterdnd2 import REFUSE_DROP

import ctx_ui
import text_ops
from geometry import fit_size, centered_offset, normalized_rect, is_empty

SELECTION_COLOR = "red"
SELECTION_WIDTH = 2

displayed_image = None
img_resized = None
image_offset = (0, 0)
image_resize_time = 0
last_display_width = 0
last_display_height = 0

# Variables for region selection
selecting = False
selection_start = (0, 0)
selection_rect = None  # Rect in canvas coordinates

drop_listeners = []
region_listeners = []

def add_drop_listener(listener):
    drop_listeners.append(listener)

def add_region_listener(listener):
    region_listeners.append(listener)

def load_pixel_data(data):
    """
    Decodes image bytes and displays them, clearing any previous selection.
    Returns False and leaves the display untouched if the data cannot be decoded.
    """
    global displayed_image, last_display_width, last_display_height

    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (OSError, Image.DecompressionBombError) as e:
        text_ops.log(f"Cannot decode image: {e}")
        return False

    displayed_image = image
    clear_selection()
    # Reset dimensions to force redraw
    last_display_width = 0
    last_display_height = 0
    display_image(force=True)
    return True

def load_pixel_file(file_path):
    try:
        with open(file_path, "rb") as f:
            data = f.read()
    except OSError as e:
        text_ops.log(f"Cannot read {file_path}: {e}")
        return False
    return load_pixel_data(data)

def display_image(force=False):
    """
    Displays the loaded image scaled to fit the canvas while maintaining aspect ratio.
    Small canvas size changes (less than 5 pixels) are ignored unless force is set.
    A rescale drops the current selection, which is in display coordinates.
    """
    global img_resized, image_offset, image_resize_time, last_display_width, last_display_height

    if displayed_image is None:
        return

    start_time = time.time()
    display_width = ctx_ui.image_canvas.winfo_width()
    display_height = ctx_ui.image_canvas.winfo_height()

    # Use default dimensions if the widget hasn't been rendered yet
    if display_width <= 1:
        display_width = 300
    if display_height <= 1:
        display_height = 300

    if not force and (abs(display_width - last_display_width) < 5 and
                      abs(display_height - last_display_height) < 5):
        return

    last_display_width = display_width
    last_display_height = display_height

    new_size = fit_size(displayed_image.size, (display_width, display_height))
    img_resized = displayed_image.resize(new_size, Image.LANCZOS)
    image_offset = centered_offset(new_size, (display_width, display_height))

    ctx_ui.image_canvas.photo = ImageTk.PhotoImage(img_resized)  # Keep a reference!
    image_resize_time = (time.time() - start_time) * 1000
    text_ops.log(f"Displayed {displayed_image.size[0]}x{displayed_image.size[1]} image "
                 f"at {new_size[0]}x{new_size[1]} in {image_resize_time:.2f}ms")

    clear_selection()
    redraw()

def display_geometry():
    """Returns (offset, displayed size, original size), or None when nothing is displayed."""
    if displayed_image is None or img_resized is None:
        return None
    return image_offset, img_resized.size, displayed_image.size

def redraw():
    """Draws the image, then the selection outline on top of it."""
    canvas = ctx_ui.image_canvas
    canvas.delete("all")
    photo = getattr(canvas, "photo", None)
    if photo is not None:
        canvas.create_image(image_offset[0], image_offset[1], anchor="nw", image=photo)
    if not is_empty(selection_rect):
        canvas.create_rectangle(
            selection_rect.x, selection_rect.y,
            selection_rect.x + selection_rect.width, selection_rect.y + selection_rect.height,
            outline=SELECTION_COLOR, width=SELECTION_WIDTH
        )

def clear_selection():
    global selecting, selection_rect
    selecting = False
    selection_rect = None

def parse_drop_data(data, splitlist=None):
    """
    Splits a tkdnd drop payload into local file paths.
    Paths with spaces arrive wrapped in braces, and some desktops send file:// URIs.
    """
    splitlist = splitlist or ctx_ui.window.tk.splitlist
    paths = []
    for item in splitlist(data):
        if "://" in item:
            url = urlparse(item)
            if url.scheme != "file":
                continue
            item = url2pathname(url.path)
        if item:
            paths.append(item)
    return paths

def handle_drop(event):
    """Emits the first dropped file path to the drop listeners."""
    paths = parse_drop_data(event.data)
    if not paths:
        return REFUSE_DROP
    if len(paths) > 1:
        text_ops.log(f"{len(paths)} files dropped, using {paths[0]}")
    for listener in list(drop_listeners):
        listener(paths[0])
    return event.action

def on_mouse_press(event):
    """Start a new selection, unless no image is displayed."""
    global selecting, selection_start, selection_rect
    if displayed_image is None:
        return
    selection_start = (event.x, event.y)
    selecting = True
    selection_rect = None
    redraw()

def on_mouse_motion(event):
    global selection_rect
    if selecting:
        selection_rect = normalized_rect(selection_start, (event.x, event.y))
        redraw()

def on_mouse_release(event):
    """Finalize the selection and emit it to the region listeners."""
    global selecting, selection_rect
    if not selecting:
        return
    selecting = False
    selection_rect = normalized_rect(selection_start, (event.x, event.y))
    redraw()
    for listener in list(region_listeners):
        listener(selection_rect)
