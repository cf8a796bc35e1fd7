# ctx_ui.py
# Widgets and per-window state shared between the UI modules.
# Populated by ui_setup.setup().

window = None
main_frame = None
main_paned_window = None
left_frame = None
right_frame = None
image_canvas = None
text_output = None
status_label = None
language_var = None

# Selected OCR language, passed explicitly to every OCR call
language = "eng"

# Language packs reported by tesseract at startup
installed_languages = []

# Path of the image currently shown, None until an image loads
current_image_path = None
batch_running = False
