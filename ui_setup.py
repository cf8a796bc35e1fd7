import tkinter as tk
from tkinter import scrolledtext
from tkinterdnd2 import DND_FILES, TkinterDnD

import ctx_ui
import settings
import ui_ops
import text_ops
import image_ops

def create_menu():
    """Create the File, Edit and Language menus."""
    menu_bar = tk.Menu(ctx_ui.window)

    file_menu = tk.Menu(menu_bar, tearoff=0)
    file_menu.add_command(label="Open Image...", accelerator="Ctrl+O", command=ui_ops.open_image)
    file_menu.add_command(label="Batch Folder...", command=ui_ops.batch_process_folder)
    file_menu.add_separator()
    file_menu.add_command(label="Exit", command=ui_ops.on_closing)
    menu_bar.add_cascade(label="File", menu=file_menu)

    edit_menu = tk.Menu(menu_bar, tearoff=0)
    edit_menu.add_command(label="Copy Text", accelerator="Ctrl+Shift+C", command=text_ops.copy_to_clipboard)
    menu_bar.add_cascade(label="Edit", menu=edit_menu)

    lang_menu = tk.Menu(menu_bar, tearoff=0)
    for code, label in settings.LANGUAGES:
        lang_menu.add_radiobutton(label=label, value=code, variable=ctx_ui.language_var,
                                  command=ui_ops.on_language_selected)
    menu_bar.add_cascade(label="Language", menu=lang_menu)

    ctx_ui.window.config(menu=menu_bar)

def setup():
    # Create the main window
    ctx_ui.window = TkinterDnD.Tk()
    ctx_ui.window.title("Tesseract OCR GUI")

    ctx_ui.language_var = tk.StringVar(value=ctx_ui.language)

    create_menu()

    # Status bar at the bottom
    ctx_ui.status_label = status_label = tk.Label(ctx_ui.window, text="No image loaded", bd=1, relief=tk.SUNKEN, anchor=tk.W)
    status_label.pack(side=tk.BOTTOM, fill=tk.X)

    ctx_ui.main_frame = tk.Frame(ctx_ui.window)
    ctx_ui.main_frame.pack(fill=tk.BOTH, expand=True, padx=10, pady=10)

    # Image on the left, extracted text on the right
    ctx_ui.main_paned_window = tk.PanedWindow(ctx_ui.main_frame, orient=tk.HORIZONTAL, sashwidth=5, sashrelief=tk.RAISED)
    ctx_ui.main_paned_window.pack(fill=tk.BOTH, expand=True)

    window_width = settings.settings["window"]["width"]
    ctx_ui.left_frame = tk.Frame(ctx_ui.main_paned_window)
    ctx_ui.right_frame = tk.Frame(ctx_ui.main_paned_window)
    ctx_ui.main_paned_window.add(ctx_ui.left_frame, width=int(window_width * settings.settings.get("pane_ratio", 0.5)))
    ctx_ui.main_paned_window.add(ctx_ui.right_frame)

    ctx_ui.image_canvas = tk.Canvas(ctx_ui.left_frame, bg="lightgray", highlightthickness=0)
    ctx_ui.image_canvas.pack(fill=tk.BOTH, expand=True)

    ctx_ui.image_canvas.bind("<ButtonPress-1>", image_ops.on_mouse_press)
    ctx_ui.image_canvas.bind("<B1-Motion>", image_ops.on_mouse_motion)
    ctx_ui.image_canvas.bind("<ButtonRelease-1>", image_ops.on_mouse_release)

    # Make image_canvas a drop target for files only
    ctx_ui.image_canvas.drop_target_register(DND_FILES)
    ctx_ui.image_canvas.dnd_bind("<<Drop>>", image_ops.handle_drop)

    image_ops.add_drop_listener(ui_ops.on_image_dropped)
    image_ops.add_region_listener(ui_ops.on_region_selected)

    ctx_ui.text_output = scrolledtext.ScrolledText(ctx_ui.right_frame, wrap=tk.WORD, state=tk.DISABLED)
    ctx_ui.text_output.pack(fill=tk.BOTH, expand=True)

    ctx_ui.window.bind("<Control-o>", lambda event: ui_ops.open_image())
    ctx_ui.window.bind("<Control-C>", lambda event: text_ops.copy_to_clipboard())
    ctx_ui.window.bind("<Configure>", ui_ops.on_resize)
    ctx_ui.window.protocol("WM_DELETE_WINDOW", ui_ops.on_closing)

    # Apply saved settings
    settings.apply(ctx_ui)

    ui_ops.check_engine()

    # Run the application
    ctx_ui.window.mainloop()
