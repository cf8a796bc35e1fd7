import os
import threading
from dataclasses import dataclass, field

import ocr_ops
import text_ops

@dataclass
class BatchReport:
    total: int = 0
    processed: list = field(default_factory=list)
    failed: list = field(default_factory=list)  # (path, message)
    cancelled: bool = False

    def summary(self):
        text = f"Batch done: {len(self.processed)} of {self.total} images processed"
        if self.failed:
            text += f", {len(self.failed)} failed"
        if self.cancelled:
            text += " (stopped)"
        return text

def matches_extension(name, extensions, case_sensitive=True):
    if not case_sensitive:
        name = name.lower()
        extensions = [ext.lower() for ext in extensions]
    return any(name.endswith(ext) for ext in extensions)

def list_batch_images(folder, extensions=(".png", ".jpg"), case_sensitive=True):
    """Image files directly inside folder, in directory listing order."""
    return [os.path.join(folder, name) for name in os.listdir(folder)
            if os.path.isfile(os.path.join(folder, name))
            and matches_extension(name, extensions, case_sensitive)]

def output_base(input_path):
    """Tesseract appends .txt to this, so a.png produces a.txt next to it."""
    return os.path.splitext(input_path)[0]

def run_batch(folder, language, extensions=(".png", ".jpg"), case_sensitive=True,
              timeout=None, on_progress=None, should_stop=None):
    """
    Runs tesseract once per matching image in folder, writing sibling .txt files.
    A failing file is recorded in the report and does not stop the batch.
    """
    report = BatchReport()
    try:
        images = list_batch_images(folder, extensions, case_sensitive)
    except OSError as e:
        text_ops.log(f"Error reading directory {folder}: {e}")
        report.failed.append((folder, str(e)))
        return report

    report.total = len(images)
    text_ops.log(f"Batch: {len(images)} images in {folder}, language {language}")

    for index, input_path in enumerate(images):
        if should_stop is not None and should_stop():
            report.cancelled = True
            break
        if on_progress is not None:
            on_progress(index, len(images), input_path)

        args = ocr_ops.build_command(input_path, output_base(input_path), language)
        outcome = ocr_ops.run_command(args, timeout)
        if outcome.ok:
            report.processed.append(input_path)
        elif isinstance(outcome, ocr_ops.TimedOut):
            report.failed.append((input_path, f"timed out after {outcome.timeout}s"))
        else:
            report.failed.append((input_path, outcome.message))

    text_ops.log(report.summary())
    return report

def run_batch_async(folder, language, on_done, on_progress=None, schedule=None, **options):
    """
    Runs run_batch() in a background thread; progress and the final report
    are delivered through schedule.
    """
    schedule = schedule or ocr_ops.schedule_on_ui

    def progress(index, total, path):
        if on_progress is not None:
            schedule(lambda: on_progress(index, total, path))

    def batch_task():
        report = run_batch(folder, language, on_progress=progress, **options)
        schedule(lambda: on_done(report))

    thread = threading.Thread(target=batch_task, daemon=True)
    thread.start()
    return thread
