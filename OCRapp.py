import os
import logging
import pytesseract

import settings
import ui_setup

def main():
    logging.basicConfig(
        level=os.environ.get("TESS_OCR_GUI_LOG", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(message)s"
    )
    settings.load(settings.settings)
    pytesseract.pytesseract.tesseract_cmd = settings.settings["tesseract_cmd"]
    ui_setup.setup()

if __name__ == '__main__':
    main()
