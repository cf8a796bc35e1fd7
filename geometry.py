from collections import namedtuple

Rect = namedtuple("Rect", ["x", "y", "width", "height"])


def is_empty(rect):
    return rect is None or rect.width <= 0 or rect.height <= 0


def to_box(rect):
    """Convert a Rect to a Pillow crop box (left, upper, right, lower)."""
    return (rect.x, rect.y, rect.x + rect.width, rect.y + rect.height)


def normalized_rect(start, end):
    """
    Returns the bounding box between two points regardless of drag direction.
    The end point is exclusive, so a drag from (10, 10) to (110, 60) covers 100x50 pixels.
    """
    x1, y1 = start
    x2, y2 = end
    left, right = min(x1, x2), max(x1, x2)
    top, bottom = min(y1, y2), max(y1, y2)
    return Rect(int(left), int(top), int(right - left), int(bottom - top))


def fit_size(source_size, area_size):
    """
    Calculate the dimensions that fit source_size inside area_size
    while maintaining the aspect ratio.
    """
    width, height = source_size
    area_width, area_height = area_size
    if width / height > area_width / area_height:
        # Image is wider than the display area (relative to height)
        new_width = area_width
        new_height = int(height * (area_width / width))
    else:
        new_height = area_height
        new_width = int(width * (area_height / height))
    return max(new_width, 1), max(new_height, 1)


def centered_offset(content_size, area_size):
    return ((area_size[0] - content_size[0]) // 2, (area_size[1] - content_size[1]) // 2)


def display_to_source(rect, offset, displayed_size, source_size):
    """
    Converts a rectangle in display (canvas) coordinates to original image coordinates.

    Args:
        rect: Rect in canvas coordinates
        offset: (x, y) of the displayed image's top-left corner on the canvas
        displayed_size: (width, height) of the scaled image on the canvas
        source_size: (width, height) of the original image

    Returns:
        Rect in source pixels, clamped to the image bounds. Width or height may be
        zero when the rectangle lies outside the displayed image.
    """
    image_x, image_y = offset
    img_width, img_height = displayed_size
    src_width, src_height = source_size
    if img_width <= 0 or img_height <= 0:
        return Rect(0, 0, 0, 0)

    scale_x = src_width / img_width
    scale_y = src_height / img_height

    x1 = (rect.x - image_x) * scale_x
    y1 = (rect.y - image_y) * scale_y
    x2 = (rect.x + rect.width - image_x) * scale_x
    y2 = (rect.y + rect.height - image_y) * scale_y

    # Ensure coordinates are within image bounds
    x1 = max(0, min(int(round(x1)), src_width))
    y1 = max(0, min(int(round(y1)), src_height))
    x2 = max(0, min(int(round(x2)), src_width))
    y2 = max(0, min(int(round(y2)), src_height))
    return Rect(x1, y1, max(x2 - x1, 0), max(y2 - y1, 0))
