import io

from PIL import Image


def export_png(image: Image.Image) -> bytes:
    """Encode without optimisation passes or metadata so equal pixels give equal bytes."""
    buf = io.BytesIO()
    image.save(buf, format="PNG", optimize=False)
    return buf.getvalue()
