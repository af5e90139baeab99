"""QR image rendering for short URLs."""

import base64
from io import BytesIO

import qrcode
from qrcode.constants import ERROR_CORRECT_M


class QRCodeRenderer:
    """Render text as a PNG QR code embedded in a data URI."""

    def __init__(
        self,
        box_size: int = 10,
        border: int = 1,
        fill_color: str = "#000000",
        back_color: str = "#FFFFFF",
    ):
        self.box_size = box_size
        self.border = border
        self.fill_color = fill_color
        self.back_color = back_color

    def render_png(self, text: str) -> bytes:
        """Render text to PNG bytes."""
        qr = qrcode.QRCode(
            error_correction=ERROR_CORRECT_M,
            box_size=self.box_size,
            border=self.border,
        )
        qr.add_data(text)
        qr.make(fit=True)

        img = qr.make_image(fill_color=self.fill_color, back_color=self.back_color)
        buf = BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()

    def render_data_uri(self, text: str) -> str:
        """Render text to a ``data:image/png;base64,...`` string."""
        encoded = base64.b64encode(self.render_png(text)).decode("ascii")
        return f"data:image/png;base64,{encoded}"
