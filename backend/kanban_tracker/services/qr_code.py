"""QR-код канбана: PNG в виде data URL для печати карты."""
import base64
from io import BytesIO

import qrcode

from kanban_tracker.config import settings


def confirm_url(kanban_id: str, base_url: str | None = None) -> str:
    base = (base_url or settings.kanban_base_url).rstrip("/")
    return f"{base}/confirm-kanban/{kanban_id}"


def generate_qr(text: str) -> str:
    img = qrcode.make(text)
    buf = BytesIO()
    img.save(buf, format="PNG")
    encoded = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"
