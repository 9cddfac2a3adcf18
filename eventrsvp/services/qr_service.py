"""
QR code for an event's share link
"""

import io
import qrcode

from eventrsvp.core.config import settings

class QRService:
    """Service for generating share-link QR codes"""

    @staticmethod
    def get_share_url(slug: str) -> str:
        """Public URL guests open to respond"""
        return f"{settings.BASE_URL}/e/{slug}"

    @staticmethod
    def generate_event_qr(slug: str, format: str = 'PNG') -> bytes:
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(QRService.get_share_url(slug))
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffer = io.BytesIO()
        img.save(buffer, format=format)
        return buffer.getvalue()
