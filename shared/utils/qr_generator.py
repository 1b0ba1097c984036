"""Utilidades para renderizar tickets como códigos QR"""
import base64
import io
import logging
import qrcode

logger = logging.getLogger(__name__)


def generate_qr_png(qr_data: str, box_size: int = 4, border: int = 4) -> bytes:
    """
    Generar imagen PNG de un código QR

    Args:
        qr_data: Contenido a codificar (URL de validación con el token)
        box_size: Tamaño en pixeles de cada módulo
        border: Módulos de margen

    Returns:
        Bytes de la imagen PNG
    """
    if not qr_data:
        raise ValueError("qr_data está vacío, no se puede generar QR")

    qr = qrcode.QRCode(
        version=None,  # Ajustar versión al largo del token
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(qr_data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    img_buffer = io.BytesIO()
    img.save(img_buffer, format="PNG")
    img_bytes = img_buffer.getvalue()

    logger.debug(f"QR code generado (tamaño: {len(img_bytes)} bytes)")
    return img_bytes


def generate_qr_data_uri(qr_data: str) -> str:
    """Generar QR como data URI (data:image/png;base64,...) para uso inline"""
    img_base64 = base64.b64encode(generate_qr_png(qr_data)).decode("utf-8")
    return f"data:image/png;base64,{img_base64}"
