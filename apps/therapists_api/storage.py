import logging
import uuid
from urllib.parse import urlencode, urlsplit, urlunsplit, parse_qsl

from django.conf import settings
from django.core.files.storage import default_storage
from PIL import Image, UnidentifiedImageError
from rest_framework.exceptions import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_FORMATS = {'JPEG': 'jpg', 'PNG': 'png', 'WEBP': 'webp'}
DEFAULT_QUALITY = 80


def upload_therapist_photo(therapist, uploaded_file, request=None):
    """
    Guarda la foto en el bucket de fotos de terapeutas y devuelve su URL pública.

    El fichero se valida con Pillow antes de escribirlo. Si MEDIA_URL es relativa
    la URL se completa con el host de `request`.
    """
    max_size = getattr(settings, 'THERAPIST_PHOTO_MAX_SIZE', 5 * 1024 * 1024)
    if uploaded_file.size > max_size:
        raise ValidationError({'photo': f'La imagen supera el tamaño máximo ({max_size // (1024 * 1024)} MB).'})

    try:
        image = Image.open(uploaded_file)
        image.verify()
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Foto inválida para terapeuta {therapist.pk}: {e}")
        raise ValidationError({'photo': 'El fichero no es una imagen válida.'})

    extension = ALLOWED_FORMATS.get(image.format)
    if extension is None:
        raise ValidationError({'photo': f'Formato no permitido: {image.format}. Usa JPEG, PNG o WEBP.'})

    uploaded_file.seek(0)
    bucket = getattr(settings, 'THERAPIST_PHOTO_BUCKET', 'therapist-photos')
    path = default_storage.save(f"{bucket}/{therapist.pk}/{uuid.uuid4().hex}.{extension}", uploaded_file)
    url = default_storage.url(path)
    if request is not None:
        url = request.build_absolute_uri(url)
    logger.info(f"Foto de terapeuta {therapist.pk} guardada en {path}")
    return url


def optimized_image_url(url, width=None, height=None, quality=DEFAULT_QUALITY):
    """Añade width/height/quality a la URL de la imagen; si no es una URL válida la devuelve tal cual."""
    if not url:
        return ''
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    if not parts.scheme or not parts.netloc:
        return url

    query = dict(parse_qsl(parts.query))
    if width:
        query['width'] = str(width)
    if height:
        query['height'] = str(height)
    query['quality'] = str(quality)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))
