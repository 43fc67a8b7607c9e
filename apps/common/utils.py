import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal

from django.utils.text import slugify

logger = logging.getLogger(__name__)


def generate_unique_slug(instance, source_field="title", slug_field="slug"):
    """
    Generates a unique slug for a model instance.
    If a slug already exists, it appends a number.
    """
    if getattr(instance, slug_field):  # Already set, assume it's intended
        return getattr(instance, slug_field)

    base_slug = slugify(getattr(instance, source_field) or "")
    if not base_slug:
        base_slug = slugify(str(uuid.uuid4())[:8])

    ModelClass = instance.__class__
    slug = base_slug
    counter = 1
    while (
        ModelClass.objects.filter(**{slug_field: slug}).exclude(pk=instance.pk).exists()
    ):
        slug = f"{base_slug}-{counter}"
        counter += 1

    if counter > 1:
        logger.debug(f"Slug '{base_slug}' taken, using '{slug}'")
    return slug


def round_half_up(value) -> int:
    """Round to the nearest integer, halves away from zero (2.5 -> 3)."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
