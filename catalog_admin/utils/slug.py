"""
Generación de slugs a partir de nombres.
"""
import re
import time
import unicodedata

FALLBACK_SLUG = "category"

# Largo de la columna categories.slug
MAX_SLUG_LENGTH = 120


def generate_slug(text: str, fallback: str = FALLBACK_SLUG) -> str:
    """
    Convertir un texto en un slug URL-safe.

    Pasa a minúsculas, elimina acentos, descarta la puntuación, colapsa
    espacios/guiones bajos/guiones en un solo guion y recorta guiones
    en los extremos. Ej: "Électronique & Gadgets!!" -> "electronique-gadgets".
    """
    normalized = unicodedata.normalize("NFKD", text.lower().strip())
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii")

    slug = re.sub(r"[^\w\s-]", "", ascii_text)
    slug = re.sub(r"[\s_-]+", "-", slug)
    slug = slug.strip("-")

    return slug or fallback


def with_timestamp_suffix(slug: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """
    Agregar sufijo con timestamp (ms) para desambiguar un slug repetido.
    La base se recorta para que el resultado no supere max_length.
    """
    suffix = f"-{int(time.time() * 1000)}"
    base = slug[:max_length - len(suffix)].rstrip("-")
    return f"{base}{suffix}"
