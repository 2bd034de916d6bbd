"""
Patrones LIKE para búsquedas por substring.
"""
LIKE_ESCAPE = "\\"


def contains_pattern(term: str) -> str:
    """
    Patrón '%term%' con los comodines del usuario escapados.

    Ej: "50%" -> "%50\\%%", de modo que '%' y '_' se buscan literalmente.
    Usar junto con ilike(..., escape=LIKE_ESCAPE).
    """
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"
