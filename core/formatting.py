"""
Formatting helpers pour les réponses chat.
"""


def format_time(seconds: int) -> str:
    """
    Formate une durée en secondes: "MM:SS", ou "HH:MM:SS" dès qu'il y a une heure.

    >>> format_time(65)
    '01:05'
    >>> format_time(3661)
    '01:01:01'
    """
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)

    if hours > 0:
        return f"{hours:02}:{minutes:02}:{secs:02}"
    return f"{minutes:02}:{secs:02}"


def format_number(value: float) -> str:
    """50.0 -> "50", 47.5 -> "47.5" """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
