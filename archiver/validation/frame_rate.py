def parse_frame_rate(value: object) -> float | None:
    """Evaluate a rate such as ``"24000/1001"``, ``"25"`` or ``29.97``.

    Returns None for missing, malformed or zero-denominator values.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str) or not value.strip():
        return None
    numerator, sep, denominator = value.strip().partition("/")
    try:
        num = float(numerator)
        den = float(denominator) if sep else 1.0
    except ValueError:
        return None
    if den == 0:
        return None
    return num / den


def matches_any(rate: float, accepted: tuple[float, ...], tolerance: float) -> bool:
    return any(abs(rate - candidate) < tolerance for candidate in accepted)
