from decimal import ROUND_HALF_UP, Decimal

_SUFFIXES = ["", "K", "M", "B", "T"]


def compact_number(n: int | float) -> str:
    """Format a count in en-US compact notation.

    Matches what browsers print for ``Intl.NumberFormat("en-US", {notation: "compact"})``:
    values under 1,000 are plain integers, larger values keep two significant
    digits below 10 of a unit and round to whole units above.

    Examples:
        >>> compact_number(950)
        '950'
        >>> compact_number(1_234)
        '1.2K'
        >>> compact_number(12_345)
        '12K'
        >>> compact_number(1_500_000)
        '1.5M'
    """
    value = Decimal(str(n))
    sign = "-" if value < 0 else ""
    value = abs(value)
    if value < 1000:
        return f"{sign}{int(value.quantize(Decimal('1'), rounding=ROUND_HALF_UP))}"

    unit = 0
    while value >= 1000 and unit < len(_SUFFIXES) - 1:
        value /= 1000
        unit += 1

    step = Decimal("0.1") if value < 10 else Decimal("1")
    rounded = value.quantize(step, rounding=ROUND_HALF_UP)
    # 999.5K rounds up into the next unit
    if rounded >= 1000 and unit < len(_SUFFIXES) - 1:
        rounded = (rounded / 1000).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
        unit += 1

    text = f"{rounded:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{sign}{text}{_SUFFIXES[unit]}"
