"""Fee computation for orchestrated jobs."""

FEE_FLOOR = 0.03
MARKUP = 1.5


def price(total_spend: float, floor: float = FEE_FLOOR, markup: float = MARKUP) -> float:
    """Fee charged to the caller: ``max(floor, total_spend * markup)``."""
    return max(floor, total_spend * markup)


def margin(total_spend: float, floor: float = FEE_FLOOR, markup: float = MARKUP) -> float:
    """What the broker keeps after paying the crew."""
    return price(total_spend, floor, markup) - total_spend
