"""Integer helpers used by the automated market maker."""


def sqrt(y: int) -> int:
    """Integer square root (floor) by the Babylonian method."""
    if y < 0:
        raise ValueError("balance cannot be negative")
    if y > 3:
        z = y
        x = y // 2 + 1
        while x < z:
            z = x
            x = (y // x + x) // 2
        return z
    if y != 0:
        return 1
    return y


def minimum(x: int, y: int) -> int:
    """Smaller of two balances."""
    return x if x < y else y


def absdiff(x: int, y: int) -> int:
    """Absolute difference of two balances."""
    return y - x if x < y else x - y