from __future__ import annotations


def longest_side(width: int, height: int) -> int:
    return width if width > height else height


def compute_scaled_size(width: int, height: int, longest_side: int) -> tuple[int, int]:
    """Return (width, height) scaled so the larger side equals longest_side.

    The scale factor is taken from the larger axis; a square scales by height.
    Neither result is ever smaller than 1.
    """
    if longest_side <= 0:
        raise ValueError(f"longest_side must be positive, got {longest_side}")

    if width > height:
        new_width = longest_side
        new_height = round(height * longest_side / width)
    else:
        new_height = longest_side
        new_width = round(width * longest_side / height)

    return max(1, int(new_width)), max(1, int(new_height))
