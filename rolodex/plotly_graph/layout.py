from __future__ import annotations
import math
from typing import Dict, List, Tuple


def radial_network_layout(
    center: str,
    others: List[str],
    radius: float = 4.0,
    start_angle: float = math.pi / 2,
) -> Dict[str, Tuple[float, float]]:
    """
    Focal node at the origin, every other node evenly spaced on one ring.
    - First entry of ``others`` sits at ``start_angle`` (top by default).
    - Order of ``others`` is kept clockwise.
    """
    pos: Dict[str, Tuple[float, float]] = {center: (0.0, 0.0)}
    ring = [n for n in others if n and n != center]
    if not ring:
        return pos

    step = 2.0 * math.pi / len(ring)
    for i, node in enumerate(ring):
        angle = start_angle - i * step
        pos[node] = (radius * math.cos(angle), radius * math.sin(angle))
    return pos
