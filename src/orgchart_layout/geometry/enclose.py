"""
Minimal enclosing circle of a set of circles.

Incremental Welzl-style algorithm: circles are scanned in order; whenever
one is not weakly enclosed by the current candidate, the support basis
(at most three circles) is extended with it and the scan restarts. The
basis circle of one, two or three circles is computed in closed form.

Input circles with non-finite centres or radii are excluded, so invalid
geometry never propagates outward.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import numpy as np

# Relative tolerance used by the weak containment test
_EPSILON = 1e-9


@dataclass(frozen=True)
class Circle:
    """A circle with centre (x, y) and radius r."""

    x: float = 0.0
    y: float = 0.0
    r: float = 0.0

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.r)

    def contains(self, other: Circle, tolerance: float = 1e-6) -> bool:
        """True if ``other`` lies entirely inside this circle (within tolerance)."""
        d = math.hypot(other.x - self.x, other.y - self.y)
        return d + other.r <= self.r + tolerance


def enclose(circles: Iterable[Circle]) -> Circle:
    """
    Compute the minimal circle enclosing all given circles.

    Args:
        circles: Circles to enclose. Non-finite circles are ignored.

    Returns:
        Enclosing circle. Zero circles give a zero-radius circle at the
        origin; one circle gives itself.
    """
    items = [c for c in circles if c.is_finite()]
    if not items:
        return Circle(0.0, 0.0, 0.0)
    if len(items) == 1:
        c = items[0]
        return Circle(c.x, c.y, abs(c.r))

    items = [Circle(c.x, c.y, abs(c.r)) for c in items]
    basis: list[Circle] = []
    e: Optional[Circle] = None
    i = 0
    n = len(items)
    while i < n:
        p = items[i]
        if e is not None and _encloses_weak(e, p):
            i += 1
            continue
        extended = _extend_basis(basis, p)
        if extended is None:
            return _bounding_fallback(items)
        basis = extended
        e = _enclose_basis(basis)
        i = 0

    assert e is not None
    return e


def _encloses_not(a: Circle, b: Circle) -> bool:
    dr = a.r - b.r
    dx = b.x - a.x
    dy = b.y - a.y
    return dr < 0 or dr * dr < dx * dx + dy * dy


def _encloses_weak(a: Circle, b: Circle) -> bool:
    dr = a.r - b.r + max(a.r, b.r, 1.0) * _EPSILON
    dx = b.x - a.x
    dy = b.y - a.y
    return dr > 0 and dr * dr > dx * dx + dy * dy


def _encloses_weak_all(a: Circle, basis: Sequence[Circle]) -> bool:
    return all(_encloses_weak(a, b) for b in basis)


def _extend_basis(basis: Sequence[Circle], p: Circle) -> Optional[list[Circle]]:
    """Smallest basis including ``p`` whose circle encloses the old basis."""
    if _encloses_weak_all(p, basis):
        return [p]

    for b in basis:
        if _encloses_not(p, b) and _encloses_weak_all(_enclose_basis2(b, p), basis):
            return [b, p]

    for i in range(len(basis) - 1):
        for j in range(i + 1, len(basis)):
            bi, bj = basis[i], basis[j]
            if (
                _encloses_not(_enclose_basis2(bi, bj), p)
                and _encloses_not(_enclose_basis2(bi, p), bj)
                and _encloses_not(_enclose_basis2(bj, p), bi)
                and _encloses_weak_all(_enclose_basis3(bi, bj, p), basis)
            ):
                return [bi, bj, p]

    # Numerically degenerate input
    return None


def _enclose_basis(basis: Sequence[Circle]) -> Circle:
    if len(basis) == 1:
        return basis[0]
    if len(basis) == 2:
        return _enclose_basis2(basis[0], basis[1])
    return _enclose_basis3(basis[0], basis[1], basis[2])


def _enclose_basis2(a: Circle, b: Circle) -> Circle:
    x21 = b.x - a.x
    y21 = b.y - a.y
    r21 = b.r - a.r
    length = math.hypot(x21, y21)
    if length == 0:
        return a if a.r >= b.r else b
    return Circle(
        (a.x + b.x + x21 / length * r21) / 2,
        (a.y + b.y + y21 / length * r21) / 2,
        (length + a.r + b.r) / 2,
    )


def _enclose_basis3(a: Circle, b: Circle, c: Circle) -> Circle:
    x1, y1, r1 = a.x, a.y, a.r
    x2, y2, r2 = b.x, b.y, b.r
    x3, y3, r3 = c.x, c.y, c.r
    a2 = x1 - x2
    a3 = x1 - x3
    b2 = y1 - y2
    b3 = y1 - y3
    c2 = r2 - r1
    c3 = r3 - r1
    d1 = x1 * x1 + y1 * y1 - r1 * r1
    d2 = d1 - x2 * x2 - y2 * y2 + r2 * r2
    d3 = d1 - x3 * x3 - y3 * y3 + r3 * r3
    ab = a3 * b2 - a2 * b3
    if ab == 0:
        # Collinear centres: the widest pairwise circle is the answer
        pairs = [_enclose_basis2(a, b), _enclose_basis2(a, c), _enclose_basis2(b, c)]
        return max(pairs, key=lambda e: e.r)
    xa = (b2 * d3 - b3 * d2) / (ab * 2) - x1
    xb = (b3 * c2 - b2 * c3) / ab
    ya = (a3 * d2 - a2 * d3) / (ab * 2) - y1
    yb = (a2 * c3 - a3 * c2) / ab
    qa = xb * xb + yb * yb - 1
    qb = 2 * (r1 + xa * xb + ya * yb)
    qc = xa * xa + ya * ya - r1 * r1
    if abs(qa) > 1e-6:
        disc = max(0.0, qb * qb - 4 * qa * qc)
        r = -(qb + math.sqrt(disc)) / (2 * qa)
    elif qb != 0:
        r = -qc / qb
    else:
        return max((a, b, c), key=lambda e: e.r)
    return Circle(x1 + xa + xb * r, y1 + ya + yb * r, r)


def _bounding_fallback(circles: Sequence[Circle]) -> Circle:
    """Non-minimal but safe enclosing circle centred on the centroid."""
    xs = np.array([c.x for c in circles], dtype=np.float64)
    ys = np.array([c.y for c in circles], dtype=np.float64)
    rs = np.array([c.r for c in circles], dtype=np.float64)
    cx = float(xs.mean())
    cy = float(ys.mean())
    r = float(np.max(np.hypot(xs - cx, ys - cy) + rs))
    return Circle(cx, cy, r)


__all__ = ["Circle", "enclose"]
