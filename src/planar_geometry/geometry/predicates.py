# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""
Adaptive-precision geometric predicates.

Orientation and in-circle tests that return the correct sign even when
the true value is numerically close to zero. Each predicate first
evaluates a plain floating-point determinant together with an error
bound; only when the estimate does not clear the bound does it fall
back to floating-point expansion arithmetic (sums of non-overlapping
doubles, Shewchuk 1997), which is exact.

Sign convention (y axis pointing up):

- ``orientation(a, b, c) > 0`` when ``a -> b -> c`` turns left (CCW),
  ``< 0`` when it turns right, and exactly ``0`` when collinear.
- ``incircle(a, b, c, d) > 0`` when ``d`` lies strictly inside the circle
  through the CCW triangle ``a, b, c``.

The functions are pure and safe to call from several threads.
"""

from typing import List, Tuple

EPSILON = 1.1102230246251565e-16  # 2 ** -53
SPLITTER = 134217729.0  # 2 ** 27 + 1

RESULTERRBOUND = (3 + 8 * EPSILON) * EPSILON
CCWERRBOUND_A = (3 + 16 * EPSILON) * EPSILON
CCWERRBOUND_B = (2 + 12 * EPSILON) * EPSILON
CCWERRBOUND_C = (9 + 64 * EPSILON) * EPSILON * EPSILON
ICCERRBOUND_A = (10 + 96 * EPSILON) * EPSILON

Expansion = List[float]


# ---------------------------------------------------------------------------
# Error-free transformations
# ---------------------------------------------------------------------------

def two_sum(a: float, b: float) -> Tuple[float, float]:
    """Return ``(x, y)`` with ``x = fl(a + b)`` and ``x + y == a + b`` exactly."""
    x = a + b
    bvirt = x - a
    avirt = x - bvirt
    return x, (a - avirt) + (b - bvirt)


def fast_two_sum(a: float, b: float) -> Tuple[float, float]:
    """Like :func:`two_sum`, requires ``|a| >= |b|``."""
    x = a + b
    bvirt = x - a
    return x, b - bvirt


def two_diff(a: float, b: float) -> Tuple[float, float]:
    """Return ``(x, y)`` with ``x = fl(a - b)`` and ``x + y == a - b`` exactly."""
    x = a - b
    return x, two_diff_tail(a, b, x)


def two_diff_tail(a: float, b: float, x: float) -> float:
    bvirt = a - x
    avirt = x + bvirt
    return (a - avirt) + (bvirt - b)


def split(a: float) -> Tuple[float, float]:
    """Split ``a`` into two non-overlapping halves of 26 significant bits."""
    c = SPLITTER * a
    hi = c - (c - a)
    return hi, a - hi


def two_product(a: float, b: float) -> Tuple[float, float]:
    """Return ``(x, y)`` with ``x = fl(a * b)`` and ``x + y == a * b`` exactly."""
    x = a * b
    ahi, alo = split(a)
    bhi, blo = split(b)
    err = x - ahi * bhi - alo * bhi - ahi * blo
    return x, alo * blo - err


def _two_product_presplit(a: float, b: float, bhi: float, blo: float) -> Tuple[float, float]:
    x = a * b
    ahi, alo = split(a)
    err = x - ahi * bhi - alo * bhi - ahi * blo
    return x, alo * blo - err


def two_two_diff(a1: float, a0: float, b1: float, b0: float) -> Expansion:
    """Exact ``(a1 + a0) - (b1 + b0)`` as a 4-component expansion."""
    i, x0 = two_diff(a0, b0)
    j, k = two_sum(a1, i)
    i, x1 = two_diff(k, b1)
    x3, x2 = two_sum(j, i)
    return [x0, x1, x2, x3]


# ---------------------------------------------------------------------------
# Expansion arithmetic
# ---------------------------------------------------------------------------

def expansion_sum(e: Expansion, f: Expansion) -> Expansion:
    """
    Sum two expansions, eliminating zero components.

    Both inputs must be non-overlapping and sorted by increasing
    magnitude; so is the result.

    :param e: First expansion.
    :type e: List[float]
    :param f: Second expansion.
    :type f: List[float]
    :return: Expansion whose exact value is ``sum(e) + sum(f)``.
    :rtype: List[float]
    """
    if not e:
        return list(f) if f else [0.0]
    if not f:
        return list(e)

    elen, flen = len(e), len(f)
    h: Expansion = []
    eindex = findex = 0
    enow, fnow = e[0], f[0]
    if (fnow > enow) == (fnow > -enow):
        q = enow
        eindex += 1
    else:
        q = fnow
        findex += 1

    if eindex < elen and findex < flen:
        enow, fnow = e[eindex], f[findex]
        if (fnow > enow) == (fnow > -enow):
            q, hh = fast_two_sum(enow, q)
            eindex += 1
        else:
            q, hh = fast_two_sum(fnow, q)
            findex += 1
        if hh:
            h.append(hh)
        while eindex < elen and findex < flen:
            enow, fnow = e[eindex], f[findex]
            if (fnow > enow) == (fnow > -enow):
                q, hh = two_sum(q, enow)
                eindex += 1
            else:
                q, hh = two_sum(q, fnow)
                findex += 1
            if hh:
                h.append(hh)

    while eindex < elen:
        q, hh = two_sum(q, e[eindex])
        eindex += 1
        if hh:
            h.append(hh)
    while findex < flen:
        q, hh = two_sum(q, f[findex])
        findex += 1
        if hh:
            h.append(hh)

    if q != 0 or not h:
        h.append(q)
    return h


def scale_expansion(e: Expansion, b: float) -> Expansion:
    """Multiply an expansion by a double, eliminating zero components."""
    if not e:
        return [0.0]
    bhi, blo = split(b)
    q, hh = _two_product_presplit(e[0], b, bhi, blo)
    h: Expansion = [hh] if hh else []
    for enow in e[1:]:
        product1, product0 = _two_product_presplit(enow, b, bhi, blo)
        total, hh = two_sum(q, product0)
        if hh:
            h.append(hh)
        q, hh = fast_two_sum(product1, total)
        if hh:
            h.append(hh)
    if q != 0 or not h:
        h.append(q)
    return h


def expansion_product(e: Expansion, f: Expansion) -> Expansion:
    """Exact product of two expansions."""
    result: Expansion = [0.0]
    for component in f:
        if component:
            result = expansion_sum(result, scale_expansion(e, component))
    return result


def negate(e: Expansion) -> Expansion:
    return [-c for c in e]


def estimate(e: Expansion) -> float:
    """Floating-point approximation of an expansion's value."""
    q = e[0]
    for component in e[1:]:
        q += component
    return q


def _diff_expansion(a: float, b: float) -> Expansion:
    x, y = two_diff(a, b)
    return [y, x] if y else [x]


# ---------------------------------------------------------------------------
# Orientation
# ---------------------------------------------------------------------------

def _orientation_adapt(ax, ay, bx, by, cx, cy, detsum):
    acx = ax - cx
    bcx = bx - cx
    acy = ay - cy
    bcy = by - cy

    detleft, detlefttail = two_product(acx, bcy)
    detright, detrighttail = two_product(acy, bcx)
    b_exp = two_two_diff(detleft, detlefttail, detright, detrighttail)

    det = estimate(b_exp)
    errbound = CCWERRBOUND_B * detsum
    if det >= errbound or -det >= errbound:
        return det

    acxtail = two_diff_tail(ax, cx, acx)
    bcxtail = two_diff_tail(bx, cx, bcx)
    acytail = two_diff_tail(ay, cy, acy)
    bcytail = two_diff_tail(by, cy, bcy)

    if acxtail == 0 and acytail == 0 and bcxtail == 0 and bcytail == 0:
        return det

    errbound = CCWERRBOUND_C * detsum + RESULTERRBOUND * abs(det)
    det += (acx * bcytail + bcy * acxtail) - (acy * bcxtail + bcx * acytail)
    if det >= errbound or -det >= errbound:
        return det

    s1, s0 = two_product(acxtail, bcy)
    t1, t0 = two_product(acytail, bcx)
    c1 = expansion_sum(b_exp, two_two_diff(s1, s0, t1, t0))

    s1, s0 = two_product(acx, bcytail)
    t1, t0 = two_product(acy, bcxtail)
    c2 = expansion_sum(c1, two_two_diff(s1, s0, t1, t0))

    s1, s0 = two_product(acxtail, bcytail)
    t1, t0 = two_product(acytail, bcxtail)
    d = expansion_sum(c2, two_two_diff(s1, s0, t1, t0))

    return d[-1]


def orientation(ax: float, ay: float, bx: float, by: float, cx: float, cy: float) -> float:
    """
    Signed orientation of the triangle ``a, b, c``.

    The magnitude approximates twice the signed area; only the sign is
    guaranteed exact.

    :return: Positive for CCW, negative for CW, zero when collinear.
    :rtype: float
    """
    detleft = (ax - cx) * (by - cy)
    detright = (ay - cy) * (bx - cx)
    det = detleft - detright

    detsum = abs(detleft + detright)
    if abs(det) >= CCWERRBOUND_A * detsum:
        return det

    return _orientation_adapt(ax, ay, bx, by, cx, cy, detsum)


# ---------------------------------------------------------------------------
# In-circle
# ---------------------------------------------------------------------------

def _incircle_exact(ax, ay, bx, by, cx, cy, dx, dy):
    adx, ady = _diff_expansion(ax, dx), _diff_expansion(ay, dy)
    bdx, bdy = _diff_expansion(bx, dx), _diff_expansion(by, dy)
    cdx, cdy = _diff_expansion(cx, dx), _diff_expansion(cy, dy)

    alift = expansion_sum(expansion_product(adx, adx), expansion_product(ady, ady))
    blift = expansion_sum(expansion_product(bdx, bdx), expansion_product(bdy, bdy))
    clift = expansion_sum(expansion_product(cdx, cdx), expansion_product(cdy, cdy))

    bc = expansion_sum(expansion_product(bdx, cdy), negate(expansion_product(cdx, bdy)))
    ca = expansion_sum(expansion_product(cdx, ady), negate(expansion_product(adx, cdy)))
    ab = expansion_sum(expansion_product(adx, bdy), negate(expansion_product(bdx, ady)))

    det = expansion_sum(expansion_product(alift, bc), expansion_product(blift, ca))
    det = expansion_sum(det, expansion_product(clift, ab))
    return det[-1]


def incircle(ax: float, ay: float, bx: float, by: float,
             cx: float, cy: float, dx: float, dy: float) -> float:
    """
    In-circle determinant of ``d`` against the circle through ``a, b, c``.

    :return: Positive when ``d`` is strictly inside the circle of a CCW
        triangle ``a, b, c`` (outside for a CW one), zero when cocircular.
    :rtype: float
    """
    adx = ax - dx
    bdx = bx - dx
    cdx = cx - dx
    ady = ay - dy
    bdy = by - dy
    cdy = cy - dy

    bdxcdy = bdx * cdy
    cdxbdy = cdx * bdy
    alift = adx * adx + ady * ady

    cdxady = cdx * ady
    adxcdy = adx * cdy
    blift = bdx * bdx + bdy * bdy

    adxbdy = adx * bdy
    bdxady = bdx * ady
    clift = cdx * cdx + cdy * cdy

    det = (alift * (bdxcdy - cdxbdy)
           + blift * (cdxady - adxcdy)
           + clift * (adxbdy - bdxady))

    permanent = ((abs(bdxcdy) + abs(cdxbdy)) * alift
                 + (abs(cdxady) + abs(adxcdy)) * blift
                 + (abs(adxbdy) + abs(bdxady)) * clift)
    errbound = ICCERRBOUND_A * permanent
    if det > errbound or -det > errbound:
        return det

    return _incircle_exact(ax, ay, bx, by, cx, cy, dx, dy)


# ---------------------------------------------------------------------------
# Point-level wrappers
# ---------------------------------------------------------------------------

def orient(a, b, c) -> int:
    """Sign of :func:`orientation` for objects with ``x``/``y``: 1, 0 or -1."""
    det = orientation(a.x, a.y, b.x, b.y, c.x, c.y)
    return int(det > 0) - int(det < 0)


def in_circumcircle(a, b, c, d) -> bool:
    """True iff ``d`` lies strictly inside the circumcircle of CCW ``a, b, c``."""
    return incircle(a.x, a.y, b.x, b.y, c.x, c.y, d.x, d.y) > 0
