# TextLayer - Selectable Text Layers for Vector Page Graphics
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
2D affine matrices for text placement.

Matrices use the PostScript/PDF six-element layout [a b c d e f], which maps
a point (x, y) to (a*x + c*y + e, b*x + d*y + f). Composition follows the
same convention as the PostScript ``concat`` operator: ``concat(m1, m2)``
applies m1 first, then m2.

There is no general inverse here. The text layer only needs the
rotation-free inverse built by the run normalizer, which is computed directly
from the text matrix coefficients.
"""

from __future__ import annotations

import math
from typing import NamedTuple


class Matrix(NamedTuple):
    a: float
    b: float
    c: float
    d: float
    e: float
    f: float


IDENTITY = Matrix(1.0, 0.0, 0.0, 1.0, 0.0, 0.0)


def concat(m1: Matrix, m2: Matrix) -> Matrix:
    """Return the matrix that applies m1 and then m2."""
    return Matrix(
        m1.a * m2.a + m1.b * m2.c,             # a
        m1.a * m2.b + m1.b * m2.d,             # b
        m1.c * m2.a + m1.d * m2.c,             # c
        m1.c * m2.b + m1.d * m2.d,             # d
        m1.e * m2.a + m1.f * m2.c + m2.e,      # e
        m1.e * m2.b + m1.f * m2.d + m2.f,      # f
    )


def transform_point(m: Matrix, point: tuple[float, float]) -> tuple[float, float]:
    x, y = point
    return (m.a * x + m.c * y + m.e, m.b * x + m.d * y + m.f)


def expansion(m: Matrix) -> float:
    """
    Return the geometric mean scale factor of a matrix.

    This is the square root of the absolute determinant, i.e. the factor by
    which the matrix scales lengths on average. For a text rendering matrix
    it is the effective font size.
    """
    return math.sqrt(abs(m.a * m.d - m.b * m.c))


def fmt(value: float, precision: int = 4) -> str:
    """Format a float for SVG attribute output, stripping trailing zeros."""
    if value == int(value):
        # int() also folds -0.0 into 0
        return str(int(value))
    formatted = f'{value:.{precision}f}'
    if '.' in formatted:
        formatted = formatted.rstrip('0').rstrip('.')
    if formatted == '-0':
        return '0'
    return formatted


def format_matrix(m: Matrix, precision: int = 4) -> str:
    return 'matrix(' + ','.join(fmt(v, precision) for v in m) + ')'
