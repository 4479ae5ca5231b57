"""Repository layer: attendance statements built with the query builder.

Keep functions thin and focused, so services avoid SQL strings.
"""
from __future__ import annotations
