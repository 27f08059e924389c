from __future__ import annotations

from hypothesis import strategies as st


def distance_strategy(max_value: float = 20000.0) -> st.SearchStrategy[float]:
    return st.floats(min_value=0.0, max_value=max_value, allow_nan=False, allow_infinity=False)


def zoom_strategy() -> st.SearchStrategy[float]:
    return st.floats(min_value=0.0, max_value=22.0, allow_nan=False, allow_infinity=False)


def offset_strategy() -> st.SearchStrategy[float]:
    return st.floats(min_value=-1e12, max_value=1e12, allow_nan=False, allow_infinity=False)


def canvas_size_strategy() -> st.SearchStrategy[float]:
    return st.floats(min_value=1.0, max_value=8000.0, allow_nan=False, allow_infinity=False)
