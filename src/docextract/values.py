from __future__ import annotations

from typing import Any, Sequence


def _normalize_range(value: range) -> str:
    if len(value) == 0:
        return ""
    if value.step != 1:
        return ",".join(str(v) for v in value)
    return f"{value.start}-{value.stop - 1}"


def normalize_value(value: Any) -> str:
    """
    Flatten an option value for the command line.

    Ranges look like "1-10" (Python ranges are half-open, so range(1, 11)
    renders as "1-10"); sequences look like "1,2,3", with any range element
    rendered individually. Everything else uses its natural string form.
    """

    if isinstance(value, range):
        return _normalize_range(value)
    if isinstance(value, (list, tuple)):
        return ",".join(_normalize_range(v) if isinstance(v, range) else str(v) for v in value)
    return str(value)


def _positive(n: int) -> int:
    if n <= 0:
        raise ValueError("page numbers must be >= 1")
    return n


def _parse_selection(selection: str, *, page_count: int | None) -> list[int]:
    s = "".join(selection.split())
    if s.lower() == "all":
        if page_count is None:
            raise ValueError('page selection "all" requires a known page count')
        return list(range(1, page_count + 1))

    pages: list[int] = []
    for part in s.split(","):
        if not part:
            continue
        if "-" in part:
            a_str, b_str = part.split("-", 1)
            a = _positive(int(a_str))
            b = _positive(int(b_str))
            if b < a:
                raise ValueError(f"invalid range: {part!r}")
            pages.extend(range(a, b + 1))
        else:
            pages.append(_positive(int(part)))
    return pages


def page_list(value: Any, *, page_count: int | None = None) -> list[int]:
    """
    Expand a page selector into 1-indexed page numbers.

    Accepts the same shapes `normalize_value` does, plus its string output.
    Order follows the selector; duplicates are dropped. None selects every
    page and therefore needs `page_count`.
    """

    if value is None:
        value = "all"

    if isinstance(value, bool):
        raise TypeError("page selector must not be a bool")
    if isinstance(value, int):
        pages = [_positive(value)]
    elif isinstance(value, range):
        pages = [_positive(v) for v in value]
    elif isinstance(value, str):
        pages = _parse_selection(value, page_count=page_count)
    elif isinstance(value, Sequence):
        pages = _parse_selection(normalize_value(list(value)), page_count=page_count)
    else:
        raise TypeError(f"unsupported page selector: {value!r}")

    seen: set[int] = set()
    ordered: list[int] = []
    for p in pages:
        if p not in seen:
            seen.add(p)
            ordered.append(p)

    if page_count is not None and ordered and max(ordered) > page_count:
        raise ValueError(f"page selection out of bounds (1..{page_count})")
    return ordered
