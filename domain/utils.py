from __future__ import annotations


def split_csv(raw: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()
