from typing import Any, Iterable, Mapping, Sequence


def assert_required_columns(df, required: Iterable[str]) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def assert_records(records: Sequence[Any]) -> None:
    bad = [i for i, r in enumerate(records) if not isinstance(r, Mapping)]
    if bad:
        raise ValueError(f"Expected JSON objects for every item; non-object entries at positions: {bad}")
