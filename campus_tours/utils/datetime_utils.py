from datetime import datetime, timezone


def to_naive_utc(dt):
    """Normalise a datetime for storage in a naive UTC column.

    Aware values are converted to UTC and stripped of tzinfo; naive values
    are assumed to already be UTC and returned unchanged.
    """
    if dt is None or not isinstance(dt, datetime):
        return dt
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)
