import json


def normalize_id_list(value) -> list[int]:
    """Accept ids as a list, a JSON array string, a comma-separated string or a single number.

    Anything that is not a positive integer is dropped, including fractional
    numbers such as 1.9.
    """
    if value is None or value == "":
        return []
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        items = [value]
    elif isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError:
            parsed = [part.strip() for part in value.split(",")]
        items = parsed if isinstance(parsed, list) else [parsed]
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        return []

    ids: list[int] = []
    for item in items:
        if isinstance(item, float) and not item.is_integer():
            continue
        try:
            n = int(item)
        except (TypeError, ValueError):
            continue
        if n > 0 and n not in ids:
            ids.append(n)
    return ids
