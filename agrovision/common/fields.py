from typing import Any


def column_values(data: dict[str, Any], field_map: dict[str, str]) -> dict[str, Any]:
    """Rename API payload keys to model column names, dropping unknown keys."""
    return {field_map[key]: value for key, value in data.items() if key in field_map}


def apply_values(entity: Any, values: dict[str, Any]) -> None:
    for column, value in values.items():
        setattr(entity, column, value)
