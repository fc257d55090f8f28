"""Interactivity inference for assembled components."""

from typing import Any


def has_no_default_value(value: Any) -> bool:
    """
    Check whether a value looks like an unset default.

    Zero counts as "no default", same as None, False, "" and empty lists.
    Empty mappings and sets are real defaults.
    """
    if value is None or value is False or value == "":
        return True
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0
    return False


def determine_interactivity(
    id: int,
    interactive_prop: bool | None,
    value: Any,
    inputs: set[int],
    outputs: set[int],
) -> bool:
    """
    Decide whether a component accepts user input.

    Args:
        id: Component id
        interactive_prop: Explicit ``interactive`` prop, if the server set one
        value: The component's main value
        inputs: Ids that are an input of any dependency
        outputs: Ids that are an output of any dependency

    Returns:
        True if the component is interactive
    """
    if interactive_prop is False:
        return False
    if interactive_prop is True:
        return True
    return id in inputs or (id not in outputs and has_no_default_value(value))


__all__ = ["has_no_default_value", "determine_interactivity"]
