"""Dependency routing - target map and input/output sets."""

from typing import Iterable

from .models import Dependency, TargetMap


def create_target_meta(
    targets: Iterable[tuple[int, str]], fn_index: int, target_map: TargetMap
) -> TargetMap:
    """
    Add one dependency's (component, trigger) targets to the target map.

    Args:
        targets: (component id, trigger) pairs of the dependency
        fn_index: Index of the dependency in declaration order
        target_map: Shared map, mutated in place

    Returns:
        The same target map
    """
    for component_id, trigger in targets:
        triggers = target_map.setdefault(component_id, {})
        fn_indices = triggers.get(trigger)
        if fn_indices is None:
            triggers[trigger] = [fn_index]
        elif fn_index not in fn_indices:
            fn_indices.append(fn_index)

    return target_map


def get_inputs_outputs(
    dep: Dependency, inputs: set[int], outputs: set[int]
) -> tuple[set[int], set[int]]:
    """Accumulate the ids a dependency reads from and writes to."""
    inputs.update(dep.inputs)
    outputs.update(dep.outputs)
    return inputs, outputs


__all__ = ["create_target_meta", "get_inputs_outputs"]
