"""
Unlock Resolver - strict sequential availability of sections and modules.

One left-to-right pass over items in order_index order. The first item is
available; each later item is available iff the nearest earlier completable
item is completed. Items that cannot be completed (no content at all) are
passed through: they neither lock nor unlock what follows.
"""

from dataclasses import dataclass
from typing import List, Sequence


@dataclass(frozen=True)
class Gate:
    """Completion state of one ordered item."""

    completed: bool
    completable: bool = True


def resolve_availability(
    gates: Sequence[Gate],
    *,
    enforce: bool = True,
    first_available: bool = True,
) -> List[bool]:
    """
    Availability for each gate, in order.

    first_available=False locks everything, e.g. the sections of a module
    that is itself still locked.
    """
    if not enforce:
        return [True] * len(gates)
    if not first_available:
        return [False] * len(gates)

    available: List[bool] = []
    gate_open = True
    for gate in gates:
        available.append(gate_open)
        if gate.completable:
            gate_open = gate.completed
    return available


def module_gate(section_gates: Sequence[Gate]) -> Gate:
    """A module is complete when all of its completable sections are."""
    completable = [g for g in section_gates if g.completable]
    if not completable:
        return Gate(completed=False, completable=False)
    return Gate(completed=all(g.completed for g in completable))
