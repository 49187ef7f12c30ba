from .network import (  # noqa: F401
    DynamicCircuit,
    DynamicSolution,
    DynamicState,
    InternalNode,
    ResistiveBattery,
)
