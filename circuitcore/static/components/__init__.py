from .base import StaticElement, StampData, NodeId  # noqa: F401
from .passive import Resistor  # noqa: F401
from .sources import Battery, CurrentSource  # noqa: F401
