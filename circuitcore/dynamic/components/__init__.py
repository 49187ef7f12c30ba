from .base import CompanionModel, DynamicElement, DynamicElementState, updated_state  # noqa: F401
from .capacitor import Capacitor, rescale_for_capacitance  # noqa: F401
from .inductor import Inductor  # noqa: F401
from .companion import to_companion_model  # noqa: F401
