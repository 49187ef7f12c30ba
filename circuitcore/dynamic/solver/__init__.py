from .integrate import IntegratorConfig, integrate  # noqa: F401
from .results import CircuitResult, ResultSet, SubStep  # noqa: F401
