"""parameter-handling: constrained parameters and reversible flattening.

This package lets model parameters live in nested trees of scalars, arrays,
records and maps, with constraints enforced by parameter wrappers, while
still exposing a flat vector of reals to generic optimizers.
"""

# Export the public API
from .api import *  # noqa: F403, F401
from .api import __all__, __version__  # noqa: F401
