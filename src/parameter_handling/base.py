"""Abstract base for constrained parameters.

A Parameter pairs an unconstrained representation, which is what gets
flattened and handed to an optimizer, with a transform that maps it back
into a constraint set. Parameters are immutable: unflattening always builds
a new instance from new unconstrained values.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Tuple

import numpy as np

Unflatten = Callable[[np.ndarray], Any]


class Parameter(ABC):
    """Base class for every node that takes part in flatten and resolve."""

    @abstractmethod
    def resolve(self) -> Any:
        """Return the constrained, plain value of this parameter."""

    @abstractmethod
    def flatten(self, dtype) -> Tuple[np.ndarray, Unflatten]:
        """Flatten the unconstrained representation only.

        Args:
            dtype: Floating numpy dtype of the returned vector

        Returns:
            Tuple of (vector, unflatten) where ``unflatten`` builds a new
            parameter of the same kind from a vector of the same length
        """
