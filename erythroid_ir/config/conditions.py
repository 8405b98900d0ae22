"""Maturation-stage ordering shared by every pipeline component.

The erythroid stages are ordered proerythroblast -> early basophilic ->
late basophilic -> polychromatic -> orthochromatic. Filtering, the result
summary, the retention matrix and the distribution curves all sort and
validate conditions through a single ``ConditionOrder`` value.

Example
-------
>>> from erythroid_ir.config import ConditionOrder
>>> order = ConditionOrder()
>>> order.sort(["poly", "pro", "ortho"])
['pro', 'poly', 'ortho']
>>> order.position("lbaso")
2
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List

import pandas as pd
import yaml


ERYTHROID_STAGES = ("pro", "ebaso", "lbaso", "poly", "ortho")


@dataclass(frozen=True)
class ConditionOrder:
    """Ordered enumeration of experimental conditions.

    Attributes
    ----------
    conditions : tuple of str
        Condition labels in biological order (earliest first)
    """

    conditions: tuple = field(default=ERYTHROID_STAGES)

    def __post_init__(self):
        labels = tuple(str(c) for c in self.conditions)
        if not labels:
            raise ValueError("Condition order must contain at least one condition")
        if len(set(labels)) != len(labels):
            raise ValueError(f"Duplicate conditions in order: {list(labels)}")
        object.__setattr__(self, "conditions", labels)

    def __len__(self) -> int:
        return len(self.conditions)

    def __iter__(self):
        return iter(self.conditions)

    def __contains__(self, condition) -> bool:
        return str(condition) in self.conditions

    @property
    def dtype(self) -> pd.CategoricalDtype:
        """Ordered pandas dtype for condition columns."""
        return pd.CategoricalDtype(categories=list(self.conditions), ordered=True)

    def position(self, condition: str) -> int:
        """Return the ordinal position of a condition.

        Raises
        ------
        ValueError
            If the condition is not part of this ordering
        """
        try:
            return self.conditions.index(str(condition))
        except ValueError:
            raise ValueError(
                f"Unknown condition '{condition}'. Expected one of {list(self.conditions)}"
            ) from None

    def validate(self, conditions: Iterable[str]) -> None:
        """Raise ValueError if any label is outside the ordering."""
        unknown = sorted({str(c) for c in conditions} - set(self.conditions))
        if unknown:
            raise ValueError(
                f"Unknown conditions {unknown}. Expected one of {list(self.conditions)}"
            )

    def sort(self, conditions: Iterable[str]) -> List[str]:
        """Sort condition labels by their ordinal position."""
        return sorted(conditions, key=self.position)

    def categorical(self, values: Iterable[str]) -> pd.Categorical:
        """Convert labels to an ordered categorical, validating them first."""
        values = [str(v) for v in values]
        self.validate(values)
        return pd.Categorical(values, categories=list(self.conditions), ordered=True)

    @classmethod
    def from_yaml(cls, path: Path) -> "ConditionOrder":
        """Load ordering from a YAML file with a ``conditions`` list."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.from_value(data.get("conditions", ERYTHROID_STAGES))

    @classmethod
    def from_value(cls, value) -> "ConditionOrder":
        """Build from a list, a mapping with an ``order`` key, or an instance."""
        if isinstance(value, ConditionOrder):
            return value
        if isinstance(value, dict):
            value = value.get("order", ERYTHROID_STAGES)
        return cls(conditions=tuple(value))
