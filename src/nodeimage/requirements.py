"""Node label requirements and compatibility checks.

A requirement constrains one label key with an operator and a value set. The
instance type side describes what a node of that shape will carry; the image
side describes what the image needs. Two requirement sets are compatible
when every shared key has overlapping allowed values and every image-only
key is either tolerant of absence or a well-known/restricted label the
instance type is allowed to leave undefined.

Public API:
    Operator: Requirement operators
    Requirement: Single-key constraint
    Requirements: Keyed set of constraints with compatibility checks
    is_well_known_or_restricted: Label may be undefined on the instance side
"""

import math
from dataclasses import dataclass, field
from enum import StrEnum

# Well-known labels
LABEL_ARCH = "kubernetes.io/arch"
LABEL_OS = "kubernetes.io/os"
LABEL_INSTANCE_TYPE = "node.kubernetes.io/instance-type"
LABEL_ZONE = "topology.kubernetes.io/zone"
LABEL_REGION = "topology.kubernetes.io/region"
LABEL_CAPACITY_TYPE = "karpenter.sh/capacity-type"
LABEL_NODEPOOL = "karpenter.sh/nodepool"

# Azure SKU labels
LABEL_SKU_HYPERV_GENERATION = "karpenter.azure.com/sku-hyperv-generation"
LABEL_SKU_FAMILY = "karpenter.azure.com/sku-family"
LABEL_SKU_NAME = "karpenter.azure.com/sku-name"
LABEL_SKU_CPU = "karpenter.azure.com/sku-cpu"
LABEL_SKU_GPU_NAME = "karpenter.azure.com/sku-gpu-name"

ARCHITECTURE_AMD64 = "amd64"
ARCHITECTURE_ARM64 = "arm64"
HYPERV_GENERATION_V1 = "1"
HYPERV_GENERATION_V2 = "2"

WELL_KNOWN_LABELS = frozenset(
    {
        LABEL_ARCH,
        LABEL_OS,
        LABEL_INSTANCE_TYPE,
        LABEL_ZONE,
        LABEL_REGION,
        LABEL_CAPACITY_TYPE,
        LABEL_NODEPOOL,
    }
)

RESTRICTED_LABEL_DOMAINS = frozenset(
    {"kubernetes.io", "k8s.io", "karpenter.sh", "karpenter.azure.com"}
)


def is_well_known_or_restricted(key: str) -> bool:
    """Check if an instance type may leave this label undefined.

    Args:
        key: Label key

    Returns:
        True for well-known labels and labels under a restricted domain
    """
    if key in WELL_KNOWN_LABELS:
        return True
    if "/" not in key:
        return False
    domain = key.split("/", 1)[0]
    return any(domain == d or domain.endswith(f".{d}") for d in RESTRICTED_LABEL_DOMAINS)


class Operator(StrEnum):
    """Requirement operators, as in Kubernetes node selector requirements."""

    IN = "In"
    NOT_IN = "NotIn"
    EXISTS = "Exists"
    DOES_NOT_EXIST = "DoesNotExist"
    GT = "Gt"
    LT = "Lt"


@dataclass(frozen=True)
class Requirement:
    """Constraint on a single label key.

    Internally a requirement is a value set that is either finite
    (``complement=False``) or everything except ``values``
    (``complement=True``), optionally narrowed by integer bounds.

    Attributes:
        key: Label key
        complement: Values are excluded rather than allowed
        values: Allowed (or excluded) values
        greater_than: Exclusive integer lower bound
        less_than: Exclusive integer upper bound
    """

    key: str
    complement: bool = False
    values: frozenset[str] = field(default_factory=frozenset)
    greater_than: int | None = None
    less_than: int | None = None

    @classmethod
    def new(cls, key: str, operator: Operator | str, *values: str) -> "Requirement":
        """Build a requirement from an operator and values.

        Example:
            >>> Requirement.new("kubernetes.io/arch", "In", "amd64")
        """
        operator = Operator(operator)
        if operator == Operator.IN:
            return cls(key=key, values=frozenset(values))
        if operator == Operator.NOT_IN:
            return cls(key=key, complement=True, values=frozenset(values))
        if operator == Operator.EXISTS:
            return cls(key=key, complement=True)
        if operator == Operator.DOES_NOT_EXIST:
            return cls(key=key)
        if len(values) != 1:
            raise ValueError(f"{operator} requires exactly one value, got {len(values)}")
        bound = int(values[0])
        if operator == Operator.GT:
            return cls(key=key, complement=True, greater_than=bound)
        return cls(key=key, complement=True, less_than=bound)

    @property
    def operator(self) -> Operator:
        """Operator this requirement is equivalent to."""
        if self.complement:
            if self.greater_than is not None:
                return Operator.GT
            if self.less_than is not None:
                return Operator.LT
            return Operator.NOT_IN if self.values else Operator.EXISTS
        return Operator.IN if self.values else Operator.DOES_NOT_EXIST

    def _within_bounds(self, value: str) -> bool:
        if self.greater_than is None and self.less_than is None:
            return True
        try:
            number = int(value)
        except ValueError:
            return False
        if self.greater_than is not None and number <= self.greater_than:
            return False
        if self.less_than is not None and number >= self.less_than:
            return False
        return True

    def size(self) -> float:
        """Number of allowed values (math.inf for complement sets)."""
        if self.complement:
            return math.inf
        return len(self.values)

    def intersection(self, other: "Requirement") -> "Requirement":
        """Values allowed by both requirements.

        Args:
            other: Requirement on the same key

        Returns:
            Requirement allowing only values both allow
        """
        greater_than = _max_bound(self.greater_than, other.greater_than)
        less_than = _min_bound(self.less_than, other.less_than)
        if greater_than is not None and less_than is not None and greater_than >= less_than - 1:
            return Requirement(key=self.key)

        if self.complement and other.complement:
            return Requirement(
                key=self.key,
                complement=True,
                values=self.values | other.values,
                greater_than=greater_than,
                less_than=less_than,
            )

        if self.complement:
            values = other.values - self.values
        elif other.complement:
            values = self.values - other.values
        else:
            values = self.values & other.values

        narrowed = Requirement(key=self.key, greater_than=greater_than, less_than=less_than)
        return Requirement(
            key=self.key, values=frozenset(v for v in values if narrowed._within_bounds(v))
        )

    def has(self, value: str) -> bool:
        """Check if value is allowed."""
        if self.complement:
            return value not in self.values and self._within_bounds(value)
        return value in self.values and self._within_bounds(value)

    def __str__(self) -> str:
        operator = self.operator
        if operator in (Operator.EXISTS, Operator.DOES_NOT_EXIST):
            return f"{self.key} {operator}"
        if operator == Operator.GT:
            return f"{self.key} Gt {self.greater_than}"
        if operator == Operator.LT:
            return f"{self.key} Lt {self.less_than}"
        return f"{self.key} {operator} [{', '.join(sorted(self.values))}]"


def _max_bound(a: int | None, b: int | None) -> int | None:
    if a is None:
        return b
    if b is None:
        return a
    return max(a, b)


def _min_bound(a: int | None, b: int | None) -> int | None:
    if a is None:
        return b
    if b is None:
        return a
    return min(a, b)


_ABSENCE_TOLERANT = (Operator.NOT_IN, Operator.DOES_NOT_EXIST)


class Requirements:
    """Requirements keyed by label; adding a key twice intersects them.

    Example:
        >>> image = Requirements(
        ...     Requirement.new(LABEL_ARCH, "In", ARCHITECTURE_AMD64),
        ...     Requirement.new(LABEL_SKU_HYPERV_GENERATION, "In", HYPERV_GENERATION_V2),
        ... )
        >>> instance = Requirements.from_labels({LABEL_ARCH: "amd64"})
        >>> instance.compatible(image)
        True
    """

    def __init__(self, *requirements: Requirement):
        self._requirements: dict[str, Requirement] = {}
        for requirement in requirements:
            self.add(requirement)

    @classmethod
    def from_labels(cls, labels: dict[str, str]) -> "Requirements":
        """Build ``In`` requirements from concrete node labels."""
        return cls(*(Requirement.new(k, Operator.IN, v) for k, v in labels.items()))

    def add(self, requirement: Requirement) -> None:
        existing = self._requirements.get(requirement.key)
        if existing is not None:
            requirement = existing.intersection(requirement)
        self._requirements[requirement.key] = requirement

    def get(self, key: str) -> Requirement:
        """Requirement for key; an undefined key allows any value."""
        return self._requirements.get(key, Requirement(key=key, complement=True))

    def keys(self) -> set[str]:
        return set(self._requirements)

    def __contains__(self, key: str) -> bool:
        return key in self._requirements

    def __iter__(self):
        return iter(self._requirements.values())

    def __len__(self) -> int:
        return len(self._requirements)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Requirements):
            return NotImplemented
        return self._requirements == other._requirements

    def __hash__(self) -> int:
        return hash(frozenset(self._requirements.values()))

    def __repr__(self) -> str:
        return f"Requirements({', '.join(str(r) for r in self)})"

    def intersects(self, other: "Requirements") -> list[str]:
        """Check shared keys for overlapping values.

        Args:
            other: Incoming requirements

        Returns:
            Error messages, empty when every shared key overlaps
        """
        errors = []
        for key in sorted(self.keys() & other.keys()):
            existing = self._requirements[key]
            incoming = other._requirements[key]
            if existing.intersection(incoming).size() > 0:
                continue
            # Two requirements that both tolerate absence never conflict
            if incoming.operator in _ABSENCE_TOLERANT and existing.operator in _ABSENCE_TOLERANT:
                continue
            errors.append(f"key {key}, {incoming} not in {existing}")
        return errors

    def compatibility_errors(
        self, other: "Requirements", allow_undefined_well_known: bool = True
    ) -> list[str]:
        """Explain why other is incompatible with these requirements.

        Args:
            other: Incoming requirements (e.g. an image's)
            allow_undefined_well_known: Let well-known and restricted labels
                be undefined on this side

        Returns:
            Error messages, empty when compatible
        """
        errors = []
        for key in sorted(other.keys() - self.keys()):
            if other._requirements[key].operator in _ABSENCE_TOLERANT:
                continue
            if allow_undefined_well_known and is_well_known_or_restricted(key):
                continue
            errors.append(f'label "{key}" does not have known values')
        errors.extend(self.intersects(other))
        return errors

    def compatible(self, other: "Requirements", allow_undefined_well_known: bool = True) -> bool:
        """Check compatibility with other requirements."""
        return not self.compatibility_errors(other, allow_undefined_well_known)


__all__ = [
    "ARCHITECTURE_AMD64",
    "ARCHITECTURE_ARM64",
    "HYPERV_GENERATION_V1",
    "HYPERV_GENERATION_V2",
    "LABEL_ARCH",
    "LABEL_CAPACITY_TYPE",
    "LABEL_INSTANCE_TYPE",
    "LABEL_NODEPOOL",
    "LABEL_OS",
    "LABEL_REGION",
    "LABEL_SKU_CPU",
    "LABEL_SKU_FAMILY",
    "LABEL_SKU_GPU_NAME",
    "LABEL_SKU_HYPERV_GENERATION",
    "LABEL_SKU_NAME",
    "LABEL_ZONE",
    "WELL_KNOWN_LABELS",
    "Operator",
    "Requirement",
    "Requirements",
    "is_well_known_or_restricted",
]
