"""
The operands are the dependent kinds kept in sync with the HyperConverged
parent. Each kind is one variant of OperandKind, which binds its static
descriptor to the hooks that implement it.
"""

# Standard
from enum import Enum
from typing import Type

# Local
from .base import OperandDescriptor, OperandHooks
from .generic import ChangeOutcome, EnsureResult, GenericOperand
from .kubevirt import KUBEVIRT_DESCRIPTOR, KubeVirtHooks, new_kubevirt
from .kubevirt_config import (
    KUBEVIRT_CONFIG_DESCRIPTOR,
    KubeVirtConfigHooks,
    new_kubevirt_config_for_cr,
)
from .priority_class import (
    PRIORITY_CLASS_DESCRIPTOR,
    PriorityClassHooks,
    new_kubevirt_priority_class,
)


class OperandKind(Enum):
    """The closed set of operand kinds, in the order they are reconciled"""

    KUBEVIRT_CONFIG = "KubeVirtConfig"
    KUBEVIRT_PRIORITY_CLASS = "KubeVirtPriorityClass"
    KUBEVIRT = "KubeVirt"

    @property
    def descriptor(self) -> OperandDescriptor:
        return _DESCRIPTORS[self]

    @property
    def hooks_class(self) -> Type[OperandHooks]:
        return _HOOKS[self]

    def make_hooks(self) -> OperandHooks:
        return self.hooks_class()


_DESCRIPTORS = {
    OperandKind.KUBEVIRT_CONFIG: KUBEVIRT_CONFIG_DESCRIPTOR,
    OperandKind.KUBEVIRT_PRIORITY_CLASS: PRIORITY_CLASS_DESCRIPTOR,
    OperandKind.KUBEVIRT: KUBEVIRT_DESCRIPTOR,
}

_HOOKS = {
    OperandKind.KUBEVIRT_CONFIG: KubeVirtConfigHooks,
    OperandKind.KUBEVIRT_PRIORITY_CLASS: PriorityClassHooks,
    OperandKind.KUBEVIRT: KubeVirtHooks,
}

# Every kind must be bound to both a descriptor and hooks
assert set(_DESCRIPTORS) == set(OperandKind) == set(_HOOKS)
