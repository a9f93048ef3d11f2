"""CSS injection capability: handle protocol and in-memory implementation."""

from userstyles.injection.base import InjectionCapability, StyleHandle
from userstyles.injection.memory import MemoryHandle, MemoryInjection

__all__ = ["InjectionCapability", "MemoryHandle", "MemoryInjection", "StyleHandle"]
