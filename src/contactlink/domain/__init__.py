"""Domain layer: entities and value objects. No dependencies on outer layers."""

from contactlink.domain.entities import Contact, LinkPrecedence

__all__ = ["Contact", "LinkPrecedence"]
