"""
Client domain model.
A client owns zero or more projects.
"""

from dataclasses import dataclass

from timekeep.domain.models.base import BaseEntity, ValidationError

MAX_NAME_LENGTH = 255


def clean_name(name: str, label: str) -> str:
    """Trim and bound a catalog name."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(f"{label} name is required", "name")
    name = name.strip()
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"{label} name is too long (max {MAX_NAME_LENGTH} characters)", "name")
    return name


@dataclass(kw_only=True)
class Client(BaseEntity):
    """Client entity."""

    name: str

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        self.name = clean_name(self.name, "Client")

    def rename(self, name: str) -> None:
        self.name = clean_name(name, "Client")
        self.mark_as_updated()
