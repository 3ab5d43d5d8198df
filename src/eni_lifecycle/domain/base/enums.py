from enum import Enum


class BaseEnumModel(Enum):
    """Enum that round-trips through its provider string value."""

    @classmethod
    def from_value(cls, value):
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.lower():
                    return member
        raise ValueError(f"Cannot create {cls.__name__} from {value!r}")

    def to_dict(self):
        return self.value

    def __str__(self):
        return self.value

    def __repr__(self):
        return f"{self.__class__.__name__}.{self.name}"
