from sqlalchemy import Enum


def enum_type(enum_cls, *, name: str) -> Enum:
    """Bind Python str-enums to their value strings (VARCHAR, portable across backends)."""
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        length=20,
        values_callable=lambda members: [member.value for member in members],
    )
