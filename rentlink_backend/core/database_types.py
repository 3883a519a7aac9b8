"""Custom column types shared by the models."""

import enum

from sqlalchemy import Enum


def value_enum(enum_cls: type[enum.Enum], **kwargs) -> Enum:
    """Enum column type that persists member values instead of names.

    A LeaseStatus.SENT_TO_TENANT column holds "sent_to_tenant", the same
    string the API returns.
    """
    return Enum(
        enum_cls,
        name=enum_cls.__name__.lower(),
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
        **kwargs,
    )
