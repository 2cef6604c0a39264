# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base entity models with common fields and money conversion.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from pydantic import BaseModel, Field, ConfigDict


def generate_entity_id() -> str:
    """Generate a new entity identifier."""
    return uuid.uuid4().hex


def to_decimal(value: Any) -> Decimal:
    """
    Convert a monetary or rate value to Decimal.

    Floats go through str() so that 0.1 becomes Decimal("0.1") rather than
    its binary approximation.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("Boolean is not a monetary value")
    if isinstance(value, (int, float, str)):
        return Decimal(str(value).strip())
    raise TypeError(f"Cannot convert {type(value).__name__} to Decimal")


class BaseEntity(BaseModel):
    """Base entity with common fields for all domain objects."""

    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        # Use enum values instead of enum objects
        use_enum_values=True,
        # Validate assignment
        validate_assignment=True
    )

    id: str = Field(default_factory=generate_entity_id, description="Unique identifier")
    created_at: Optional[datetime] = Field(default_factory=datetime.utcnow, description="Creation timestamp")
    schema_version: int = Field(default=1, description="Schema version for migrations")


class BaseEntityCreate(BaseModel):
    """Base model for entity creation requests."""

    model_config = ConfigDict(
        use_enum_values=True,
        validate_assignment=True,
        str_strip_whitespace=True
    )
