"""ItemType enumeration for MyPreOp questionnaire items.

Provides a simple constants container instead of an Enum so stored rows and
CSV cells can be compared as plain strings.
"""

from __future__ import annotations


class ItemType:
    RADIO = "radio"
    CHECKBOX = "checkbox"
    TEXT_FIELD = "text-field"
    TEXT_AREA = "text-area"
    TEXT_PARAGRAPH = "text-paragraph"
    PHONE_NUMBER = "phone-number"
    AGE = "age"
    NUMBER_INPUT = "number-input"
    ALLERGY_LIST = "allergy-list"


MYPREOP_ITEM_TYPES: tuple[str, ...] = (
    ItemType.RADIO,
    ItemType.CHECKBOX,
    ItemType.TEXT_FIELD,
    ItemType.TEXT_AREA,
    ItemType.TEXT_PARAGRAPH,
    ItemType.PHONE_NUMBER,
    ItemType.AGE,
    ItemType.NUMBER_INPUT,
    ItemType.ALLERGY_LIST,
)

# Types that need two or more options
ITEM_TYPES_REQUIRING_OPTIONS: tuple[str, ...] = (ItemType.RADIO, ItemType.CHECKBOX)

ITEM_TYPES_NO_OPTIONS: tuple[str, ...] = tuple(
    t for t in MYPREOP_ITEM_TYPES if t not in ITEM_TYPES_REQUIRING_OPTIONS
)


__all__ = [
    "ItemType",
    "MYPREOP_ITEM_TYPES",
    "ITEM_TYPES_REQUIRING_OPTIONS",
    "ITEM_TYPES_NO_OPTIONS",
]
