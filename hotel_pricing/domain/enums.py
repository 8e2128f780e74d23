"""Domain Enums"""
from enum import Enum


class ModifierType(str, Enum):
    PERCENTAGE = "percentage"
    ABSOLUTE = "absolute"
