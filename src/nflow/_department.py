"""Departments owning variables and anchoring flow edges."""

from enum import StrEnum
from typing import Self


class Department(StrEnum):
    """Organizational or environmental actor of the nitrogen network.

    Each member carries a human-readable label used by graph consumers.
    The label is passed as the second tuple element of the member value,
    the same way docstrings are attached to enum members.
    """

    label: str

    def __new__(cls, value: str, label: str = "") -> Self:
        """Create a new member with its display label."""
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.label = label or value
        return obj

    SURFACE_WATER = "surface_water", "地表水"
    AGRICULTURE = "agriculture", "农业"
    FORESTRY = "forestry", "林业"
    ANIMAL_HUSBANDRY = "animal_husbandry", "畜牧业"
    FISHERY = "fishery", "渔业"
    HUMAN_LIFE = "human_life", "人类生活"
    INDUSTRY = "industry", "工业"
    WASTEWATER_TREATMENT = "wastewater_treatment", "废水处理"
    WASTE_MANAGEMENT = "waste_management", "废物处理"
    URBAN_GREEN_SPACE = "urban_green_space", "城市绿地"
    GROUNDWATER = "groundwater", "地下水"
    ATMOSPHERE = "atmosphere", "大气"
    OCEAN = "ocean", "海洋"
    OUTSIDE_IMPORT = "outside_import", "外部(进口)"
    OUTSIDE_EXPORT = "outside_export", "外部(出口)"

    @classmethod
    def labels(cls) -> dict[Self, str]:
        """Return every department mapped to its label, in declaration order."""
        return {dept: dept.label for dept in cls}
