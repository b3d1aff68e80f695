"""Care urgency, facility type and facility filter enums."""

from enum import Enum


class CareUrgency(str, Enum):
    """Urgency levels for medical care, ordered by increasing severity."""

    NONE = "none"  # Self-care at home
    MONITOR = "monitor"  # Monitor and recheck within 1-2 weeks
    ROUTINE = "routine"  # See a doctor within 24-48 hours
    URGENT = "urgent"  # Hospital or urgent care within 6-24 hours
    EMERGENCY = "emergency"  # Go to the ER immediately

    @classmethod
    def _missing_(cls, value):
        # Accept the "CareUrgency.<name>" form written by older clients
        if isinstance(value, str) and value.startswith("CareUrgency."):
            return cls._value2member_map_.get(value.split(".", 1)[1])
        return None

    @property
    def level(self) -> int:
        return list(type(self)).index(self)

    def __lt__(self, other):
        if not isinstance(other, CareUrgency):
            return NotImplemented
        return self.level < other.level

    def __le__(self, other):
        if not isinstance(other, CareUrgency):
            return NotImplemented
        return self.level <= other.level

    def __gt__(self, other):
        if not isinstance(other, CareUrgency):
            return NotImplemented
        return self.level > other.level

    def __ge__(self, other):
        if not isinstance(other, CareUrgency):
            return NotImplemented
        return self.level >= other.level


class FacilityType(str, Enum):
    """Healthcare facility types."""

    BARANGAY_HEALTH_CENTER = "barangayHealthCenter"
    PRIMARY_CARE_CLINIC = "primaryCareClinic"
    HOSPITAL = "hospital"
    EMERGENCY_FACILITY = "emergencyFacility"

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        if value.startswith("FacilityType."):
            value = value.split(".", 1)[1]
        # Older directory records carry the misspelled clinic type
        if value == "primaryCarClinic":
            return cls.PRIMARY_CARE_CLINIC
        return cls._value2member_map_.get(value)

    @property
    def display_name(self) -> str:
        return _FACILITY_TYPE_NAMES[self]


_FACILITY_TYPE_NAMES = {
    FacilityType.BARANGAY_HEALTH_CENTER: "Barangay Health Center",
    FacilityType.PRIMARY_CARE_CLINIC: "Primary Care Clinic",
    FacilityType.HOSPITAL: "Hospital",
    FacilityType.EMERGENCY_FACILITY: "Emergency Facility",
}


class FacilityFilter(str, Enum):
    """Post-hoc view filters over an already ranked facility list."""

    ALL = "all"
    NEAREST = "nearest"
    EMERGENCY = "emergency"
    TWENTY_FOUR_SEVEN = "twentyFourSeven"
    PUBLIC = "public"


class FacilityBadge(str, Enum):
    """Contextual badge shown next to a facility in the referral list."""

    EMERGENCY_READY = "emergencyReady"
    NEAR_AND_FAST = "nearAndFast"
    COMMUNITY_PARTNER = "communityPartner"
