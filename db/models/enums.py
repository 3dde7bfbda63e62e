import enum


class SoilPH(str, enum.Enum):
    VERY_ACIDIC = "very acid"
    ACIDIC = "acid"
    NEUTRAL = "neutral"
    ALKALINE = "alkaline"
    VERY_ALKALINE = "very alkaline"


class PrivacyOption(str, enum.Enum):
    PRIVATE = "private"
    PROTECTED = "protected"
    PUBLIC = "public"


def enum_values(enum_cls):
    """Persist enum values (not member names) in the database."""
    return [member.value for member in enum_cls]
