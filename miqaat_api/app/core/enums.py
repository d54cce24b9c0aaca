from enum import Enum


class Gender(str, Enum):
    """Attendee gender as stored in the registry."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class BlockGender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    BOTH = "both"


class PassType(str, Enum):
    """Kinds of pass an attendee can request for an event."""

    RAHAT = "RAHAT"
    CHAIR = "CHAIR"
    GENERAL = "GENERAL"


class MiqaatStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class EventStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    COMPLETED = "completed"


class PassPreferenceErrorCode(str, Enum):
    """Error codes returned in structured pass preference failures."""

    INVALID_REQUEST_BODY = "INVALID_REQUEST_BODY"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    AUTHORIZATION_FAILED = "AUTHORIZATION_FAILED"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    VAAZ_CENTER_EVENT_MISMATCH = "VAAZ_CENTER_EVENT_MISMATCH"
    BLOCK_EVENT_MISMATCH = "BLOCK_EVENT_MISMATCH"
    BLOCK_VAAZ_CENTER_MISMATCH = "BLOCK_VAAZ_CENTER_MISMATCH"
    VAAZ_CENTER_FULL = "VAAZ_CENTER_FULL"
    BLOCK_FULL = "BLOCK_FULL"
    ITS_ID_ALREADY_EXISTS_FOR_EVENT = "ITS_ID_ALREADY_EXISTS_FOR_EVENT"
    PASS_PREFERENCE_LOCKED = "PASS_PREFERENCE_LOCKED"
    VAAZ_CENTER_CAPACITY_GENDER_UNAVAILABLE = "VAAZ_CENTER_CAPACITY_GENDER_UNAVAILABLE"
    VAAZ_CENTER_CAPACITY_GENDER_UNSUPPORTED = "VAAZ_CENTER_CAPACITY_GENDER_UNSUPPORTED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class AuditObjectType(str, Enum):
    """Kinds of record the audit trail refers to."""

    MUMINEEN = "mumineen"
    MIQAAT = "miqaat"
    EVENT = "event"
    VAAZ_CENTER = "vaaz_center"
    BLOCK = "block"
    PASS_PREFERENCE = "pass_preference"
    ACCOMMODATION = "accommodation"
    HIZBE_SAIFEE_GROUP = "hizbe_saifee_group"
