"""
Permission composition for claims, dependent records, profiles and the
insurance-company directory.
"""

from .models import (
    SubjectKind,
    Capability,
    RecordKind,
    Subject,
    AclEntry,
    parse_permission,
)
from .composer import (
    compose_permissions,
    compose_claim_permissions,
    compose_claim_related_permissions,
    compose_user_permissions,
    compose_directory_permissions,
    to_permission_strings,
)

__all__ = [
    "SubjectKind",
    "Capability",
    "RecordKind",
    "Subject",
    "AclEntry",
    "parse_permission",
    "compose_permissions",
    "compose_claim_permissions",
    "compose_claim_related_permissions",
    "compose_user_permissions",
    "compose_directory_permissions",
    "to_permission_strings",
]
