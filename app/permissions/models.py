"""
ACL data types: subjects, capabilities and entries.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SubjectKind(Enum):
    """Who an ACL entry grants to."""
    USER = "user"
    TEAM = "team"
    ANY = "any"


class Capability(Enum):
    """What an ACL entry grants."""
    READ = "read"
    UPDATE = "update"


class RecordKind(Enum):
    """Record families with a fixed permission rule set."""
    CLAIM = "claim"
    CLAIM_RELATED = "claim_related"  # damage details, vehicle verification, assessments
    USER_PROFILE = "user_profile"
    DIRECTORY = "directory"  # insurance-company lookup


@dataclass(frozen=True)
class Subject:
    """A specific user, a specific team, or anyone."""
    kind: SubjectKind
    id: Optional[str] = None

    @classmethod
    def user(cls, user_id: str) -> "Subject":
        return cls(SubjectKind.USER, user_id)

    @classmethod
    def team(cls, team_id: str) -> "Subject":
        return cls(SubjectKind.TEAM, team_id)

    @classmethod
    def anyone(cls) -> "Subject":
        return cls(SubjectKind.ANY)

    def __str__(self) -> str:
        if self.kind == SubjectKind.ANY:
            return "any"
        return f"{self.kind.value}:{self.id}"


@dataclass(frozen=True)
class AclEntry:
    """A (subject, capability) grant."""
    subject: Subject
    capability: Capability

    def __str__(self) -> str:
        return f'{self.capability.value}("{self.subject}")'


_PERMISSION_RE = re.compile(r'^(read|update)\("(any|user:[^"]+|team:[^"]+)"\)$')


def parse_permission(permission: str) -> AclEntry:
    """Parse the stored string form, e.g. ``read("team:t1")``.

    Raises:
        ValueError: if the string is not a recognised permission
    """
    match = _PERMISSION_RE.match(permission.strip())
    if not match:
        raise ValueError(f"Unrecognised permission: {permission!r}")

    capability, subject = match.groups()
    if subject == "any":
        return AclEntry(Subject.anyone(), Capability(capability))
    kind, subject_id = subject.split(":", 1)
    return AclEntry(Subject(SubjectKind(kind), subject_id), Capability(capability))
