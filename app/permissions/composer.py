"""
Permission composition for every record family.

ACLs are data: each RecordKind maps to an ordered tuple of rule fragments
and composing an ACL runs the fragments in order. Update is never granted
to anyone, so public visibility is read-only.
"""
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .models import AclEntry, Capability, RecordKind, Subject

Acl = Tuple[AclEntry, ...]


@dataclass(frozen=True)
class _Actor:
    user_id: Optional[str]
    team_id: Optional[str]
    is_public: bool


def _owner_read(actor: _Actor) -> List[AclEntry]:
    return [AclEntry(Subject.user(actor.user_id), Capability.READ)]


def _owner_read_write(actor: _Actor) -> List[AclEntry]:
    return [
        AclEntry(Subject.user(actor.user_id), Capability.READ),
        AclEntry(Subject.user(actor.user_id), Capability.UPDATE),
    ]


def _team_read_write(actor: _Actor) -> List[AclEntry]:
    # Adjuster team of the insurance company the claim is routed to
    if not actor.team_id:
        return []
    return [
        AclEntry(Subject.team(actor.team_id), Capability.READ),
        AclEntry(Subject.team(actor.team_id), Capability.UPDATE),
    ]


def _public_read(actor: _Actor) -> List[AclEntry]:
    if not actor.is_public:
        return []
    return [AclEntry(Subject.anyone(), Capability.READ)]


def _anyone_read(actor: _Actor) -> List[AclEntry]:
    return [AclEntry(Subject.anyone(), Capability.READ)]


RULES: Dict[RecordKind, Tuple[Callable[[_Actor], List[AclEntry]], ...]] = {
    RecordKind.CLAIM: (_owner_read, _team_read_write, _public_read),
    RecordKind.CLAIM_RELATED: (_owner_read, _team_read_write),
    RecordKind.USER_PROFILE: (_owner_read_write,),
    RecordKind.DIRECTORY: (_anyone_read,),
}


def _normalize_team_id(team_id: Optional[str]) -> Optional[str]:
    if team_id is None:
        return None
    team_id = team_id.strip()
    return team_id or None


def compose_permissions(
    kind: RecordKind,
    user_id: Optional[str] = None,
    team_id: Optional[str] = None,
    is_public: bool = False,
) -> Acl:
    """Compose the ordered, duplicate-free ACL for a record.
    
    Args:
        kind: Record family
        user_id: Owning user (required for every kind except DIRECTORY)
        team_id: Team the record is routed to; empty means none
        is_public: Whether anyone may read (CLAIM only)
    
    Returns:
        Tuple of ACL entries in grant order
    """
    actor = _Actor(user_id=user_id, team_id=_normalize_team_id(team_id), is_public=bool(is_public))
    acl: List[AclEntry] = []
    for rule in RULES[kind]:
        for entry in rule(actor):
            if entry not in acl:
                acl.append(entry)
    return tuple(acl)


def compose_claim_permissions(user_id: str, team_id: Optional[str] = None, is_public: bool = False) -> Acl:
    """Owner read, team read/update when routed, anyone read when public."""
    return compose_permissions(RecordKind.CLAIM, user_id, team_id, is_public)


def compose_claim_related_permissions(user_id: str, team_id: Optional[str] = None) -> Acl:
    """Dependent records are never public on their own: their visibility
    follows the parent claim through the public read gate."""
    return compose_permissions(RecordKind.CLAIM_RELATED, user_id, team_id)


def compose_user_permissions(user_id: str) -> Acl:
    """Profiles are private: owner read and update only."""
    return compose_permissions(RecordKind.USER_PROFILE, user_id)


def compose_directory_permissions() -> Acl:
    """Directory entries are readable by anyone; writes go through admin paths."""
    return compose_permissions(RecordKind.DIRECTORY)


def to_permission_strings(acl: Iterable[AclEntry]) -> List[str]:
    """Render an ACL in the string form stored on documents."""
    return [str(entry) for entry in acl]
