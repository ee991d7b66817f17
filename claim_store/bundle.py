"""
Loading a claim together with its dependent records.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .models import (
    ClaimDocument,
    DamageDetailDocument,
    VehicleVerificationDocument,
    AssessmentDocument,
    to_model,
)
from .record_store import RecordStore, Collections


@dataclass
class ClaimBundle:
    """A claim plus its damage details, vehicle verification and assessment."""
    claim: ClaimDocument
    damage_details: List[DamageDetailDocument] = field(default_factory=list)
    vehicle_verification: Optional[VehicleVerificationDocument] = None
    assessment: Optional[AssessmentDocument] = None

    @property
    def visible_damages(self) -> List[DamageDetailDocument]:
        """Damage observed directly on the vehicle."""
        return [d for d in self.damage_details if not d.is_inferred]

    @property
    def inferred_damages(self) -> List[DamageDetailDocument]:
        """Internal damage inferred from the observed damage."""
        return [d for d in self.damage_details if d.is_inferred]


def load_claim_bundle(store: RecordStore, claim_id: str) -> ClaimBundle:
    """Load a claim and every dependent record that references it.
    
    Raises:
        DocumentNotFound: if the claim does not exist
        StorageError: if any collection cannot be read
        pydantic.ValidationError: if a stored record does not match its model
    """
    claim = to_model(ClaimDocument, store.get_document(Collections.CLAIMS, claim_id))

    details = store.list_documents(
        Collections.CLAIM_DAMAGE_DETAILS,
        filters={"claim_id": claim_id},
        order_by="sort_order",
    )
    verification = store.list_documents(
        Collections.CLAIM_VEHICLE_VERIFICATION,
        filters={"claim_id": claim_id},
        limit=1,
    )
    assessment = store.list_documents(
        Collections.CLAIM_ASSESSMENTS,
        filters={"claim_id": claim_id},
        limit=1,
    )

    return ClaimBundle(
        claim=claim,
        damage_details=[to_model(DamageDetailDocument, d) for d in details.documents],
        vehicle_verification=(
            to_model(VehicleVerificationDocument, verification.documents[0])
            if verification.documents else None
        ),
        assessment=(
            to_model(AssessmentDocument, assessment.documents[0])
            if assessment.documents else None
        ),
    )
