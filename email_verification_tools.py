"""
GoHighLevel Email Verification Tools for the GHL MCP Server

Verifies an email address (or a contact's email) through LeadConnector's
verification service. Each verification is charged to the location wallet.

Authentication: Uses the shared GHLClient (Bearer token, see ghl_client.py).
"""

import logging
from typing import Optional, Literal

from pydantic import BaseModel, Field

from app.core.tooling import ToolModule, ToolSpec, location_field, hint

logger = logging.getLogger(__name__)


class VerifyEmailParams(BaseModel):
    locationId: Optional[str] = location_field(
        "Location ID (uses configured location if not provided). Charges are deducted from this location's wallet"
    )
    type: Literal["email", "contact"] = Field(
        description='Verification type: "email" for an address, "contact" for a contact ID'
    )
    verify: str = Field(description="Email address to verify (type=email) or contact ID (type=contact)")


def verification_message(verification: dict) -> str:
    """Summarise a verification response.

    Processed verifications carry a "result"; anything else is a
    not-processed notice with its own message.
    """
    if "result" not in verification:
        return f"Email verification not processed: {verification.get('message', 'no reason given')}"

    message = f"Email verification completed. Result: {verification['result']}, Risk: {verification.get('risk')}"
    reasons = verification.get("reason") or []
    if reasons:
        message += f", Reasons: {', '.join(reasons)}"
    recommendation = verification.get("leadconnectorRecomendation") or {}
    if recommendation.get("isEmailValid") is not None:
        message += f", Recommended: {'Valid' if recommendation['isEmailValid'] else 'Invalid'}"
    return message


class EmailVerificationTools(ToolModule):
    family = "email verification"
    subject = "contact"
    lookup = "search_contacts"

    def build_specs(self):
        return [
            ToolSpec(
                name="verify_email",
                description="Verify deliverability of an email address or a contact's email. "
                            "Charged to the location wallet.",
                params=VerifyEmailParams,
                method="POST", path="/email/verify",
                location="locationId",
                query=("locationId",),
                id_field="verify",
                reshape=lambda data, args: {
                    "success": True,
                    "verification": data,
                    "message": verification_message(data if isinstance(data, dict) else {}),
                },
                hints=(hint(402, "Email verification requires wallet funds.\n"
                                 "Top up the location wallet and retry."),),
                read_only=False, idempotent=True,
            ),
        ]
