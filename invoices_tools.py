"""
GoHighLevel Invoices Tools for the GHL MCP Server

This module exposes invoicing and estimates as MCP tools.

Capabilities:
- Invoice templates, including late-fee and payment-method configuration
- Recurring invoice schedules (create, activate, auto-pay, cancel)
- Invoices: create, send, void, record payments, text2pay
- Estimates and estimate templates, conversion of estimates to invoices
- Invoice and estimate number generation

Authentication: Uses the shared GHLClient (Bearer token, see ghl_client.py).
Requires invoices.readonly, invoices.write, invoices/schedule and
invoices/template scopes.

Amounts:
    Line item amounts are DECIMAL DOLLARS (99.00 = $99.00).
    record_invoice_payment.amount is in CENTS.
"""

import logging
from typing import Optional, List, Literal, Any

from pydantic import BaseModel, Field

from app.core.tooling import ToolModule, ToolSpec, envelope, counted, hint

logger = logging.getLogger(__name__)


# =============================================================================
# Shared Models
# =============================================================================

class BusinessDetails(BaseModel):
    name: Optional[str] = Field(None, description="Business name")
    phoneNo: Optional[str] = Field(None, description="Business phone")
    website: Optional[str] = Field(None, description="Business website")
    logoUrl: Optional[str] = Field(None, description="Logo URL")


class ContactDetails(BaseModel):
    id: str = Field(description="Contact ID")
    name: str = Field(description="Contact name")
    email: Optional[str] = Field(None, description="Contact email")
    phoneNo: Optional[str] = Field(None, description="Contact phone")


class LineItem(BaseModel):
    name: str = Field(description="Item name")
    description: Optional[str] = Field(None, description="Item description")
    currency: str = Field(description="Currency code")
    amount: float = Field(description="Amount as float with decimals (e.g., 99.00 = $99.00). NOT cents.")
    qty: float = Field(description="Quantity")
    type: Literal["one_time", "recurring"] = Field(description='Item type: "one_time" or "recurring"')


class Discount(BaseModel):
    type: Literal["percentage", "fixed"] = Field(description="Discount type")
    value: Optional[float] = Field(None, description="Discount value")


class SentTo(BaseModel):
    email: Optional[List[str]] = Field(None, description="Array of recipient emails")
    phoneNo: Optional[List[str]] = Field(None, description="Array of phone numbers for SMS")


class AltParams(BaseModel):
    altId: Optional[str] = Field(None, description="Location ID (defaults to the configured location)")


class PageParams(AltParams):
    limit: Optional[str] = Field(None, description="Results per page (default: 10)")
    offset: Optional[str] = Field(None, description="Pagination offset")


DeliveryAction = Literal["email", "sms", "sms_and_email", "send_manually"]


# =============================================================================
# Invoice Template Models
# =============================================================================

class CreateInvoiceTemplateParams(AltParams):
    name: str = Field(description="Template name (REQUIRED)")
    currency: str = Field(description="Currency code like USD, EUR (REQUIRED)")
    businessDetails: Optional[BusinessDetails] = Field(None, description="Business details")
    items: List[LineItem] = Field(description="Line items array")
    discount: Optional[Discount] = Field(None, description="Discount settings")
    title: Optional[str] = Field(None, description="Customer-facing invoice title")
    termsNotes: Optional[str] = Field(None, description="Terms and conditions")
    invoiceNumberPrefix: Optional[str] = Field(None, description="Prefix for invoice numbers")


class ListInvoiceTemplatesParams(PageParams):
    status: Optional[str] = Field(None, description="Filter by status")
    search: Optional[str] = Field(None, description="Search by template name")
    paymentMode: Optional[Literal["default", "live", "test"]] = Field(None, description="Payment mode filter")


class TemplateIdParams(AltParams):
    templateId: str = Field(description="Template ID")


class UpdateInvoiceTemplateParams(TemplateIdParams):
    name: str = Field(description="Template name")
    currency: str = Field(description="Currency code like USD, EUR")
    businessDetails: Optional[BusinessDetails] = Field(None, description="Business details")
    items: List[LineItem] = Field(description="Line items array")
    discount: Optional[Discount] = Field(None, description="Discount settings")
    title: Optional[str] = Field(None, description="Customer-facing invoice title")
    termsNotes: Optional[str] = Field(None, description="Terms and conditions")


class LateFeesParams(TemplateIdParams):
    enabled: bool = Field(description="Enable/disable late fees")
    feeType: Optional[Literal["percentage", "fixed"]] = Field(None, description="Fee type")
    feeAmount: Optional[float] = Field(None, description="Fee amount or percentage")
    gracePeriodDays: Optional[int] = Field(None, description="Days before late fee applies")


class PaymentMethodsParams(TemplateIdParams):
    creditCard: Optional[bool] = Field(None, description="Accept credit cards")
    ach: Optional[bool] = Field(None, description="Accept ACH/bank transfers")
    cash: Optional[bool] = Field(None, description="Accept cash payments")
    check: Optional[bool] = Field(None, description="Accept check payments")


# =============================================================================
# Invoice Schedule Models
# =============================================================================

class RecurrenceRule(BaseModel):
    intervalType: Literal["daily", "weekly", "monthly", "yearly"] = Field(description="Frequency type")
    interval: int = Field(description="Interval between invoices")
    startDate: str = Field(description="Start date YYYY-MM-DD")
    dayOfMonth: int = Field(ge=-1, le=28, description="Day of month (-1 to 28, not 0)")
    dayOfWeek: Literal["mo", "tu", "we", "th", "fr", "sa", "su"] = Field(description="Day of week")
    numOfWeek: int = Field(ge=-1, le=4, description="Week number in month (-1 to 4)")
    count: Optional[int] = Field(None, description="Number of invoices to generate")


class Schedule(BaseModel):
    executeAt: Optional[str] = Field(None, description="One-time execution date YYYY-MM-DD (use this OR rrule, not both)")
    rrule: Optional[RecurrenceRule] = Field(None, description="Recurrence rule")


class CreateScheduleParams(AltParams):
    name: str = Field(description="Schedule name (REQUIRED)")
    currency: str = Field(description="Currency code like USD, EUR (REQUIRED)")
    liveMode: bool = Field(description="Set false for test, true for production (REQUIRED)")
    businessDetails: Optional[BusinessDetails] = Field(None, description="Business details")
    contactDetails: ContactDetails = Field(description="Contact the invoices are billed to")
    items: List[LineItem] = Field(description="Line items array")
    discount: Optional[Discount] = Field(None, description="Discount settings")
    schedule: Schedule = Field(description="When the invoices are generated")
    title: Optional[str] = Field(None, max_length=40, description="Schedule title (MAX 40 CHARACTERS)")
    termsNotes: Optional[str] = Field(None, description="Terms and conditions")


class ListSchedulesParams(PageParams):
    status: Optional[str] = Field(None, description="Filter by status")
    search: Optional[str] = Field(None, description="Search schedules")


class ScheduleIdParams(AltParams):
    scheduleId: str = Field(description="Schedule ID")


class UpdateScheduleParams(ScheduleIdParams):
    name: Optional[str] = Field(None, description="Schedule name")
    templateId: Optional[str] = Field(None, description="Invoice template ID")
    frequency: Optional[str] = Field(None, description="Billing frequency")


class ActivateScheduleParams(ScheduleIdParams):
    liveMode: bool = Field(description="Set false for test, true for production (REQUIRED)")


class AutoPayment(BaseModel):
    enable: bool = Field(description="Enable/disable auto-payment")
    type: str = Field(description='Payment type (e.g., "card", "us_bank_account")')
    paymentMethodId: Optional[str] = Field(None, description="Payment method ID")
    customerId: Optional[str] = Field(None, description="Customer ID")
    cardId: Optional[str] = Field(None, description="Card ID")


class AutoPaymentParams(ScheduleIdParams):
    id: str = Field(description="Payment method ID or customer ID (REQUIRED)")
    autoPayment: AutoPayment = Field(description="Auto-payment settings")


# =============================================================================
# Invoice Models
# =============================================================================

class CreateInvoiceParams(AltParams):
    name: str = Field(description="Invoice name (REQUIRED)")
    currency: str = Field(description="Currency code like USD, EUR (REQUIRED)")
    issueDate: str = Field(description="Issue date YYYY-MM-DD (REQUIRED)")
    liveMode: bool = Field(description="Set false for test, true for production (REQUIRED)")
    businessDetails: Optional[BusinessDetails] = Field(None, description="Business details")
    contactDetails: ContactDetails = Field(description="Contact the invoice is billed to")
    items: List[LineItem] = Field(description="Line items array")
    discount: Optional[Discount] = Field(None, description="Discount settings")
    sentTo: Optional[SentTo] = Field(None, description="Recipients")
    title: Optional[str] = Field(None, max_length=40, description="Customer-facing invoice title (MAX 40 characters)")
    dueDate: Optional[str] = Field(None, description="Payment due date (YYYY-MM-DD)")
    termsNotes: Optional[str] = Field(None, description="Terms and conditions")


class ListInvoicesParams(PageParams):
    status: Optional[str] = Field(None, description="Filter by status")
    contactId: Optional[str] = Field(None, description="Filter by contact")
    search: Optional[str] = Field(None, description="Search invoices")


class InvoiceIdParams(AltParams):
    invoiceId: str = Field(description="Invoice ID")


class UpdateInvoiceParams(InvoiceIdParams):
    title: Optional[str] = Field(None, description="Invoice title")
    currency: Optional[str] = Field(None, description="Currency code")
    dueDate: Optional[str] = Field(None, description="Due date")
    items: Optional[List[Any]] = Field(None, description="Invoice items")


class SendInvoiceParams(InvoiceIdParams):
    action: DeliveryAction = Field(description="Delivery method (REQUIRED)")
    liveMode: bool = Field(description="Set false for test, true for production (REQUIRED)")
    userId: str = Field(description="User ID sending the invoice (REQUIRED)")


class RecordPaymentParams(InvoiceIdParams):
    mode: Literal["cash", "card", "cheque", "bank_transfer", "other"] = Field(description="Payment mode (REQUIRED)")
    notes: str = Field(description="Payment notes/description (REQUIRED)")
    amount: Optional[int] = Field(None, description="Payment amount in CENTS (for partial payments)")


class Text2PayParams(AltParams):
    name: str = Field(description="Invoice name (REQUIRED)")
    currency: str = Field(description="Currency code like USD, EUR (REQUIRED)")
    issueDate: str = Field(description="Issue date YYYY-MM-DD (REQUIRED)")
    liveMode: bool = Field(description="Set false for test, true for production (REQUIRED)")
    action: Literal["draft", "send"] = Field(description='Action: "draft" or "send" (REQUIRED)')
    userId: str = Field(description="User ID creating/sending the invoice (REQUIRED)")
    contactDetails: ContactDetails = Field(description="Contact the invoice is billed to")
    items: List[LineItem] = Field(description="Line items array")
    sentTo: Optional[SentTo] = Field(None, description="Recipients for SMS and email")
    title: Optional[str] = Field(None, max_length=40, description="Invoice title (MAX 40 CHARACTERS)")
    discount: Optional[Discount] = Field(None, description="Discount settings")
    businessDetails: Optional[BusinessDetails] = Field(None, description="Business details")


# =============================================================================
# Estimate Models
# =============================================================================

class FrequencySettings(BaseModel):
    enabled: bool = Field(description="Enable recurring estimates (usually false for one-time)")


class CreateEstimateParams(AltParams):
    name: str = Field(description="Estimate name (REQUIRED)")
    currency: str = Field(description="Currency code like USD, EUR (REQUIRED)")
    businessDetails: Optional[BusinessDetails] = Field(None, description="Business details")
    contactDetails: ContactDetails = Field(description="Contact the estimate is for")
    items: List[LineItem] = Field(description="Line items array")
    discount: Optional[Discount] = Field(None, description="Discount settings")
    frequencySettings: Optional[FrequencySettings] = Field(None, description="Frequency settings")
    title: Optional[str] = Field(None, description="Customer-facing estimate title")
    expiryDate: Optional[str] = Field(None, description="Expiration date (YYYY-MM-DD)")
    issueDate: Optional[str] = Field(None, description="Issue date (YYYY-MM-DD)")
    termsNotes: Optional[str] = Field(None, description="Terms and conditions")


class ListEstimatesParams(PageParams):
    status: Optional[Literal["all", "draft", "sent", "accepted", "declined", "invoiced", "viewed"]] = Field(
        None, description="Filter by status"
    )
    contactId: Optional[str] = Field(None, description="Filter by contact")
    search: Optional[str] = Field(None, description="Search estimates")


class EstimateIdParams(AltParams):
    estimateId: str = Field(description="Estimate ID")


class UpdateEstimateParams(EstimateIdParams):
    name: str = Field(description="Estimate name")
    currency: str = Field(description="Currency code like USD, EUR")
    businessDetails: Optional[BusinessDetails] = Field(None, description="Business details")
    contactDetails: Optional[ContactDetails] = Field(None, description="Contact details")
    items: List[LineItem] = Field(description="Line items array")
    discount: Optional[Discount] = Field(None, description="Discount settings")
    frequencySettings: Optional[FrequencySettings] = Field(None, description="Frequency settings")
    title: Optional[str] = Field(None, description="Customer-facing estimate title")
    expiryDate: Optional[str] = Field(None, description="Expiration date (YYYY-MM-DD)")
    termsNotes: Optional[str] = Field(None, description="Terms and conditions")


class SendEstimateParams(EstimateIdParams):
    action: DeliveryAction = Field(description="Delivery method (REQUIRED)")
    liveMode: bool = Field(description="Set false for test, true for production (REQUIRED)")
    userId: str = Field(description="User ID sending the estimate (REQUIRED)")
    estimateName: Optional[str] = Field(None, description="Custom estimate name")


class EstimateToInvoiceParams(EstimateIdParams):
    markAsInvoiced: bool = Field(description="Mark estimate as invoiced (REQUIRED) - usually true")
    version: Optional[Literal["v1", "v2"]] = Field(None, description="API version")


class CreateEstimateTemplateParams(AltParams):
    name: str = Field(description="Template name (REQUIRED)")
    currency: str = Field(description="Currency code like USD, EUR (REQUIRED)")
    businessDetails: BusinessDetails = Field(description="Business details (REQUIRED)")
    items: List[LineItem] = Field(description="Line items array (REQUIRED)")
    discount: Discount = Field(description="Discount settings (REQUIRED)")
    title: Optional[str] = Field(None, description="Estimate title")
    termsNotes: Optional[str] = Field(None, description="Terms and conditions")
    estimateNumberPrefix: Optional[str] = Field(None, description="Prefix for estimate numbers")


class UpdateEstimateTemplateParams(TemplateIdParams):
    name: str = Field(description="Template name")
    currency: str = Field(description="Currency code like USD, EUR")
    businessDetails: Optional[BusinessDetails] = Field(None, description="Business details")
    items: List[LineItem] = Field(description="Line items array")
    discount: Optional[Discount] = Field(None, description="Discount settings")
    title: Optional[str] = Field(None, description="Estimate title")
    termsNotes: Optional[str] = Field(None, description="Terms and conditions")


# =============================================================================
# Helper Functions
# =============================================================================

def _invoices_result(data, args):
    invoices = data.get("invoices") or []
    total = data.get("total")
    count = f"{len(invoices)} of {total}" if total else f"{len(invoices)}"
    return envelope(data, f"Retrieved {count} invoices")


def _created(label: str, key: str = "_id"):
    def reshape(data, args):
        return envelope(data, f"{label} created successfully with ID: {data.get(key) or data.get('id', 'unknown')}")
    return reshape


def _numbered(label: str):
    def reshape(data, args):
        return envelope(data, f"Next {label} number: {data.get(f'{label}Number', 'unknown')}")
    return reshape


# =============================================================================
# Tool Module
# =============================================================================

class InvoicesTools(ToolModule):
    family = "invoices"
    subject = "invoice"
    lookup = "list_invoices"

    def build_specs(self):
        alt = self.alt_location()
        alt_body = ("altId", "altType")
        template = dict(subject="invoice template", lookup="list_invoice_templates")
        schedule = dict(subject="invoice schedule", lookup="list_invoice_schedules")
        estimate = dict(subject="estimate", lookup="list_estimates")
        estimate_template = dict(subject="estimate template", lookup="list_estimate_templates")
        title_hint = hint((400, 422), "Invalid invoice data.\nCommon issues:\n- title longer than 40 characters\n"
                                      "- item amounts must be decimal dollars (99.00), not cents\n"
                                      "- contactDetails.id must be an existing contact ID")
        return [
            # -----------------------------------------------------------------
            # Invoice templates
            # -----------------------------------------------------------------
            ToolSpec(
                name="create_invoice_template",
                description="Create a reusable invoice template",
                params=CreateInvoiceTemplateParams,
                method="POST", path="/invoices/template",
                defaults=alt, **template,
                reshape=_created("Invoice template"),
                hints=(title_hint,),
            ),
            ToolSpec(
                name="list_invoice_templates",
                description="List invoice templates",
                params=ListInvoiceTemplatesParams,
                path="/invoices/template",
                defaults=dict(alt, limit="10", offset="0"),
                reshape=counted("data", "invoice templates"),
            ),
            ToolSpec(
                name="get_invoice_template",
                description="Get an invoice template by ID",
                params=TemplateIdParams,
                path="/invoices/template/{templateId}",
                defaults=alt, **template,
                message="Invoice template {templateId} retrieved successfully",
            ),
            ToolSpec(
                name="update_invoice_template",
                description="Update an invoice template",
                params=UpdateInvoiceTemplateParams,
                method="PUT", path="/invoices/template/{templateId}",
                defaults=alt, **template,
                message="Invoice template {templateId} updated successfully",
                hints=(title_hint,),
            ),
            ToolSpec(
                name="delete_invoice_template",
                description="Delete an invoice template",
                params=TemplateIdParams,
                method="DELETE", path="/invoices/template/{templateId}",
                defaults=alt, **template,
                message="Invoice template {templateId} deleted successfully",
            ),
            ToolSpec(
                name="update_invoice_template_late_fees",
                description="Configure late fees on an invoice template",
                params=LateFeesParams,
                method="PATCH", path="/invoices/template/{templateId}/late-fees-configuration",
                defaults=alt, **template,
                message="Late fees configuration updated for template {templateId}",
                idempotent=True,
            ),
            ToolSpec(
                name="update_invoice_template_payment_methods",
                description="Configure accepted payment methods on an invoice template",
                params=PaymentMethodsParams,
                method="PATCH", path="/invoices/template/{templateId}/payment-methods-configuration",
                defaults=alt, **template,
                message="Payment methods configuration updated for template {templateId}",
                idempotent=True,
            ),

            # -----------------------------------------------------------------
            # Invoice schedules
            # -----------------------------------------------------------------
            ToolSpec(
                name="create_invoice_schedule",
                description="Create a recurring or one-off invoice schedule. Use schedule.executeAt OR schedule.rrule.",
                params=CreateScheduleParams,
                method="POST", path="/invoices/schedule",
                defaults=alt, **schedule,
                reshape=_created("Invoice schedule"),
                hints=(hint((400, 422), "Invalid invoice schedule.\nCommon issues:\n"
                                        "- provide schedule.executeAt OR schedule.rrule, not both\n"
                                        "- rrule.dayOfMonth must be -1..28 (not 0), numOfWeek -1..4\n"
                                        "- title longer than 40 characters"),),
            ),
            ToolSpec(
                name="list_invoice_schedules",
                description="List invoice schedules",
                params=ListSchedulesParams,
                path="/invoices/schedule",
                defaults=dict(alt, limit="10", offset="0"),
                reshape=counted("schedules", "invoice schedules"),
            ),
            ToolSpec(
                name="get_invoice_schedule",
                description="Get an invoice schedule by ID",
                params=ScheduleIdParams,
                path="/invoices/schedule/{scheduleId}",
                defaults=alt, **schedule,
                message="Invoice schedule {scheduleId} retrieved successfully",
            ),
            ToolSpec(
                name="update_invoice_schedule",
                description="Update an invoice schedule",
                params=UpdateScheduleParams,
                method="PUT", path="/invoices/schedule/{scheduleId}",
                defaults=alt, **schedule,
                message="Invoice schedule {scheduleId} updated successfully",
            ),
            ToolSpec(
                name="delete_invoice_schedule",
                description="Delete an invoice schedule",
                params=ScheduleIdParams,
                method="DELETE", path="/invoices/schedule/{scheduleId}",
                defaults=alt, **schedule,
                message="Invoice schedule {scheduleId} deleted successfully",
            ),
            ToolSpec(
                name="schedule_invoice_schedule",
                description="Activate an invoice schedule so it starts generating invoices",
                params=ActivateScheduleParams,
                method="POST", path="/invoices/schedule/{scheduleId}/schedule",
                defaults=alt, **schedule,
                message="Invoice schedule {scheduleId} activated",
            ),
            ToolSpec(
                name="auto_payment_invoice_schedule",
                description="Enable or disable automatic payment for an invoice schedule",
                params=AutoPaymentParams,
                method="POST", path="/invoices/schedule/{scheduleId}/auto-payment",
                defaults=alt, id_field="scheduleId", **schedule,
                message="Auto-payment updated for invoice schedule {scheduleId}",
                idempotent=True,
            ),
            ToolSpec(
                name="cancel_invoice_schedule",
                description="Cancel an active invoice schedule",
                params=ScheduleIdParams,
                method="POST", path="/invoices/schedule/{scheduleId}/cancel",
                defaults=alt, **schedule,
                message="Invoice schedule {scheduleId} cancelled",
                destructive=True,
            ),

            # -----------------------------------------------------------------
            # Invoices
            # -----------------------------------------------------------------
            ToolSpec(
                name="create_invoice",
                description="Create an invoice for a contact. Item amounts are decimal dollars.",
                params=CreateInvoiceParams,
                method="POST", path="/invoices/",
                defaults=alt,
                reshape=_created("Invoice"),
                hints=(title_hint,),
            ),
            ToolSpec(
                name="list_invoices",
                description="List invoices with optional status, contact and search filters",
                params=ListInvoicesParams,
                path="/invoices/",
                defaults=dict(alt, limit="10", offset="0"),
                reshape=_invoices_result,
            ),
            ToolSpec(
                name="get_invoice",
                description="Get an invoice by ID",
                params=InvoiceIdParams,
                path="/invoices/{invoiceId}",
                defaults=alt,
                message="Invoice {invoiceId} retrieved successfully",
            ),
            ToolSpec(
                name="update_invoice",
                description="Update a draft invoice",
                params=UpdateInvoiceParams,
                method="PUT", path="/invoices/{invoiceId}",
                defaults=alt,
                message="Invoice {invoiceId} updated successfully",
                hints=(title_hint,),
            ),
            ToolSpec(
                name="delete_invoice",
                description="Delete an invoice",
                params=InvoiceIdParams,
                method="DELETE", path="/invoices/{invoiceId}",
                defaults=alt,
                message="Invoice {invoiceId} deleted successfully",
            ),
            ToolSpec(
                name="void_invoice",
                description="Void an invoice so it can no longer be paid",
                params=InvoiceIdParams,
                method="POST", path="/invoices/{invoiceId}/void",
                defaults=alt,
                message="Invoice {invoiceId} voided",
                destructive=True, idempotent=True,
            ),
            ToolSpec(
                name="send_invoice",
                description="Send an invoice to the contact by email, SMS, both, or mark as sent manually",
                params=SendInvoiceParams,
                method="POST", path="/invoices/{invoiceId}/send",
                defaults=alt,
                message="Invoice {invoiceId} sent via {action}",
            ),
            ToolSpec(
                name="record_invoice_payment",
                description="Record a manual payment against an invoice. amount is in CENTS.",
                params=RecordPaymentParams,
                method="POST", path="/invoices/{invoiceId}/record-payment",
                defaults=alt,
                message="Payment recorded for invoice {invoiceId}",
            ),
            ToolSpec(
                name="generate_invoice_number",
                description="Get the next available invoice number",
                params=AltParams,
                path="/invoices/generate-invoice-number",
                defaults=alt,
                reshape=_numbered("invoice"),
            ),
            ToolSpec(
                name="text2pay_invoice",
                description="Create an invoice and optionally send a text-to-pay link in one step",
                params=Text2PayParams,
                method="POST", path="/invoices/text2pay",
                defaults=alt,
                reshape=lambda data, args: envelope(
                    data, f"Text2Pay invoice {'sent' if args['action'] == 'send' else 'drafted'} for contact "
                          f"{args['contactDetails']['id']}"),
                hints=(title_hint,),
            ),

            # -----------------------------------------------------------------
            # Estimates
            # -----------------------------------------------------------------
            ToolSpec(
                name="create_estimate",
                description="Create an estimate (quote) for a contact",
                params=CreateEstimateParams,
                method="POST", path="/invoices/estimate",
                defaults=alt, **estimate,
                reshape=_created("Estimate"),
            ),
            ToolSpec(
                name="list_estimates",
                description="List estimates",
                params=ListEstimatesParams,
                path="/invoices/estimate/list",
                defaults=dict(alt, limit="10", offset="0"),
                reshape=counted("estimates", "estimates"),
            ),
            ToolSpec(
                name="get_estimate",
                description="Get an estimate by ID",
                params=EstimateIdParams,
                path="/invoices/estimate/{estimateId}",
                defaults=alt, **estimate,
                message="Estimate {estimateId} retrieved successfully",
            ),
            ToolSpec(
                name="update_estimate",
                description="Update an estimate",
                params=UpdateEstimateParams,
                method="PUT", path="/invoices/estimate/{estimateId}",
                defaults=alt, **estimate,
                message="Estimate {estimateId} updated successfully",
            ),
            ToolSpec(
                name="delete_estimate",
                description="Delete an estimate",
                params=EstimateIdParams,
                method="DELETE", path="/invoices/estimate/{estimateId}",
                body=alt_body,
                defaults=alt, **estimate,
                message="Estimate {estimateId} deleted successfully",
            ),
            ToolSpec(
                name="send_estimate",
                description="Send an estimate to the contact",
                params=SendEstimateParams,
                method="POST", path="/invoices/estimate/{estimateId}/send",
                defaults=alt, **estimate,
                message="Estimate {estimateId} sent via {action}",
            ),
            ToolSpec(
                name="create_invoice_from_estimate",
                description="Convert an accepted estimate into an invoice",
                params=EstimateToInvoiceParams,
                method="POST", path="/invoices/estimate/{estimateId}/invoice",
                defaults=alt, **estimate,
                reshape=lambda data, args: envelope(
                    data, f"Invoice created from estimate {args['estimateId']}"),
            ),
            ToolSpec(
                name="generate_estimate_number",
                description="Get the next available estimate number",
                params=AltParams,
                path="/invoices/estimate/number/generate",
                defaults=alt,
                reshape=_numbered("estimate"),
            ),

            # -----------------------------------------------------------------
            # Estimate templates
            # -----------------------------------------------------------------
            ToolSpec(
                name="list_estimate_templates",
                description="List estimate templates",
                params=PageParams,
                path="/invoices/estimate/template",
                defaults=dict(alt, limit="10", offset="0"),
                reshape=counted("data", "estimate templates"),
            ),
            ToolSpec(
                name="get_estimate_template",
                description="Get an estimate template by ID",
                params=TemplateIdParams,
                path="/invoices/estimate/template/{templateId}",
                defaults=alt, **estimate_template,
                message="Estimate template {templateId} retrieved successfully",
            ),
            ToolSpec(
                name="create_estimate_template",
                description="Create a reusable estimate template",
                params=CreateEstimateTemplateParams,
                method="POST", path="/invoices/estimate/template",
                defaults=alt, **estimate_template,
                reshape=_created("Estimate template"),
            ),
            ToolSpec(
                name="update_estimate_template",
                description="Update an estimate template",
                params=UpdateEstimateTemplateParams,
                method="PUT", path="/invoices/estimate/template/{templateId}",
                defaults=alt, **estimate_template,
                message="Estimate template {templateId} updated successfully",
            ),
            ToolSpec(
                name="delete_estimate_template",
                description="Delete an estimate template",
                params=TemplateIdParams,
                method="DELETE", path="/invoices/estimate/template/{templateId}",
                body=alt_body,
                defaults=alt, **estimate_template,
                message="Estimate template {templateId} deleted successfully",
            ),
            ToolSpec(
                name="preview_estimate_template",
                description="Preview an estimate template as it will be rendered",
                params=TemplateIdParams,
                path="/invoices/estimate/template/preview",
                defaults=alt, id_field="templateId", **estimate_template,
                message="Estimate template {templateId} preview generated",
            ),
        ]
