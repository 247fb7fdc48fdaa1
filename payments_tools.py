"""
GoHighLevel Payments Tools for the GHL MCP Server

This module exposes the Payments API as MCP tools.

Capabilities:
- White-label integration providers (Authorize.net, NMI)
- Orders and order fulfillments (shipment tracking)
- Transactions and subscriptions
- Coupons
- Custom payment provider integration and its live/test configuration

Authentication: Uses the shared GHLClient (Bearer token, see ghl_client.py).
Requires payments/orders, payments/transactions, payments/subscriptions,
payments/coupons and payments/custom-provider scopes.

altId / altType default to the configured location on every tool.
"""

import logging
from typing import Optional, List, Literal

from pydantic import BaseModel, Field

from app.core.tooling import ToolModule, ToolSpec, envelope, counted, location_field, hint

logger = logging.getLogger(__name__)


# =============================================================================
# Input Models
# =============================================================================

class AltParams(BaseModel):
    altId: Optional[str] = Field(None, description="Location ID or company ID (defaults to the configured location)")
    altType: Optional[Literal["location"]] = Field(None, description="Type of identifier (default: location)")


class CreateWhitelabelProviderParams(AltParams):
    uniqueName: str = Field(pattern=r"^[a-z0-9-]+$",
                            description='Unique identifier (lowercase, hyphens only, e.g., "my-agency-payments")')
    title: str = Field(description="Display name for the payment provider")
    provider: Literal["authorize-net", "nmi"] = Field(description="Payment gateway type: authorize-net or nmi")
    description: str = Field(description="Description of the payment provider")
    imageUrl: str = Field(description="Logo image URL (recommended: 200x200px)")


class ListWhitelabelProvidersParams(AltParams):
    limit: Optional[int] = Field(None, ge=0, description="Maximum providers to return (0 = all)")
    offset: Optional[int] = Field(None, ge=0, description="Number of providers to skip (for pagination)")


class ListOrdersParams(AltParams):
    locationId: Optional[str] = Field(None, description="Location ID (sub-account ID)")
    status: Optional[str] = Field(None, description='Order status filter (e.g., "pending", "paid", "refunded")')
    paymentMode: Optional[str] = Field(None, description='Payment mode: "live" or "test"')
    startAt: Optional[str] = Field(None, description="Start date for orders (YYYY-MM-DD)")
    endAt: Optional[str] = Field(None, description="End date for orders (YYYY-MM-DD)")
    search: Optional[str] = Field(None, description="Search term for order name")
    contactId: Optional[str] = Field(None, description="Filter by contact ID")
    funnelProductIds: Optional[str] = Field(None, description="Comma-separated product IDs")
    limit: Optional[int] = Field(None, ge=1, description="Maximum orders per page (default: 10)")
    offset: Optional[int] = Field(None, ge=0, description="Number of orders to skip (for pagination)")


class OrderIdParams(AltParams):
    orderId: str = Field(description="Order ID")
    locationId: Optional[str] = Field(None, description="Location ID (sub-account ID)")


class Tracking(BaseModel):
    trackingNumber: str = Field(description="Tracking number from shipping carrier")
    shippingCarrier: str = Field(description="Carrier name (USPS, UPS, FedEx, DHL, etc.)")
    trackingUrl: Optional[str] = Field(None, description="Direct tracking URL")


class FulfilledItem(BaseModel):
    priceId: str = Field(description="Product price ID being fulfilled")
    qty: int = Field(ge=1, description="Quantity being shipped")


class CreateFulfillmentParams(AltParams):
    orderId: str = Field(description="Order ID to fulfill")
    trackings: List[Tracking] = Field(description="Array of tracking information (one per package)")
    items: List[FulfilledItem] = Field(description="Items included in this fulfillment")
    notifyCustomer: bool = Field(description="Send shipment notification to customer (true/false)")


class ListFulfillmentsParams(AltParams):
    orderId: str = Field(description="Order ID to get fulfillments for")


class ListTransactionsParams(AltParams):
    locationId: Optional[str] = Field(None, description="Location ID (sub-account ID)")
    paymentMode: Optional[str] = Field(None, description='Payment mode: "live" or "test"')
    startAt: Optional[str] = Field(None, description="Start date for transactions (YYYY-MM-DD)")
    endAt: Optional[str] = Field(None, description="End date for transactions (YYYY-MM-DD)")
    entitySourceType: Optional[str] = Field(None, description="Source type (order, invoice, subscription, etc.)")
    entitySourceSubType: Optional[str] = Field(None, description="Source sub-type")
    search: Optional[str] = Field(None, description="Search term for transaction name")
    subscriptionId: Optional[str] = Field(None, description="Filter by subscription ID")
    entityId: Optional[str] = Field(None, description="Filter by entity ID")
    contactId: Optional[str] = Field(None, description="Filter by contact ID")
    limit: Optional[int] = Field(None, ge=1, description="Maximum transactions per page (default: 10)")
    offset: Optional[int] = Field(None, ge=0, description="Number of transactions to skip (for pagination)")


class TransactionIdParams(AltParams):
    transactionId: str = Field(description="Transaction ID to retrieve")
    locationId: Optional[str] = Field(None, description="Location ID (sub-account ID)")


class ListSubscriptionsParams(AltParams):
    entityId: Optional[str] = Field(None, description="Filter by entity ID")
    paymentMode: Optional[str] = Field(None, description='Payment mode: "live" or "test"')
    startAt: Optional[str] = Field(None, description="Start date for subscriptions (YYYY-MM-DD)")
    endAt: Optional[str] = Field(None, description="End date for subscriptions (YYYY-MM-DD)")
    entitySourceType: Optional[str] = Field(None, description="Source type of subscriptions")
    search: Optional[str] = Field(None, description="Search term for subscription name")
    contactId: Optional[str] = Field(None, description="Filter by contact ID")
    id: Optional[str] = Field(None, description="Specific subscription ID")
    limit: Optional[int] = Field(None, ge=1, description="Maximum subscriptions per page (default: 10)")
    offset: Optional[int] = Field(None, ge=0, description="Number of subscriptions to skip (for pagination)")


class SubscriptionIdParams(AltParams):
    subscriptionId: str = Field(description="Subscription ID to retrieve")


class ListCouponsParams(AltParams):
    limit: Optional[int] = Field(None, ge=1, description="Maximum coupons to return (default: 100)")
    offset: Optional[int] = Field(None, ge=0, description="Number of coupons to skip (for pagination)")
    status: Optional[Literal["scheduled", "active", "expired"]] = Field(None, description="Filter by coupon status")
    search: Optional[str] = Field(None, description="Search by coupon name or code")


class FuturePaymentsConfig(BaseModel):
    type: Literal["forever", "fixed"] = Field(description="Duration type: forever or fixed months")
    duration: Optional[int] = Field(None, ge=1, description="Number of months (required if type=fixed)")
    durationType: Optional[Literal["months"]] = Field(None, description="Duration unit (months)")


class CouponFields(AltParams):
    name: str = Field(description="Coupon display name")
    code: str = Field(description='Coupon code (e.g., "SUMMER2024")')
    discountType: Literal["percentage", "amount"] = Field(description="Discount type: percentage or fixed amount")
    discountValue: float = Field(ge=0, description="Discount value: whole percent (20 = 20%) or dollar amount (20.00 = $20 off)")
    startDate: str = Field(description="Start date/time (ISO 8601: YYYY-MM-DDTHH:mm:ssZ)")
    endDate: Optional[str] = Field(None, description="End date/time (ISO 8601: YYYY-MM-DDTHH:mm:ssZ)")
    usageLimit: Optional[int] = Field(None, ge=1, description="Maximum total uses (e.g., 100)")
    productIds: Optional[List[str]] = Field(None, description="Product IDs this coupon applies to (empty = all products)")
    applyToFuturePayments: Optional[bool] = Field(None, description="Apply discount to recurring subscription payments")
    applyToFuturePaymentsConfig: Optional[FuturePaymentsConfig] = Field(None, description="Configuration for subscription discounts")
    limitPerCustomer: Optional[bool] = Field(None, description="Limit to one use per customer (default: false)")


class UpdateCouponParams(CouponFields):
    id: str = Field(description="Coupon ID to update")


class CouponIdParams(AltParams):
    id: str = Field(description="Coupon ID")


class GetCouponParams(CouponIdParams):
    code: str = Field(description="Coupon code")


class CustomProviderParams(BaseModel):
    locationId: Optional[str] = location_field()


class CreateCustomProviderParams(CustomProviderParams):
    name: str = Field(description="Payment gateway name")
    description: str = Field(description="Description of the payment gateway")
    paymentsUrl: str = Field(description="Payment checkout URL (loaded in iframe)")
    queryUrl: str = Field(description="URL to query payment status")
    imageUrl: str = Field(description="Logo image URL (recommended: 200x200px)")


class ProviderKeys(BaseModel):
    apiKey: str = Field(description="Private API key (keep secret!)")
    publishableKey: str = Field(description="Public key (client-side safe)")


class CreateProviderConfigParams(CustomProviderParams):
    live: ProviderKeys = Field(description="Live/production payment configuration")
    test: ProviderKeys = Field(description="Test/sandbox payment configuration")


class DisconnectProviderParams(CustomProviderParams):
    liveMode: bool = Field(description="true = disconnect live mode, false = disconnect test mode")


# =============================================================================
# Tool Module
# =============================================================================

class PaymentsTools(ToolModule):
    family = "payments"
    subject = "payment resource"

    def build_specs(self):
        alt = self.alt_location()
        order = dict(subject="order", lookup="list_orders")
        coupon = dict(subject="coupon", lookup="list_coupons")
        provider_query = ("locationId",)
        return [
            # -----------------------------------------------------------------
            # Integration providers
            # -----------------------------------------------------------------
            ToolSpec(
                name="create_whitelabel_integration_provider",
                description="Create a white-label payment integration provider (Authorize.net or NMI)",
                params=CreateWhitelabelProviderParams,
                method="POST", path="/payments/integrations/provider/whitelabel",
                defaults=alt,
                message="White-label provider '{title}' created successfully",
                hints=(hint((400, 409), "Could not create provider '{uniqueName}'.\n"
                                        "uniqueName must be lowercase letters, digits and hyphens, "
                                        "and unique across the location."),),
            ),
            ToolSpec(
                name="list_whitelabel_integration_providers",
                description="List white-label payment integration providers",
                params=ListWhitelabelProvidersParams,
                path="/payments/integrations/provider/whitelabel",
                defaults=alt,
                reshape=counted("providers", "integration providers"),
            ),

            # -----------------------------------------------------------------
            # Orders
            # -----------------------------------------------------------------
            ToolSpec(
                name="list_orders",
                description="List orders with optional status, date, contact and product filters",
                params=ListOrdersParams,
                path="/payments/orders",
                defaults=alt,
                reshape=counted("data", "orders"),
            ),
            ToolSpec(
                name="get_order_by_id",
                description="Get a single order with its items and payment status",
                params=OrderIdParams,
                path="/payments/orders/{orderId}",
                defaults=alt, **order,
                message="Order {orderId} retrieved successfully",
            ),
            ToolSpec(
                name="create_order_fulfillment",
                description="Record a shipment for an order with tracking numbers and shipped items",
                params=CreateFulfillmentParams,
                method="POST", path="/payments/orders/{orderId}/fulfillments",
                defaults=alt, **order,
                reshape=lambda data, args: envelope(
                    data, f"Fulfillment created for order {args['orderId']} "
                          f"({len(args['trackings'])} packages, {len(args['items'])} items)"),
            ),
            ToolSpec(
                name="list_order_fulfillments",
                description="List fulfillments (shipments) recorded for an order",
                params=ListFulfillmentsParams,
                path="/payments/orders/{orderId}/fulfillments",
                defaults=alt, **order,
                reshape=counted("data", "fulfillments"),
            ),

            # -----------------------------------------------------------------
            # Transactions and subscriptions
            # -----------------------------------------------------------------
            ToolSpec(
                name="list_transactions",
                description="List payment transactions with optional filters",
                params=ListTransactionsParams,
                path="/payments/transactions",
                defaults=alt,
                reshape=counted("data", "transactions"),
            ),
            ToolSpec(
                name="get_transaction_by_id",
                description="Get a single payment transaction",
                params=TransactionIdParams,
                path="/payments/transactions/{transactionId}",
                defaults=alt,
                subject="transaction", lookup="list_transactions",
                message="Transaction {transactionId} retrieved successfully",
            ),
            ToolSpec(
                name="list_subscriptions",
                description="List recurring payment subscriptions",
                params=ListSubscriptionsParams,
                path="/payments/subscriptions",
                defaults=alt,
                reshape=counted("data", "subscriptions"),
            ),
            ToolSpec(
                name="get_subscription_by_id",
                description="Get a single subscription",
                params=SubscriptionIdParams,
                path="/payments/subscriptions/{subscriptionId}",
                defaults=alt,
                subject="subscription", lookup="list_subscriptions",
                message="Subscription {subscriptionId} retrieved successfully",
            ),

            # -----------------------------------------------------------------
            # Coupons
            # -----------------------------------------------------------------
            ToolSpec(
                name="list_coupons",
                description="List promotional coupons",
                params=ListCouponsParams,
                path="/payments/coupon/list",
                defaults=alt,
                reshape=counted("data", "coupons"),
            ),
            ToolSpec(
                name="create_coupon",
                description="Create a coupon. Percentage discounts use whole numbers; amount discounts are dollars.",
                params=CouponFields,
                method="POST", path="/payments/coupon",
                defaults=alt,
                message="Coupon '{code}' created successfully",
                hints=(hint((400, 409), "Could not create coupon '{code}'.\n"
                                        "Coupon codes must be unique, startDate must be ISO 8601, "
                                        "and applyToFuturePaymentsConfig.duration is required when type=fixed."),),
            ),
            ToolSpec(
                name="update_coupon",
                description="Update an existing coupon",
                params=UpdateCouponParams,
                method="PUT", path="/payments/coupon",
                defaults=alt, id_field="id", **coupon,
                message="Coupon {id} updated successfully",
            ),
            ToolSpec(
                name="delete_coupon",
                description="Delete a coupon",
                params=CouponIdParams,
                method="DELETE", path="/payments/coupon",
                body=("altId", "altType", "id"),
                defaults=alt, id_field="id", **coupon,
                message="Coupon {id} deleted successfully",
            ),
            ToolSpec(
                name="get_coupon",
                description="Get coupon details by ID and code",
                params=GetCouponParams,
                path="/payments/coupon",
                defaults=alt, id_field="id", **coupon,
                message="Coupon {code} retrieved successfully",
            ),

            # -----------------------------------------------------------------
            # Custom payment provider
            # -----------------------------------------------------------------
            ToolSpec(
                name="create_custom_provider_integration",
                description="Register a custom payment provider for the location",
                params=CreateCustomProviderParams,
                method="POST", path="/payments/custom-provider/provider",
                location="locationId", query=provider_query,
                message="Custom payment provider '{name}' created for location {locationId}",
            ),
            ToolSpec(
                name="delete_custom_provider_integration",
                description="Remove the custom payment provider from the location",
                params=CustomProviderParams,
                method="DELETE", path="/payments/custom-provider/provider",
                location="locationId",
                message="Custom payment provider deleted for location {locationId}",
            ),
            ToolSpec(
                name="get_custom_provider_config",
                description="Get the custom provider's live/test configuration",
                params=CustomProviderParams,
                path="/payments/custom-provider/connect",
                location="locationId",
                subject="custom provider config",
                message="Custom provider config retrieved for location {locationId}",
            ),
            ToolSpec(
                name="create_custom_provider_config",
                description="Connect live and test API keys for the custom payment provider",
                params=CreateProviderConfigParams,
                method="POST", path="/payments/custom-provider/connect",
                location="locationId", query=provider_query,
                message="Custom provider config saved for location {locationId}",
            ),
            ToolSpec(
                name="disconnect_custom_provider_config",
                description="Disconnect the live or test configuration of the custom payment provider",
                params=DisconnectProviderParams,
                method="POST", path="/payments/custom-provider/disconnect",
                location="locationId", query=provider_query,
                reshape=lambda data, args: envelope(
                    data, f"Custom provider {'live' if args['liveMode'] else 'test'} mode disconnected"),
            ),
        ]
