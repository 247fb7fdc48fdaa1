"""
GoHighLevel Store Tools for the GHL MCP Server

This module exposes store shipping configuration as MCP tools.

Capabilities:
- Shipping zones (countries and states a rate set applies to)
- Shipping rates per zone, and rate quotes for a prospective order
- Custom shipping carriers (callback URL based)
- Store settings (shipping origin, notification addresses)

Authentication: Uses the shared GHLClient (Bearer token, see ghl_client.py).
Requires store/shipping.readonly, store/shipping.write,
store/setting.readonly and store/setting.write scopes.

Amounts are in CENTS (999 = $9.99); weights are in grams.
"""

import logging
from typing import Optional, List, Literal

from pydantic import BaseModel, Field

from app.core.tooling import ToolModule, ToolSpec, envelope, location_field, hint

logger = logging.getLogger(__name__)

ConditionType = Literal["PRICE", "WEIGHT", "FLAT"]


# =============================================================================
# Input Models
# =============================================================================

class LocationScoped(BaseModel):
    locationId: Optional[str] = location_field()


class StateCode(BaseModel):
    code: str = Field(description='State/province code (e.g., "CA", "NY", "TX", "ON", "BC")')


class Country(BaseModel):
    code: str = Field(description='2-letter country code (e.g., "US", "CA", "GB", "AU")')
    states: Optional[List[StateCode]] = Field(None, description="States included (omit for all states)")


class CreateZoneParams(LocationScoped):
    name: str = Field(description='Name of the shipping zone (e.g., "US Mainland", "International")')
    countries: List[Country] = Field(min_length=1, description="Countries covered by the zone")


class ListZonesParams(LocationScoped):
    limit: Optional[int] = Field(None, ge=1, description="Maximum zones to return")
    offset: Optional[int] = Field(None, ge=0, description="Number of zones to skip")
    withShippingRate: Optional[bool] = Field(None, description="Include the zone's shipping rates (default: false)")


class ZoneIdParams(LocationScoped):
    shippingZoneId: str = Field(description="Shipping zone ID")


class GetZoneParams(ZoneIdParams):
    withShippingRate: Optional[bool] = Field(None, description="Include shipping rates (default: false)")


class UpdateZoneParams(ZoneIdParams):
    name: Optional[str] = Field(None, description="New zone name")
    countries: Optional[List[Country]] = Field(None, description="Replacement country list")


class ShippingAddress(BaseModel):
    street1: str = Field(description="Street address line 1")
    city: str = Field(description="City name")
    country: str = Field(description="Country code (must match the outer country)")


class OrderProduct(BaseModel):
    id: str = Field(description="Product ID")
    quantity: int = Field(ge=1, description="Product quantity")


class AvailableRatesParams(LocationScoped):
    country: str = Field(description='Destination country code (2-letter ISO: "US", "CA", "GB")')
    address: Optional[ShippingAddress] = Field(None, description="Destination address")
    totalOrderAmount: float = Field(description="Total order amount in cents (5000 = $50.00)")
    totalOrderWeight: float = Field(description="Total order weight in grams (1000 = 1kg)")
    products: List[OrderProduct] = Field(description="Products in the order")
    source: Optional[str] = Field(None, description="Order source")
    couponCode: Optional[str] = Field(None, description="Coupon code applied to the order")


class CarrierService(BaseModel):
    name: str = Field(description='Service display name (e.g., "Ground Shipping")')
    value: str = Field(description='Service identifier (e.g., "ups_ground")')


class RateFields(BaseModel):
    description: Optional[str] = Field(None, description="Description shown to customers")
    minCondition: Optional[float] = Field(None, description="Minimum order amount (cents) or weight (grams)")
    maxCondition: Optional[float] = Field(None, description="Maximum order amount (cents) or weight (grams)")
    isCarrierRate: Optional[bool] = Field(None, description="Rate is computed by a shipping carrier")
    shippingCarrierId: Optional[str] = Field(None, description="Carrier ID for carrier rates")
    percentageOfRateFee: Optional[float] = Field(None, description="Markup percentage on carrier rates")
    shippingCarrierServices: Optional[List[CarrierService]] = Field(None, description="Carrier services offered")


class CreateRateParams(ZoneIdParams, RateFields):
    name: str = Field(description='Customer-facing rate name (e.g., "Standard Ground", "Express")')
    currency: str = Field(description='Currency code ("USD", "CAD", "EUR", "GBP")')
    amount: float = Field(ge=0, description="Shipping cost in cents (999 = $9.99, 0 = free)")
    conditionType: ConditionType = Field(description="PRICE (order amount), WEIGHT (order weight) or FLAT (always)")


class ListRatesParams(ZoneIdParams):
    limit: Optional[int] = Field(None, ge=1, description="Maximum rates to return")
    offset: Optional[int] = Field(None, ge=0, description="Number of rates to skip")


class RateIdParams(ZoneIdParams):
    shippingRateId: str = Field(description="Shipping rate ID")


class UpdateRateParams(RateIdParams, RateFields):
    name: Optional[str] = Field(None, description="New rate name")
    currency: Optional[str] = Field(None, description="New currency code")
    amount: Optional[float] = Field(None, ge=0, description="New amount in cents")
    conditionType: Optional[ConditionType] = Field(None, description="New condition type")


class CreateCarrierParams(LocationScoped):
    name: str = Field(description='Carrier name (e.g., "UPS", "FedEx", "Custom Carrier")')
    callbackUrl: str = Field(pattern=r"^https?://", description="HTTPS URL that receives rate requests and returns options")
    services: Optional[List[CarrierService]] = Field(None, description="Services offered by the carrier")
    allowsMultipleServiceSelection: Optional[bool] = Field(None, description="Allow selecting several services (default: false)")


class CarrierIdParams(LocationScoped):
    shippingCarrierId: str = Field(description="Shipping carrier ID")


class UpdateCarrierParams(CarrierIdParams):
    name: Optional[str] = Field(None, description="New carrier name")
    callbackUrl: Optional[str] = Field(None, pattern=r"^https?://", description="New callback URL")
    services: Optional[List[CarrierService]] = Field(None, description="Replacement service list")
    allowsMultipleServiceSelection: Optional[bool] = Field(None, description="Update service selection behavior")


class ShippingOrigin(BaseModel):
    name: str = Field(description="Business/warehouse name")
    street1: str = Field(description="Street address line 1")
    street2: Optional[str] = Field(None, description="Street address line 2")
    city: str = Field(description="City name")
    state: Optional[str] = Field(None, description='State/province code (e.g., "CA", "NY")')
    zip: str = Field(description="Postal/ZIP code")
    country: str = Field(description='Country code (2-letter ISO: "US", "CA", "GB")')


class CreateStoreSettingParams(LocationScoped):
    shippingOrigin: ShippingOrigin = Field(description="Address orders ship from")
    storeOrderNotification: Optional[str] = Field(None, description="Email address for new order notifications")
    storeOrderFulfillmentNotification: Optional[str] = Field(None, description="Email address for fulfillment notifications")


# =============================================================================
# Helper Functions
# =============================================================================

def _as_alt(args: dict) -> dict:
    args["altId"] = args.pop("locationId")
    args["altType"] = "location"
    return args


def _item(key: str, message: str):
    def reshape(data, args):
        return {"success": True, key: data.get("data") or data, "message": message}
    return reshape


def _items(key: str, label: str):
    def reshape(data, args):
        items = data.get("data") or []
        return {
            "success": True,
            key: items,
            "total": data.get("total", len(items)),
            "message": f"Retrieved {len(items)} {label}",
        }
    return reshape


ZONE_IN_USE = (
    "Cannot delete shipping zone {shippingZoneId}: it still has active shipping rates.\n"
    "Delete the zone's rates first (list_shipping_rates, then delete_shipping_rate), "
    "then delete the zone."
)


# =============================================================================
# Tool Module
# =============================================================================

class StoreTools(ToolModule):
    family = "store"
    subject = "shipping zone"
    lookup = "list_shipping_zones"

    def build_specs(self):
        scoped = dict(location="locationId", transform=_as_alt)
        rate = dict(subject="shipping rate", lookup="list_shipping_rates")
        carrier = dict(subject="shipping carrier", lookup="list_shipping_carriers")
        return [
            # -----------------------------------------------------------------
            # Shipping zones
            # -----------------------------------------------------------------
            ToolSpec(
                name="create_shipping_zone",
                description="Create a shipping zone covering a set of countries (and optionally states)",
                params=CreateZoneParams,
                method="POST", path="/store/shipping-zone",
                reshape=_item("shippingZone", "Shipping zone created successfully"),
                hints=(hint((400, 422), "Invalid shipping zone.\nCountry and state codes must be ISO codes "
                                        "(e.g. US, CA) and a country may only belong to one zone."),),
                **scoped,
            ),
            ToolSpec(
                name="list_shipping_zones",
                description="List shipping zones",
                params=ListZonesParams,
                path="/store/shipping-zone",
                reshape=_items("shippingZones", "shipping zones"),
                **scoped,
            ),
            ToolSpec(
                name="get_shipping_zone",
                description="Get a shipping zone by ID",
                params=GetZoneParams,
                path="/store/shipping-zone/{shippingZoneId}",
                reshape=_item("shippingZone", "Shipping zone retrieved successfully"),
                **scoped,
            ),
            ToolSpec(
                name="update_shipping_zone",
                description="Update a shipping zone's name or countries",
                params=UpdateZoneParams,
                method="PUT", path="/store/shipping-zone/{shippingZoneId}",
                reshape=_item("shippingZone", "Shipping zone updated successfully"),
                **scoped,
            ),
            ToolSpec(
                name="delete_shipping_zone",
                description="Permanently delete a shipping zone",
                params=ZoneIdParams,
                method="DELETE", path="/store/shipping-zone/{shippingZoneId}",
                reshape=lambda data, args: envelope(
                    data, f"Shipping zone {args['shippingZoneId']} deleted successfully"),
                hints=(hint(409, ZONE_IN_USE),),
                **scoped,
            ),

            # -----------------------------------------------------------------
            # Shipping rates
            # -----------------------------------------------------------------
            ToolSpec(
                name="get_available_shipping_rates",
                description="Quote the shipping rates available for an order (amounts in cents, weight in grams)",
                params=AvailableRatesParams,
                method="POST", path="/store/shipping-zone/shipping-rates",
                reshape=lambda data, args: {
                    **_items("rates", "available shipping rates")(data, args),
                    "country": args["country"],
                },
                read_only=True, idempotent=True,
                **scoped,
            ),
            ToolSpec(
                name="create_shipping_rate",
                description="Create a shipping rate in a zone. amount is in cents.",
                params=CreateRateParams,
                method="POST", path="/store/shipping-zone/{shippingZoneId}/shipping-rate",
                reshape=_item("shippingRate", "Shipping rate created successfully"),
                hints=(hint((400, 422), "Invalid shipping rate.\namount, minCondition and maxCondition are "
                                        "cents for PRICE rates and grams for WEIGHT rates; minCondition "
                                        "must be below maxCondition."),),
                **scoped,
            ),
            ToolSpec(
                name="list_shipping_rates",
                description="List the shipping rates of a zone",
                params=ListRatesParams,
                path="/store/shipping-zone/{shippingZoneId}/shipping-rate",
                reshape=_items("shippingRates", "shipping rates"),
                **scoped,
            ),
            ToolSpec(
                name="get_shipping_rate",
                description="Get a shipping rate by ID",
                params=RateIdParams,
                path="/store/shipping-zone/{shippingZoneId}/shipping-rate/{shippingRateId}",
                reshape=_item("shippingRate", "Shipping rate retrieved successfully"),
                **rate, **scoped,
            ),
            ToolSpec(
                name="update_shipping_rate",
                description="Update a shipping rate. Only provided fields change.",
                params=UpdateRateParams,
                method="PUT", path="/store/shipping-zone/{shippingZoneId}/shipping-rate/{shippingRateId}",
                reshape=_item("shippingRate", "Shipping rate updated successfully"),
                **rate, **scoped,
            ),
            ToolSpec(
                name="delete_shipping_rate",
                description="Permanently delete a shipping rate",
                params=RateIdParams,
                method="DELETE", path="/store/shipping-zone/{shippingZoneId}/shipping-rate/{shippingRateId}",
                reshape=lambda data, args: envelope(
                    data, f"Shipping rate {args['shippingRateId']} deleted successfully"),
                **rate, **scoped,
            ),

            # -----------------------------------------------------------------
            # Shipping carriers
            # -----------------------------------------------------------------
            ToolSpec(
                name="create_shipping_carrier",
                description="Register a custom shipping carrier that quotes rates through a callback URL",
                params=CreateCarrierParams,
                method="POST", path="/store/shipping-carrier",
                reshape=_item("shippingCarrier", "Shipping carrier created successfully"),
                **carrier, **scoped,
            ),
            ToolSpec(
                name="list_shipping_carriers",
                description="List custom shipping carriers",
                params=LocationScoped,
                path="/store/shipping-carrier",
                reshape=_items("shippingCarriers", "shipping carriers"),
                **scoped,
            ),
            ToolSpec(
                name="get_shipping_carrier",
                description="Get a shipping carrier by ID",
                params=CarrierIdParams,
                path="/store/shipping-carrier/{shippingCarrierId}",
                reshape=_item("shippingCarrier", "Shipping carrier retrieved successfully"),
                **carrier, **scoped,
            ),
            ToolSpec(
                name="update_shipping_carrier",
                description="Update a shipping carrier. Only provided fields change.",
                params=UpdateCarrierParams,
                method="PUT", path="/store/shipping-carrier/{shippingCarrierId}",
                reshape=_item("shippingCarrier", "Shipping carrier updated successfully"),
                **carrier, **scoped,
            ),
            ToolSpec(
                name="delete_shipping_carrier",
                description="Permanently delete a shipping carrier",
                params=CarrierIdParams,
                method="DELETE", path="/store/shipping-carrier/{shippingCarrierId}",
                reshape=lambda data, args: envelope(
                    data, f"Shipping carrier {args['shippingCarrierId']} deleted successfully"),
                **carrier, **scoped,
            ),

            # -----------------------------------------------------------------
            # Store settings
            # -----------------------------------------------------------------
            ToolSpec(
                name="create_store_setting",
                description="Create or replace the store settings (shipping origin and notification emails)",
                params=CreateStoreSettingParams,
                method="POST", path="/store/store-setting",
                reshape=_item("storeSetting", "Store settings saved successfully"),
                idempotent=True,
                **scoped,
            ),
            ToolSpec(
                name="get_store_setting",
                description="Get the store settings",
                params=LocationScoped,
                path="/store/store-setting",
                reshape=_item("storeSetting", "Store settings retrieved successfully"),
                subject="store setting",
                **scoped,
            ),
        ]
