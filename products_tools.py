"""
GoHighLevel Products Tools for the GHL MCP Server

This module exposes the Products API (store catalogue) as MCP tools.

Capabilities:
- Create, list, read, update, and delete products
- Product prices (variants)
- Inventory listing
- Product collections

Authentication: Uses the shared GHLClient (Bearer token, see ghl_client.py).
Requires products.readonly, products.write, products/prices and
products/collection scopes.

Amounts are DECIMAL DOLLARS (99.00 = $99.00), not cents.
"""

import logging
from typing import Optional, Literal

from pydantic import BaseModel, Field

from app.core.tooling import ToolModule, ToolSpec, envelope, location_field, hint

logger = logging.getLogger(__name__)

ProductType = Literal["DIGITAL", "PHYSICAL", "SERVICE", "PHYSICAL/DIGITAL"]


# =============================================================================
# Input Models
# =============================================================================

class LocationScoped(BaseModel):
    locationId: Optional[str] = location_field()


class CreateProductParams(LocationScoped):
    name: str = Field(min_length=1, description="Product name (customer-facing)")
    productType: ProductType = Field(
        description="Product type: DIGITAL (downloads), PHYSICAL (ships), SERVICE (appointments), PHYSICAL/DIGITAL (combo)"
    )
    description: Optional[str] = Field(None, description="Product description (supports HTML/markdown)")
    image: Optional[str] = Field(None, description="Product image URL (recommended: 1200x1200px)")
    availableInStore: Optional[bool] = Field(None, description="Make product visible in store (default: true)")
    slug: Optional[str] = Field(None, description="URL-friendly slug (auto-generated from name if not provided)")


class ListProductsParams(LocationScoped):
    limit: Optional[int] = Field(None, ge=1, le=100, description="Maximum products to return (default: 20, max: 100)")
    offset: Optional[int] = Field(None, ge=0, description="Number of products to skip (for pagination)")
    search: Optional[str] = Field(None, description="Search term for product names")
    storeId: Optional[str] = Field(None, description="Filter by specific store ID")
    includedInStore: Optional[bool] = Field(None, description="Filter by store inclusion status")
    availableInStore: Optional[bool] = Field(None, description="Filter by store availability (true = visible products)")


class ProductIdParams(LocationScoped):
    productId: str = Field(description="Product ID")


class UpdateProductParams(ProductIdParams):
    name: str = Field(min_length=1, description="Product name (REQUIRED - include current name even if not changing it)")
    productType: ProductType = Field(description="Product type (REQUIRED - must match current type, cannot be changed)")
    description: Optional[str] = Field(None, description="New description (optional)")
    image: Optional[str] = Field(None, description="New image URL (optional)")
    availableInStore: Optional[bool] = Field(None, description="Update store visibility (optional)")


class CreatePriceParams(ProductIdParams):
    name: str = Field(description='Price/variant name (e.g., "Standard", "Monthly Plan", "Large - Blue")')
    type: Literal["one_time", "recurring"] = Field(
        description="Price type: one_time (single payment) or recurring (subscription)"
    )
    currency: str = Field(description='Currency code ("USD", "EUR", "GBP", "CAD")')
    amount: float = Field(ge=0, description="Price as float with decimals (99.00 = $99.00). NOT cents.")
    compareAtPrice: Optional[float] = Field(
        None, ge=0, description="Original price for showing discounts (e.g., 99.00 when amount=49.00). NOT cents."
    )


class ListPricesParams(ProductIdParams):
    limit: Optional[int] = Field(None, ge=1, le=100, description="Maximum prices to return (for pagination)")
    offset: Optional[int] = Field(None, ge=0, description="Number of prices to skip (for pagination)")


class ListInventoryParams(LocationScoped):
    limit: Optional[int] = Field(None, ge=1, le=100, description="Maximum items to return (default: 20, max: 100)")
    offset: Optional[int] = Field(None, ge=0, description="Number of items to skip (for pagination)")
    search: Optional[str] = Field(None, description="Search term for inventory items")


class CollectionSeo(BaseModel):
    title: Optional[str] = Field(None, description="SEO title for search engines")
    description: Optional[str] = Field(None, description="SEO description for search engines")


class CreateCollectionParams(LocationScoped):
    name: str = Field(min_length=1, description='Collection name (e.g., "Summer Sale", "T-Shirts")')
    slug: str = Field(min_length=1, description='URL-friendly slug (e.g., "summer-sale", "t-shirts")')
    image: Optional[str] = Field(None, description="Collection banner image URL (recommended: 1200x400px)")
    seo: Optional[CollectionSeo] = Field(None, description="SEO settings")


class ListCollectionsParams(LocationScoped):
    limit: Optional[int] = Field(None, ge=1, le=100, description="Maximum collections to return (default: 20, max: 100)")
    offset: Optional[int] = Field(None, ge=0, description="Number of collections to skip (for pagination)")
    name: Optional[str] = Field(None, description="Search by collection name")


# =============================================================================
# Helper Functions
# =============================================================================

def _as_alt(args: dict) -> dict:
    """Inventory and collections are scoped by altId/altType instead of locationId."""
    args["altId"] = args.pop("locationId")
    args["altType"] = "location"
    return args


def _total(value) -> int:
    # The API reports totals as an int, {total: n} or [{total: n}] depending on the endpoint
    if isinstance(value, list):
        value = value[0] if value else {}
    if isinstance(value, dict):
        value = value.get("total", 0)
    return int(value or 0)


def _products_result(data, args):
    products = data.get("products") or []
    total = _total(data.get("total"))
    return {
        "success": True,
        "products": products,
        "pagination": {
            "total": total,
            "returned": len(products),
            "limit": args["limit"],
            "offset": args["offset"],
            "hasMore": args["offset"] + len(products) < total,
        },
        "filters": {
            "search": args.get("search"),
            "storeId": args.get("storeId"),
            "includedInStore": args.get("includedInStore"),
            "availableInStore": args.get("availableInStore"),
        },
        "message": f"Retrieved {len(products)} of {total} products",
    }


def _page(key: str, source: str, label: str, **filters):
    def reshape(data, args):
        items = data.get(source) or []
        total = _total(data.get("total"))
        result = {
            "success": True,
            key: items,
            "pagination": {"total": total, "returned": len(items)},
        }
        if filters:
            result["filters"] = {name: args.get(arg) for name, arg in filters.items()}
        result["message"] = f"Retrieved {len(items)} {label}"
        return result
    return reshape


def _single(key: str, message: str):
    def reshape(data, args):
        return {"success": True, key: data, "message": message}
    return reshape


# =============================================================================
# Tool Module
# =============================================================================

class ProductsTools(ToolModule):
    family = "products"
    subject = "product"
    lookup = "list_products"

    def build_specs(self):
        return [
            # -----------------------------------------------------------------
            # Products
            # -----------------------------------------------------------------
            ToolSpec(
                name="create_product",
                description="Create a new product in the store catalogue. Add prices with create_price.",
                params=CreateProductParams,
                method="POST", path="/products/",
                location="locationId",
                reshape=_single("product", "Product created successfully"),
                hints=(hint(400, "Invalid product data.\nproductType must be one of DIGITAL, PHYSICAL, "
                                 "SERVICE, PHYSICAL/DIGITAL and image must be a public URL."),),
            ),
            ToolSpec(
                name="list_products",
                description="List products with pagination and store filters",
                params=ListProductsParams,
                path="/products/",
                location="locationId",
                defaults={"limit": 20, "offset": 0},
                reshape=_products_result,
            ),
            ToolSpec(
                name="get_product",
                description="Get a product by ID",
                params=ProductIdParams,
                path="/products/{productId}",
                location="locationId",
                reshape=_single("product", "Product retrieved successfully"),
            ),
            ToolSpec(
                name="update_product",
                description="Update a product. name and productType are required by GoHighLevel on every update.",
                params=UpdateProductParams,
                method="PUT", path="/products/{productId}",
                location="locationId",
                reshape=_single("product", "Product updated successfully"),
                hints=(hint(422, "Product update rejected.\nInclude the current name and the unchanged "
                                 "productType; the product type cannot be changed after creation."),),
            ),
            ToolSpec(
                name="delete_product",
                description="Permanently delete a product and its prices",
                params=ProductIdParams,
                method="DELETE", path="/products/{productId}",
                location="locationId",
                reshape=lambda data, args: envelope(data, "Product deleted successfully", productId=args["productId"]),
            ),

            # -----------------------------------------------------------------
            # Prices
            # -----------------------------------------------------------------
            ToolSpec(
                name="create_price",
                description="Create a price (variant) for a product. amount is decimal dollars, not cents.",
                params=CreatePriceParams,
                method="POST", path="/products/{productId}/price",
                location="locationId",
                reshape=_single("price", "Price created successfully"),
            ),
            ToolSpec(
                name="list_prices",
                description="List prices (variants) of a product",
                params=ListPricesParams,
                path="/products/{productId}/price",
                location="locationId",
                reshape=lambda data, args: {
                    "productId": args["productId"],
                    **_page("prices", "prices", "prices")(data, args),
                },
            ),

            # -----------------------------------------------------------------
            # Inventory and collections
            # -----------------------------------------------------------------
            ToolSpec(
                name="list_inventory",
                description="List inventory items with stock levels",
                params=ListInventoryParams,
                path="/products/inventory",
                location="locationId",
                transform=_as_alt,
                reshape=_page("inventory", "inventory", "inventory items", search="search"),
            ),
            ToolSpec(
                name="create_product_collection",
                description="Create a product collection (category) for the store",
                params=CreateCollectionParams,
                method="POST", path="/products/collections",
                location="locationId",
                transform=_as_alt,
                subject="collection", lookup="list_product_collections",
                reshape=lambda data, args: {
                    "success": True,
                    "collection": data.get("data") or data,
                    "message": "Collection created successfully",
                },
                hints=(hint((400, 409), "Collection slug '{slug}' is invalid or already in use.\n"
                                        "Use list_product_collections to check existing slugs."),),
            ),
            ToolSpec(
                name="list_product_collections",
                description="List product collections",
                params=ListCollectionsParams,
                path="/products/collections",
                location="locationId",
                transform=_as_alt,
                reshape=_page("collections", "data", "collections", name="name"),
            ),
        ]
