from .tenancy import Restaurant, TenantOwnedMixin
from .billing import CustomerAccount, Plan, CustomerSubscription
from .auth import User, Role, user_roles, user_restaurants
from .catalog import (
    Category, Product, ProductApprovalLog, Media, QrCode,
    RestaurantPage, RestaurantSocialLink, DefaultCategory,
)
from .security import SecurityEvent

# Entity types the tenant predicate applies to
TENANT_OWNED_MODELS = (Category, Product, Media, QrCode, RestaurantPage, RestaurantSocialLink)

__all__ = [
    'Restaurant', 'TenantOwnedMixin',
    'CustomerAccount', 'Plan', 'CustomerSubscription',
    'User', 'Role', 'user_roles', 'user_restaurants',
    'Category', 'Product', 'ProductApprovalLog', 'Media', 'QrCode',
    'RestaurantPage', 'RestaurantSocialLink', 'DefaultCategory',
    'SecurityEvent', 'TENANT_OWNED_MODELS',
]
