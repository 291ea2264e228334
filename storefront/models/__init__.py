from storefront.models.user import User
from storefront.models.product import Product
from storefront.models.order import Order
from storefront.models.order_item import OrderItem
from storefront.models.order_tracking import OrderTrackingEntry
from storefront.models.site_settings import SiteSettings

# add ALL models here
