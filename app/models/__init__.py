from app.models.auth.user import User, UserRights
from app.models.orders.order import Order, Customer
from app.models.orders.order_item import (
    OrderItem, Extra, Without, OrderItemConfiguration, ScanNOrderSession, SessionOrderItem
)
from app.models.orders.payment import Payment
from app.models.orders.order_comment import OrderComment
from app.models.orders.order_location import Location, OrderLocation
from app.models.delivery.delivery_session import DeliverySession, DeliverySessionOrder
from app.models.menu.product import Product, ProductCategory, TvaCategory, Discount
from app.models.menu.component import Component, ComponentCategory, Recipe, Require, UnitOfMeasureDesc
from app.models.menu.configurable_attribute import (
    ConfigurableAttribute, ConfigurableAttributeOption, ProductConfigurableAttribute
)
from app.models.menu.merchant_parameters import MerchantParameters, Delay
from app.models.locations.floor import Floor, FloorArea
from app.models.locations.booking import Booking, BookedLocation
