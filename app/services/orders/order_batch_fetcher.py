import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List

from sqlalchemy import Integer, and_, bindparam, case, func, select
from sqlalchemy.engine import RowMapping

from app.models.auth.user import User
from app.models.menu.component import Component, Recipe, Require, UnitOfMeasureDesc
from app.models.menu.configurable_attribute import (
    ConfigurableAttribute, ConfigurableAttributeOption, ProductConfigurableAttribute
)
from app.models.menu.product import Discount, Product, ProductCategory, TvaCategory
from app.models.orders.order import Customer, Order
from app.models.orders.order_comment import OrderComment
from app.models.orders.order_item import (
    Extra, OrderItem, OrderItemConfiguration, ScanNOrderSession, SessionOrderItem, Without
)
from app.models.orders.order_location import Location, OrderLocation
from app.models.orders.payment import Payment
from app.services.common.read_snapshot import BatchRunner
from app.services.orders.order_filter import OrderFilter, active_session, order_source

logger = logging.getLogger(__name__)

UOM_LANG = "FR"


class FetchStrategy(str, Enum):
    NARROWED = "narrowed"  # resolve order ids first, then filter on the id set
    DIRECT = "direct"      # repeat the full predicate on every query


@dataclass
class OrderRowSet:
    """Flat rows of one batch, one list per step."""
    headers: List[RowMapping] = field(default_factory=list)
    products: List[RowMapping] = field(default_factory=list)
    components: List[RowMapping] = field(default_factory=list)
    extras: List[RowMapping] = field(default_factory=list)
    withouts: List[RowMapping] = field(default_factory=list)
    payments: List[RowMapping] = field(default_factory=list)
    clients: List[RowMapping] = field(default_factory=list)
    comments: List[RowMapping] = field(default_factory=list)
    locations: List[RowMapping] = field(default_factory=list)
    attributes: List[RowMapping] = field(default_factory=list)
    options: List[RowMapping] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.headers


def item_source():
    return order_source().join(
        OrderItem.__table__,
        and_(OrderItem.order_id == Order.order_id, OrderItem.merchant_id == Order.merchant_id),
    )


class OrderBatchFetcher:
    """Runs the order batch inside an open read snapshot."""

    def __init__(self, runner: BatchRunner, merchant_id: str, strategy: FetchStrategy = FetchStrategy.NARROWED):
        self.runner = runner
        self.merchant_id = merchant_id
        self.strategy = FetchStrategy(strategy)

    async def fetch(self, order_filter: OrderFilter) -> OrderRowSet:
        scope = order_filter.clause

        if self.strategy == FetchStrategy.NARROWED:
            order_ids = await self.resolve_order_ids(order_filter)
            if not order_ids:
                logger.debug(f"No order matched {order_filter.view} for merchant {self.merchant_id}")
                return OrderRowSet()
            scope = self.narrowed_scope(order_ids)

        rows = OrderRowSet()
        rows.headers = await self.runner.run("header", self.header_query(scope))
        if rows.is_empty:
            return rows

        rows.products = await self.runner.run("products", self.products_query(scope))
        rows.components = await self.runner.run("components", self.components_query(scope))
        rows.extras = await self.runner.run("extras", self.extras_query(scope))
        rows.withouts = await self.runner.run("withouts", self.withouts_query(scope))
        rows.payments = await self.runner.run("payments", self.payments_query(scope))
        rows.clients = await self.runner.run("client_sno", self.clients_query(scope))
        rows.comments = await self.runner.run("comments", self.comments_query(scope))
        rows.locations = await self.runner.run("locations", self.locations_query(scope))
        rows.attributes = await self.runner.run("configuration_attributes", self.attributes_query(scope))
        rows.options = await self.runner.run("configuration_options", self.options_query(scope))
        return rows

    def narrowed_scope(self, order_ids: List[int]):
        # Ids render inline: drivers cap the number of bound arguments per statement
        ids = bindparam("order_ids", order_ids, type_=Integer, expanding=True, literal_execute=True)
        return and_(Order.merchant_id == self.merchant_id, Order.order_id.in_(ids))

    async def resolve_order_ids(self, order_filter: OrderFilter) -> List[int]:
        query = (
            select(Order.order_id)
            .select_from(order_source())
            .where(order_filter.clause)
            .distinct()
            .order_by(Order.order_id)
        )
        rows = await self.runner.run("order_ids", query)
        return [row["order_id"] for row in rows]

    # --- Queries -----------------------------------------------------------

    def header_query(self, scope):
        source = (
            order_source()
            .outerjoin(Customer.__table__, Customer.customer_id == Order.customer_id)
            .outerjoin(
                User.__table__,
                and_(User.user_id == Order.responsible, User.merchant_id == Order.merchant_id),
            )
        )
        return (
            select(
                Order.order_id, Order.order_num, Order.order_type, Order.state, Order.scheduled,
                Order.brand, Order.brand_status, Order.brand_order_id, Order.brand_order_num,
                Order.estimated_ready, Order.means_of_payement, Order.price, Order.tva.label("tva"),
                Order.ht.label("ht"), Order.monnaie, Order.cutlery_notes,
                Order.is_paid.label("is_paid"), Order.is_distributed.label("is_distributed"),
                Order.date_call.label("date_call"), Order.is_delivery.label("is_delivery"),
                Order.merchant_approval, Order.delivery_fees, Order.last_update, Order.fulfillment_type,
                Order.use_customer_temporary_address, Order.creation_date, Order.places_settings,
                Order.pager_number, Order.responsible,
                Customer.customer_id, Customer.customer_name, Customer.customer_tel,
                Customer.customer_temporary_phone, Customer.customer_temporary_phone_code,
                Customer.customer_nb_orders, Customer.customer_zone_code, Customer.customer_additional_info,
                Customer.customer_address, Customer.customer_lat, Customer.customer_lng,
                Customer.customer_floor_number, Customer.customer_door_number,
                Customer.customer_additional_address,
                Customer.customer_temporary_address, Customer.customer_temporary_lat,
                Customer.customer_temporary_lng, Customer.customer_temporary_floor_number,
                Customer.customer_temporary_door_number, Customer.customer_temporary_additional_address,
                User.user_id.label("responsible_user_id"), User.lat.label("responsible_lat"),
                User.lng.label("responsible_lng"), User.tel.label("responsible_tel"),
                User.user_name.label("responsible_name"),
                active_session.c.delivery_session_id, active_session.c.priority,
            )
            .select_from(source)
            .where(scope)
            .order_by(Order.creation_date, Order.order_id)
        )

    def products_query(self, scope):
        tva_in = TvaCategory.__table__.alias("tva_in")
        tva_delivery = TvaCategory.__table__.alias("tva_delivery")
        tva_take_away = TvaCategory.__table__.alias("tva_take_away")
        source = (
            item_source()
            .join(
                Product.__table__,
                and_(Product.product_id == OrderItem.product_id, Product.merchant_id == OrderItem.merchant_id),
            )
            .outerjoin(
                ProductCategory.__table__,
                and_(
                    ProductCategory.merchant_categ_id == Product.category,
                    ProductCategory.merchant_id == OrderItem.merchant_id,
                ),
            )
            .outerjoin(tva_in, tva_in.c.tva_id == Product.tva_in_id)
            .outerjoin(tva_delivery, tva_delivery.c.tva_id == Product.tva_delivery_id)
            .outerjoin(tva_take_away, tva_take_away.c.tva_id == Product.tva_take_away_id)
            .outerjoin(Discount.__table__, Discount.discount_id == OrderItem.discount_id)
        )
        return (
            select(
                Order.order_id, OrderItem.order_item_id, OrderItem.ordered_on, OrderItem.product_id,
                OrderItem.production_status, OrderItem.production_status_done_quantity,
                OrderItem.quantity, OrderItem.paid_quantity, OrderItem.distributed_quantity,
                OrderItem.ready_for_distribution_quantity,
                OrderItem.is_paid.label("is_paid"), OrderItem.is_distributed.label("is_distributed"),
                OrderItem.price, OrderItem.discount_id, OrderItem.delay_id,
                Discount.discount_name,
                Product.name, Product.product_desc, Product.image_url, Product.production_color,
                Product.price_take_away, Product.price_delivery,
                Product.available_in, Product.available_take_away, Product.available_delivery,
                ProductCategory.categ_name,
                tva_in.c.tva_rate.label("tva_rate_in"),
                tva_delivery.c.tva_rate.label("tva_rate_delivery"),
                tva_take_away.c.tva_rate.label("tva_rate_take_away"),
            )
            .select_from(source)
            .where(OrderItem.quantity > 0, scope)
            .order_by(Order.order_id, OrderItem.order_item_id)
        )

    def components_query(self, scope):
        # Only recipes of products that appear on the filtered items
        item_products = select(OrderItem.product_id).select_from(item_source()).where(scope)
        source = (
            Component.__table__
            .join(Require.__table__, and_(Require.component_id == Component.component_id, Require.enabled == True))
            .join(Recipe.__table__, Recipe.recipe_id == Require.recipe_id)
            .outerjoin(
                UnitOfMeasureDesc.__table__,
                and_(UnitOfMeasureDesc.id == Require.unit_of_measure, UnitOfMeasureDesc.lang == UOM_LANG),
            )
        )
        return (
            select(
                Recipe.product_id, Component.component_id, Component.name,
                Component.component_price.label("price"), Component.status,
                Require.quantity, UnitOfMeasureDesc.uom_desc,
            )
            .select_from(source)
            .where(
                Component.merchant_id == self.merchant_id,
                Component.available == 1,
                Recipe.product_id.in_(item_products),
            )
            .order_by(Recipe.product_id, Require.id)
        )

    def extras_query(self, scope):
        source = (
            item_source()
            .join(Extra.__table__, Extra.order_item_id == OrderItem.order_item_id)
            .join(
                Component.__table__,
                and_(Component.component_id == Extra.component_id, Component.merchant_id == Order.merchant_id),
            )
        )
        return (
            select(
                Extra.id, Extra.order_item_id, Extra.order_id, Extra.product_id,
                Extra.component_id, Component.name, Extra.price,
            )
            .select_from(source)
            .where(scope)
            .order_by(Extra.order_item_id, Extra.id)
        )

    def withouts_query(self, scope):
        source = (
            item_source()
            .join(Without.__table__, Without.order_item_id == OrderItem.order_item_id)
            .join(
                Component.__table__,
                and_(Component.component_id == Without.component_id, Component.merchant_id == Order.merchant_id),
            )
        )
        return (
            select(
                Without.id, Without.order_item_id, Without.order_id, Without.product_id,
                Without.component_id, Component.name,
            )
            .select_from(source)
            .where(scope)
            .order_by(Without.order_item_id, Without.id)
        )

    def payments_query(self, scope):
        source = order_source().join(Payment.__table__, Payment.order_id == Order.order_id)
        return (
            select(
                Payment.order_id, Payment.payment_id, Payment.mop, Payment.amount,
                Payment.payment_date, Payment.enabled,
            )
            .select_from(source)
            .where(scope)
            .order_by(Payment.order_id, Payment.payment_id)
        )

    def clients_query(self, scope):
        source = (
            item_source()
            .join(SessionOrderItem.__table__, SessionOrderItem.order_item_id == OrderItem.order_item_id)
            .join(ScanNOrderSession.__table__, ScanNOrderSession.user_code == SessionOrderItem.user_code)
        )
        return (
            select(
                OrderItem.order_item_id, ScanNOrderSession.user_code, ScanNOrderSession.user_name,
                SessionOrderItem.quantity,
            )
            .select_from(source)
            .where(scope)
            .distinct()
            .order_by(OrderItem.order_item_id, ScanNOrderSession.user_code)
        )

    def comments_query(self, scope):
        # Order-level (order_item_id NULL) and item-level comments in one pass
        source = (
            order_source()
            .join(OrderComment.__table__, OrderComment.order_id == Order.order_id)
            .outerjoin(User.__table__, User.user_id == OrderComment.user_id)
        )
        return (
            select(
                OrderComment.id, OrderComment.order_id, OrderComment.order_item_id, OrderComment.user_id,
                OrderComment.content, OrderComment.creation_date, User.user_name.label("user_name"),
            )
            .select_from(source)
            .where(scope)
            .order_by(OrderComment.order_id, OrderComment.id)
        )

    def locations_query(self, scope):
        source = (
            order_source()
            .join(OrderLocation.__table__, OrderLocation.order_id == Order.order_id)
            .join(
                Location.__table__,
                and_(Location.location_id == OrderLocation.location_id, Location.merchant_id == Order.merchant_id),
            )
        )
        return (
            select(OrderLocation.order_id, Location.location_id, Location.location_name, Location.location_desc)
            .select_from(source)
            .where(scope)
            .order_by(OrderLocation.order_id, OrderLocation.id)
        )

    def attributes_query(self, scope):
        source = (
            item_source()
            .join(
                ProductConfigurableAttribute.__table__,
                ProductConfigurableAttribute.product_id == OrderItem.product_id,
            )
            .join(
                ConfigurableAttribute.__table__,
                ConfigurableAttribute.id == ProductConfigurableAttribute.configurable_attribute_id,
            )
        )
        return (
            select(
                OrderItem.order_item_id, ConfigurableAttribute.id, ConfigurableAttribute.title,
                ConfigurableAttribute.max_options, ConfigurableAttribute.attribute_type,
            )
            .select_from(source)
            .where(scope)
            .order_by(OrderItem.order_item_id, ProductConfigurableAttribute.num_order, ConfigurableAttribute.id)
        )

    def options_query(self, scope):
        source = (
            item_source()
            .join(
                ProductConfigurableAttribute.__table__,
                ProductConfigurableAttribute.product_id == OrderItem.product_id,
            )
            .join(
                ConfigurableAttributeOption.__table__,
                ConfigurableAttributeOption.configurable_attribute_id
                == ProductConfigurableAttribute.configurable_attribute_id,
            )
            .outerjoin(
                OrderItemConfiguration.__table__,
                and_(
                    OrderItemConfiguration.order_item_id == OrderItem.order_item_id,
                    OrderItemConfiguration.configuration_attribute_option_id == ConfigurableAttributeOption.id,
                ),
            )
        )
        return (
            select(
                OrderItem.order_item_id,
                ConfigurableAttributeOption.configurable_attribute_id,
                ConfigurableAttributeOption.id,
                ConfigurableAttributeOption.title,
                ConfigurableAttributeOption.extra_price,
                ConfigurableAttributeOption.max_quantity,
                case((OrderItemConfiguration.id.is_(None), 0), else_=1).label("selected"),
                func.coalesce(OrderItemConfiguration.quantity, 0).label("quantity"),
            )
            .select_from(source)
            .where(scope)
            .order_by(
                OrderItem.order_item_id,
                ConfigurableAttributeOption.configurable_attribute_id,
                ConfigurableAttributeOption.id,
            )
        )
