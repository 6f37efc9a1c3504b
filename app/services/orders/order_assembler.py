"""
In-memory assembly of order aggregates.

Every child row set of an `OrderRowSet` is indexed once by its correlation
key (order id, order item id, product id) and attached while walking the
headers. Children keep the order of their source query; missing children
become empty lists, never None.
"""
import logging
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from app.schemas.orders.order_schema import (
    ComponentUsage, ConfigurableAttribute, ConfigurableOption, Customer, Extra,
    ItemConfiguration, Location, Order, OrderComment, OrderItem, Payment,
    Responsible, SnoClient, Without,
)
from app.services.orders.order_batch_fetcher import OrderRowSet
from app.utils.row_helpers import as_flag, as_float, as_int, group_rows, map_groups

logger = logging.getLogger(__name__)

SNO_RESPONSIBLE_ID = -1
NO_RESPONSIBLE_ID = 0

TEMPORARY_ADDRESS_FIELDS = (
    "address", "lat", "lng", "floor_number", "door_number", "additional_address",
)


class ResponsibleKind(str, Enum):
    SNO = "sno"
    UNASSIGNED = "unassigned"
    ASSIGNED = "assigned"


def classify_responsible(value: Any) -> ResponsibleKind:
    """
    Read `orders.responsible`: -1 marks a scan-and-order order, 0 or NULL an
    order nobody took yet, any other value the user id of the assignee.
    """
    if value is None or str(value).strip() == "":
        return ResponsibleKind.UNASSIGNED
    responsible_id = int(value)
    if responsible_id == SNO_RESPONSIBLE_ID:
        return ResponsibleKind.SNO
    if responsible_id == NO_RESPONSIBLE_ID:
        return ResponsibleKind.UNASSIGNED
    return ResponsibleKind.ASSIGNED


# --- Leaf builders ---------------------------------------------------------

def build_extra(row: Mapping[str, Any]) -> Extra:
    return Extra(
        id=row["id"],
        order_item_id=row["order_item_id"],
        order_id=row["order_id"],
        product_id=row["product_id"],
        component_id=row["component_id"],
        name=row["name"],
        price=as_float(row["price"]),
    )


def build_without(row: Mapping[str, Any]) -> Without:
    return Without(
        id=row["id"],
        order_item_id=row["order_item_id"],
        order_id=row["order_id"],
        product_id=row["product_id"],
        component_id=row["component_id"],
        name=row["name"],
    )


def build_component(row: Mapping[str, Any]) -> ComponentUsage:
    return ComponentUsage(
        component_id=row["component_id"],
        product_id=row["product_id"],
        name=row["name"],
        price=as_float(row["price"]),
        quantity=as_float(row["quantity"]),
        unit_of_measure=row["uom_desc"],
        status=as_int(row["status"]),
    )


def build_option(row: Mapping[str, Any]) -> ConfigurableOption:
    return ConfigurableOption(
        id=row["id"],
        configurable_attribute_id=row["configurable_attribute_id"],
        order_item_id=row["order_item_id"],
        title=row["title"],
        extra_price=as_float(row["extra_price"]),
        quantity=as_int(row["quantity"]),
        max_quantity=as_int(row["max_quantity"]),
        selected=as_flag(row["selected"]),
    )


def build_client(row: Mapping[str, Any]) -> SnoClient:
    return SnoClient(user_code=row["user_code"], user_name=row["user_name"], quantity=as_int(row["quantity"]))


def build_comment(row: Optional[Mapping[str, Any]]) -> OrderComment:
    # Missing comment, or a comment row without content: empty placeholder
    if row is None or row["content"] is None:
        return OrderComment()
    return OrderComment(
        order_id=row["order_id"],
        user_name=row["user_name"],
        content=row["content"],
        creation_date=row["creation_date"],
    )


def build_payment(row: Mapping[str, Any]) -> Payment:
    return Payment(
        order_id=row["order_id"],
        payment_id=row["payment_id"],
        mop=row["mop"],
        amount=as_float(row["amount"]),
        payment_date=row["payment_date"],
        enabled=as_int(row["enabled"], default=1),
    )


def build_location(row: Mapping[str, Any]) -> Location:
    return Location(
        order_id=row["order_id"],
        location_id=row["location_id"],
        location_name=row["location_name"] or "",
        location_desc=row["location_desc"],
    )


def build_customer(header: Mapping[str, Any]) -> Optional[Customer]:
    if header["customer_id"] is None:
        return None

    # One flag per order picks the whole address block
    prefix = "customer_temporary_" if as_int(header["use_customer_temporary_address"]) == 1 else "customer_"
    address = {f"customer_{name}": header[f"{prefix}{name}"] for name in TEMPORARY_ADDRESS_FIELDS}

    return Customer(
        customer_id=header["customer_id"],
        customer_name=header["customer_name"],
        customer_tel=header["customer_tel"],
        customer_temporary_phone=header["customer_temporary_phone"],
        customer_temporary_phone_code=header["customer_temporary_phone_code"],
        customer_nb_orders=as_int(header["customer_nb_orders"]),
        customer_additional_info=header["customer_additional_info"],
        customer_zone_code=header["customer_zone_code"],
        **address,
    )


def build_responsible(header: Mapping[str, Any]) -> Optional[Responsible]:
    if classify_responsible(header["responsible"]) != ResponsibleKind.ASSIGNED:
        return None
    if header["responsible_user_id"] is None:
        # Assignee no longer exists for this merchant
        return None
    return Responsible(
        id=header["responsible_user_id"],
        lat=header["responsible_lat"],
        lng=header["responsible_lng"],
        tel=header["responsible_tel"],
        name=header["responsible_name"],
    )


# --- Assembly --------------------------------------------------------------

class OrderAssembler:
    """Builds `Order` trees out of one `OrderRowSet`."""

    def __init__(self, rows: OrderRowSet):
        self.rows = rows

        self.extras = map_groups(group_rows(rows.extras, "order_item_id"), build_extra)
        self.withouts = map_groups(group_rows(rows.withouts, "order_item_id"), build_without)
        self.components = map_groups(group_rows(rows.components, "product_id"), build_component)
        self.clients = map_groups(group_rows(rows.clients, "order_item_id"), build_client)
        self.payments = map_groups(group_rows(rows.payments, "order_id"), build_payment)
        self.locations = map_groups(group_rows(rows.locations, "order_id"), build_location)
        self.options = map_groups(
            group_rows(rows.options, "order_item_id", "configurable_attribute_id"), build_option
        )
        self.attributes = self._index_attributes()
        self.order_comments, self.item_comments = self._index_comments()
        self.items = self._index_items()

    def _index_attributes(self) -> Dict[int, List[ConfigurableAttribute]]:
        attributes: Dict[int, List[ConfigurableAttribute]] = {}
        for row in self.rows.attributes:
            attribute = ConfigurableAttribute(
                id=row["id"],
                order_item_id=row["order_item_id"],
                attribute_type=row["attribute_type"],
                title=row["title"],
                max_options=as_int(row["max_options"]),
                options=list(self.options.get((row["order_item_id"], row["id"]), [])),
            )
            attributes.setdefault(row["order_item_id"], []).append(attribute)
        return attributes

    def _index_comments(self):
        order_comments: Dict[int, List[OrderComment]] = {}
        item_comments: Dict[int, Mapping[str, Any]] = {}
        for row in self.rows.comments:
            if row["order_item_id"] is None:
                order_comments.setdefault(row["order_id"], []).append(build_comment(row))
            elif row["order_item_id"] not in item_comments:
                item_comments[row["order_item_id"]] = row
        return order_comments, item_comments

    def _index_items(self) -> Dict[int, List[OrderItem]]:
        items: Dict[int, List[OrderItem]] = {}
        for row in self.rows.products:
            items.setdefault(row["order_id"], []).append(self.build_item(row))
        return items

    def build_item(self, row: Mapping[str, Any]) -> OrderItem:
        order_item_id = row["order_item_id"]
        price = as_float(row["price"])
        return OrderItem(
            order_id=row["order_id"],
            order_item_id=order_item_id,
            ordered_on=row["ordered_on"],
            product_id=row["product_id"],
            production_status=row["production_status"],
            production_status_done_quantity=as_int(row["production_status_done_quantity"]),
            name=row["name"] or "",
            image_url=row["image_url"],
            category=row["categ_name"],
            description=row["product_desc"],
            quantity=as_int(row["quantity"]),
            paid_quantity=as_int(row["paid_quantity"]),
            distributed_quantity=as_int(row["distributed_quantity"]),
            ready_for_distribution_quantity=as_int(row["ready_for_distribution_quantity"]),
            isPaid=as_flag(row["is_paid"]),
            isDistributed=as_flag(row["is_distributed"]),
            price=price,
            price_take_away=as_float(row["price_take_away"]),
            price_delivery=as_float(row["price_delivery"]),
            discount_id=row["discount_id"],
            discount_name=row["discount_name"],
            discounted_price=price if row["discount_id"] is not None else None,
            tva_rate_in=as_float(row["tva_rate_in"]),
            tva_rate_delivery=as_float(row["tva_rate_delivery"]),
            tva_rate_take_away=as_float(row["tva_rate_take_away"]),
            available_in=as_flag(row["available_in"]),
            available_take_away=as_flag(row["available_take_away"]),
            available_delivery=as_flag(row["available_delivery"]),
            production_color=row["production_color"],
            extra=list(self.extras.get(order_item_id, [])),
            without=list(self.withouts.get(order_item_id, [])),
            components=list(self.components.get(row["product_id"], [])),
            customers=list(self.clients.get(order_item_id, [])),
            comment=build_comment(self.item_comments.get(order_item_id)),
            configuration=ItemConfiguration(attributes=list(self.attributes.get(order_item_id, []))),
        )

    def build_order(self, header: Mapping[str, Any]) -> Order:
        order_id = header["order_id"]
        return Order(
            order_id=order_id,
            order_num=header["order_num"],
            brand=header["brand"],
            brand_order_id=header["brand_order_id"],
            brand_order_num=header["brand_order_num"],
            brand_status=header["brand_status"],
            order_type=header["order_type"],
            cutlery_notes=header["cutlery_notes"],
            state=header["state"],
            scheduled=bool(header["scheduled"]),
            TTC=as_float(header["price"]),
            TVA=header["tva"],
            HT=header["ht"],
            places_settings=header["places_settings"],
            pager_number=header["pager_number"],
            isPaid=as_flag(header["is_paid"]),
            isDistributed=as_flag(header["is_distributed"]),
            isSNO=classify_responsible(header["responsible"]) == ResponsibleKind.SNO,
            callHour=header["date_call"],
            estimated_ready=header["estimated_ready"],
            isDelivery=as_int(header["is_delivery"]),
            merchant_approval=header["merchant_approval"],
            delivery_fees=header["delivery_fees"],
            customer=build_customer(header),
            comments=list(self.order_comments.get(order_id, [])),
            payments=list(self.payments.get(order_id, [])),
            responsible=build_responsible(header),
            location=list(self.locations.get(order_id, [])),
            products=list(self.items.get(order_id, [])),
            delivery_session_id=header["delivery_session_id"],
            priority=header["priority"],
            creation_date=header["creation_date"],
            fulfillment_type=header["fulfillment_type"],
            last_update=header["last_update"],
        )

    def assemble(self) -> List[Order]:
        return [self.build_order(header) for header in self.rows.headers]


def assemble_orders(rows: OrderRowSet) -> List[Order]:
    if rows.is_empty:
        return []
    orders = OrderAssembler(rows).assemble()
    logger.debug(f"Assembled {len(orders)} orders")
    return orders
