from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import date, datetime

# Field names follow the JSON the reception, waiter and delivery apps already parse.

class Extra(BaseModel):
    id: int
    order_item_id: int
    order_id: int
    product_id: int
    component_id: int
    name: Optional[str] = None
    price: float = 0

class Without(BaseModel):
    id: int
    order_item_id: int
    order_id: int
    product_id: int
    component_id: int
    name: Optional[str] = None

class ComponentUsage(BaseModel):
    component_id: int
    product_id: int
    name: Optional[str] = None
    price: float = 0
    quantity: float = 0
    unit_of_measure: Optional[str] = None
    status: int = 0

class ConfigurableOption(BaseModel):
    id: int
    configurable_attribute_id: int
    order_item_id: int
    title: Optional[str] = None
    extra_price: float = 0
    quantity: int = 0
    max_quantity: int = 0
    selected: int = 0

class ConfigurableAttribute(BaseModel):
    id: int
    order_item_id: int
    attribute_type: Optional[str] = None
    title: Optional[str] = None
    max_options: int = 0
    options: List[ConfigurableOption] = Field(default_factory=list)

class ItemConfiguration(BaseModel):
    attributes: List[ConfigurableAttribute] = Field(default_factory=list)

class SnoClient(BaseModel):
    """Scan-and-order guest sharing an order item."""
    user_code: str
    user_name: Optional[str] = None
    quantity: int = 0

class OrderComment(BaseModel):
    order_id: Optional[int] = None
    user_name: Optional[str] = None
    content: str = ""
    creation_date: Optional[datetime] = None

class Payment(BaseModel):
    order_id: int
    payment_id: int
    mop: Optional[str] = None
    amount: float = 0
    payment_date: Optional[datetime] = None
    enabled: int = 1

    class Config:
        from_attributes = True

class Location(BaseModel):
    order_id: int
    location_id: int
    location_name: str
    location_desc: Optional[str] = None

class Responsible(BaseModel):
    id: int
    lat: Optional[float] = None
    lng: Optional[float] = None
    tel: Optional[str] = None
    name: Optional[str] = None

class Customer(BaseModel):
    customer_id: int
    customer_name: Optional[str] = None
    customer_tel: Optional[str] = None
    customer_temporary_phone: Optional[str] = None
    customer_temporary_phone_code: Optional[str] = None
    customer_nb_orders: int = 0
    customer_additional_info: Optional[str] = None
    customer_zone_code: Optional[str] = None
    customer_address: Optional[str] = None
    customer_lat: Optional[float] = None
    customer_lng: Optional[float] = None
    customer_floor_number: Optional[str] = None
    customer_door_number: Optional[str] = None
    customer_additional_address: Optional[str] = None

class OrderItem(BaseModel):
    order_id: int
    order_item_id: int
    ordered_on: Optional[datetime] = None
    product_id: int
    production_status: Optional[str] = None
    production_status_done_quantity: int = 0
    name: str = ""
    image_url: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    quantity: int = 0
    paid_quantity: int = 0
    distributed_quantity: int = 0
    ready_for_distribution_quantity: int = 0
    isPaid: int = 0
    isDistributed: int = 0
    price: float = 0
    price_take_away: float = 0
    price_delivery: float = 0
    discount_id: Optional[int] = None
    discount_name: Optional[str] = None
    discounted_price: Optional[float] = None
    tva_rate_in: float = 0
    tva_rate_delivery: float = 0
    tva_rate_take_away: float = 0
    available_in: int = 0
    available_take_away: int = 0
    available_delivery: int = 0
    production_color: Optional[str] = None
    extra: List[Extra] = Field(default_factory=list)
    without: List[Without] = Field(default_factory=list)
    components: List[ComponentUsage] = Field(default_factory=list)
    customers: List[SnoClient] = Field(default_factory=list)
    comment: OrderComment = Field(default_factory=OrderComment)
    configuration: ItemConfiguration = Field(default_factory=ItemConfiguration)

class Order(BaseModel):
    order_id: int
    order_num: Optional[str] = None
    brand: Optional[str] = None
    brand_order_id: Optional[str] = None
    brand_order_num: Optional[str] = None
    brand_status: Optional[str] = None
    order_type: Optional[str] = None
    cutlery_notes: Optional[str] = None
    state: Optional[str] = None
    scheduled: bool = False
    TTC: float = 0
    TVA: Optional[float] = None
    HT: Optional[float] = None
    places_settings: Optional[int] = None
    pager_number: Optional[str] = None
    isPaid: int = 0
    isDistributed: int = 0
    isSNO: bool = False
    callHour: Optional[str] = None
    estimated_ready: Optional[str] = None
    isDelivery: int = 0
    merchant_approval: Optional[str] = None
    delivery_fees: Optional[float] = None
    customer: Optional[Customer] = None
    comments: List[OrderComment] = Field(default_factory=list)
    payments: List[Payment] = Field(default_factory=list)
    responsible: Optional[Responsible] = None
    location: List[Location] = Field(default_factory=list)
    products: List[OrderItem] = Field(default_factory=list)
    delivery_session_id: Optional[int] = None
    priority: Optional[int] = None
    creation_date: Optional[datetime] = None
    fulfillment_type: Optional[str] = None
    last_update: Optional[datetime] = None

class DeliveryManInfo(BaseModel):
    user_id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_picture: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    planning_color: Optional[str] = None

class DeliverySession(BaseModel):
    delivery_session_id: int
    status: str
    orders: List[Order] = Field(default_factory=list)
    delivery_man: Optional[DeliveryManInfo] = None

# Response envelopes
class PendingOrdersResponse(BaseModel):
    orders: List[Order] = Field(default_factory=list)
    delivery_sessions: List[DeliverySession] = Field(default_factory=list)

class DeliverySessionsResponse(BaseModel):
    delivery_sessions: List[DeliverySession] = Field(default_factory=list)

class OrderHistoryRequest(BaseModel):
    date_from: date
    date_to: date

    @model_validator(mode="after")
    def check_range(self):
        if self.date_to < self.date_from:
            raise ValueError("date_to must not be before date_from")
        return self

class OrderHistoryResponse(BaseModel):
    orders: List[Order] = Field(default_factory=list)

class PaymentsResponse(BaseModel):
    order_id: int
    payments: List[Payment] = Field(default_factory=list)
