from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, Float, ForeignKey
from app.db.base import Base

class Order(Base):
    __tablename__ = 'orders'

    order_id = Column(Integer, primary_key=True, autoincrement=True)
    merchant_id = Column(String(64), nullable=False, index=True)
    order_num = Column(String(50))

    # Order details
    order_type = Column(String(30))  # ON_SITE, TAKE_AWAY, DELIVERY
    state = Column(String(30), index=True)  # OPEN, CLOSED, CANCELLED ...
    scheduled = Column(Boolean, default=False)
    fulfillment_type = Column(String(50))  # DELIVERY_BY_RESTAURANT, DELIVERY_BY_PLATFORM ...
    places_settings = Column(Integer)
    pager_number = Column(String(20))
    cutlery_notes = Column(Text)

    # Brand / marketplace metadata
    brand = Column(String(50))
    brand_status = Column(String(50))
    brand_order_id = Column(String(100))
    brand_order_num = Column(String(100))

    # Pricing
    price = Column(Float, default=0)  # TTC
    tva = Column("TVA", Float)
    ht = Column("HT", Float)
    means_of_payement = Column(String(50))
    monnaie = Column(String(20))
    delivery_fees = Column(Float)

    # Flags
    is_paid = Column("isPaid", Boolean, default=False)
    is_distributed = Column("isDistributed", Boolean, default=False)
    is_delivery = Column("isDelivery", Integer, default=0)
    merchant_approval = Column(String(10))

    # Scheduling
    date_call = Column("dateCall", String(30))
    estimated_ready = Column(String(30))
    creation_date = Column(DateTime, index=True)
    last_update = Column(DateTime)

    # People
    customer_id = Column(Integer, ForeignKey('customer.customer_id'), nullable=True)
    use_customer_temporary_address = Column(Integer, default=0)
    responsible = Column(Integer, nullable=True)  # user id, 0 = nobody, -1 = scan-and-order


class Customer(Base):
    __tablename__ = 'customer'

    customer_id = Column(Integer, primary_key=True, autoincrement=True)
    customer_name = Column(String(200))
    customer_tel = Column(String(30))
    customer_temporary_phone = Column(String(30))
    customer_temporary_phone_code = Column(String(10))
    customer_nb_orders = Column(Integer, default=0)
    customer_zone_code = Column(String(30))
    customer_additional_info = Column(Text)

    # Permanent address
    customer_address = Column(String(500))
    customer_lat = Column(Float)
    customer_lng = Column(Float)
    customer_floor_number = Column(String(20))
    customer_door_number = Column(String(20))
    customer_additional_address = Column(String(500))

    # Temporary address (used when the order says so)
    customer_temporary_address = Column(String(500))
    customer_temporary_lat = Column(Float)
    customer_temporary_lng = Column(Float)
    customer_temporary_floor_number = Column(String(20))
    customer_temporary_door_number = Column(String(20))
    customer_temporary_additional_address = Column(String(500))
