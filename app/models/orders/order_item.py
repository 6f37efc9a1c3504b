from sqlalchemy import Column, Integer, String, DateTime, Boolean, Float, ForeignKey
from app.db.base import Base

class OrderItem(Base):
    __tablename__ = 'orderitems'

    order_item_id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey('orders.order_id'), nullable=False, index=True)
    merchant_id = Column(String(64), nullable=False)
    product_id = Column(Integer, ForeignKey('products.product_id'), nullable=False)

    # Quantities
    quantity = Column(Integer, default=1)
    paid_quantity = Column(Integer, default=0)
    distributed_quantity = Column(Integer, default=0)
    ready_for_distribution_quantity = Column(Integer, default=0)

    # Pricing
    price = Column(Float, default=0)
    discount_id = Column(Integer, ForeignKey('discounts.discount_id'), nullable=True)

    # Production
    is_paid = Column("isPaid", Boolean, default=False)
    is_distributed = Column("isDistributed", Boolean, default=False)
    production_status = Column(String(30))
    production_status_done_quantity = Column(Integer, default=0)
    delay_id = Column(Integer, nullable=True)
    ordered_on = Column(DateTime)


class Extra(Base):
    __tablename__ = 'extra'

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_item_id = Column(Integer, ForeignKey('orderitems.order_item_id'), nullable=False, index=True)
    order_id = Column(Integer, nullable=False)
    product_id = Column(Integer, nullable=False)
    component_id = Column(Integer, ForeignKey('components.component_id'), nullable=False)
    price = Column(Float, default=0)


class Without(Base):
    __tablename__ = 'without'

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_item_id = Column(Integer, ForeignKey('orderitems.order_item_id'), nullable=False, index=True)
    order_id = Column(Integer, nullable=False)
    product_id = Column(Integer, nullable=False)
    component_id = Column(Integer, ForeignKey('components.component_id'), nullable=False)


class OrderItemConfiguration(Base):
    """Customer pick of one configurable option on one order item."""
    __tablename__ = 'order_item_configuration'

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_item_id = Column(Integer, ForeignKey('orderitems.order_item_id'), nullable=False, index=True)
    configuration_attribute_option_id = Column(
        Integer, ForeignKey('configurable_attribute_options.id'), nullable=False
    )
    quantity = Column(Integer, default=1)


class ScanNOrderSession(Base):
    __tablename__ = 'scannorder_session'

    user_code = Column(String(64), primary_key=True)
    user_name = Column(String(200))


class SessionOrderItem(Base):
    """Share of an order item attributed to one scan-and-order guest."""
    __tablename__ = 'session_orderitem'

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_item_id = Column(Integer, ForeignKey('orderitems.order_item_id'), nullable=False, index=True)
    user_code = Column(String(64), ForeignKey('scannorder_session.user_code'), nullable=False)
    quantity = Column(Integer, default=1)
