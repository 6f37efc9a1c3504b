from sqlalchemy import Column, Integer, String, Float, ForeignKey
from app.db.base import Base

class ConfigurableAttribute(Base):
    """A named choice group (sauce, cooking, size ...)."""
    __tablename__ = 'configurable_attributes'

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    attribute_type = Column(String(30))
    min_options = Column(Integer, default=0)
    max_options = Column(Integer, default=1)
    enabled = Column(Integer, default=1)


class ConfigurableAttributeOption(Base):
    __tablename__ = 'configurable_attribute_options'

    id = Column(Integer, primary_key=True, autoincrement=True)
    configurable_attribute_id = Column(
        Integer, ForeignKey('configurable_attributes.id'), nullable=False, index=True
    )
    title = Column(String(200), nullable=False)
    extra_price = Column(Float, default=0)
    max_quantity = Column(Integer, default=1)
    enabled = Column(Integer, default=1)


class ProductConfigurableAttribute(Base):
    __tablename__ = 'product_configurable_attribute'

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey('products.product_id'), nullable=False, index=True)
    configurable_attribute_id = Column(
        Integer, ForeignKey('configurable_attributes.id'), nullable=False
    )
    num_order = Column(Integer, default=0)
    enabled = Column(Integer, default=1)
