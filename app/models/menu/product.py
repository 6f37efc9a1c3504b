from sqlalchemy import Column, Integer, String, Boolean, Text, Float, ForeignKey
from app.db.base import Base

class ProductCategory(Base):
    __tablename__ = 'productcateg'

    merchant_categ_id = Column(Integer, primary_key=True, autoincrement=True)
    merchant_id = Column(String(64), nullable=False, index=True)
    categ_name = Column(String(100), nullable=False)
    categ_order = Column(Integer, default=0)
    bg_color = Column(String(20))
    available = Column(Integer, default=1)
    enabled = Column(Integer, default=1)


class TvaCategory(Base):
    __tablename__ = 'tva_categories'

    tva_id = Column(Integer, primary_key=True, autoincrement=True)
    tva_rate = Column(Float, nullable=False)


class Discount(Base):
    __tablename__ = 'discounts'

    discount_id = Column(Integer, primary_key=True, autoincrement=True)
    discount_name = Column(String(100))


class Product(Base):
    __tablename__ = 'products'

    product_id = Column(Integer, primary_key=True, autoincrement=True)
    merchant_id = Column(String(64), nullable=False, index=True)
    # Parent product when this row is a sub-product (size, variant ...)
    by_product_of = Column(Integer, ForeignKey('products.product_id'), nullable=True)
    category = Column(Integer, ForeignKey('productcateg.merchant_categ_id'))

    name = Column(String(200), nullable=False)
    product_desc = Column(Text)
    image_url = Column(String(500))
    img = Column(String(500))
    bg_color = Column(String(20))
    production_color = Column(String(20))

    # Pricing per consumption mode
    price = Column(Float, default=0)
    price_take_away = Column(Float, default=0)
    price_delivery = Column(Float, default=0)
    tva_in_id = Column(Integer, ForeignKey('tva_categories.tva_id'), nullable=False)
    tva_delivery_id = Column(Integer, ForeignKey('tva_categories.tva_id'), nullable=False)
    tva_take_away_id = Column(Integer, ForeignKey('tva_categories.tva_id'), nullable=False)

    # Availability
    available_in = Column(Boolean, default=True)
    available_take_away = Column(Boolean, default=True)
    available_delivery = Column(Boolean, default=True)
    is_product_group = Column(Boolean, default=False)
    is_available_on_sno = Column(Boolean, default=False)
    is_popular = Column(Boolean, default=False)
    status = Column(Integer, default=1)
    available = Column(Integer, default=1)
    enabled = Column(Integer, default=1)
