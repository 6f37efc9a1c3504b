from sqlalchemy import Column, Integer, String, Boolean, Float, ForeignKey
from app.db.base import Base

class ComponentCategory(Base):
    __tablename__ = 'component_category'

    merchant_categ_id = Column(Integer, primary_key=True, autoincrement=True)
    merchant_id = Column(String(64), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    categ_order = Column(Integer, default=0)
    available = Column(Integer, default=1)


class Component(Base):
    """Ingredient or add-on usable in recipes, extras and withouts."""
    __tablename__ = 'components'

    component_id = Column(Integer, primary_key=True, autoincrement=True)
    merchant_id = Column(String(64), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey('component_category.merchant_categ_id'))
    name = Column(String(200), nullable=False)
    component_price = Column(Float, default=0)
    status = Column(Integer, default=1)
    available = Column(Integer, default=1)


class Recipe(Base):
    __tablename__ = 'recipes'

    recipe_id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey('products.product_id'), nullable=False, index=True)


class UnitOfMeasureDesc(Base):
    __tablename__ = 'unit_of_measure_desc'

    id = Column(Integer, primary_key=True)
    lang = Column(String(5), primary_key=True)
    uom_desc = Column(String(50))


class Require(Base):
    """One component line of a recipe."""
    __tablename__ = 'requires'

    id = Column(Integer, primary_key=True, autoincrement=True)
    recipe_id = Column(Integer, ForeignKey('recipes.recipe_id'), nullable=False, index=True)
    component_id = Column(Integer, ForeignKey('components.component_id'), nullable=False)
    quantity = Column(Float, default=0)
    unit_of_measure = Column(Integer)
    enabled = Column(Boolean, default=True)
