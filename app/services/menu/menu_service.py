import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Union

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.menu.component import Component, ComponentCategory as ComponentCategoryModel, Recipe, Require, UnitOfMeasureDesc
from app.models.menu.configurable_attribute import (
    ConfigurableAttribute, ConfigurableAttributeOption, ProductConfigurableAttribute
)
from app.models.menu.merchant_parameters import Delay, MerchantParameters
from app.models.menu.product import Product, ProductCategory as ProductCategoryModel, TvaCategory
from app.schemas.menu.menu_schema import (
    ComponentBasic, ComponentCategory, DelayEntry, MenuConfigurableAttribute,
    MenuConfigurableOption, MenuConfiguration, MenuNoUpdateResponse, MenuProduct,
    MenuResponse, ProductCategory,
)
from app.services.common.read_snapshot import BatchRunner, CancellationProbe, read_snapshot
from app.services.orders.order_assembler import build_component
from app.utils.row_helpers import as_float, as_int, format_version, group_rows, parse_version

logger = logging.getLogger(__name__)

UOM_LANG = "FR"


def is_current_version(client_version: Optional[str], stored: Optional[datetime]) -> bool:
    """True when the client already holds the stored catalog version (second resolution)."""
    parsed = parse_version(client_version)
    if parsed is None or stored is None:
        return False
    return format_version(parsed) == format_version(stored)


def build_product(row: Mapping[str, Any]) -> MenuProduct:
    return MenuProduct(
        product_id=row["product_id"],
        by_product_of=row["by_product_of"],
        name=row["name"],
        category=row["category"],
        description=row["product_desc"],
        price=as_float(row["price"]),
        price_take_away=as_float(row["price_take_away"]),
        price_delivery=as_float(row["price_delivery"]),
        tva_rate_in=row["tva_rate_in"],
        tva_rate_delivery=row["tva_rate_delivery"],
        tva_rate_take_away=row["tva_rate_take_away"],
        bg_color=row["bg_color"],
        is_product_group=bool(row["is_product_group"]),
        status=as_int(row["status"]),
        is_available_on_sno=bool(row["is_available_on_sno"]),
        is_popular=bool(row["is_popular"]),
        image_url=row["image_url"],
        has_image=bool(row["img"]),
        available_in=bool(row["available_in"]),
        available_take_away=bool(row["available_take_away"]),
        available_delivery=bool(row["available_delivery"]),
    )


def build_attribute_templates(rows) -> Dict[int, List[MenuConfigurableAttribute]]:
    """One template per (product, attribute); options come from the LEFT JOIN rows."""
    templates: Dict[int, List[MenuConfigurableAttribute]] = {}
    seen: Dict[tuple, MenuConfigurableAttribute] = {}
    for row in rows:
        key = (row["product_id"], row["attribute_id"])
        attribute = seen.get(key)
        if attribute is None:
            attribute = MenuConfigurableAttribute(
                id=row["attribute_id"],
                product_id=row["product_id"],
                title=row["attribute_title"],
                min_options=as_int(row["min_options"]),
                max_options=as_int(row["max_options"]),
                attribute_type=row["attribute_type"],
            )
            seen[key] = attribute
            templates.setdefault(row["product_id"], []).append(attribute)
        if row["option_id"] is not None:
            attribute.options.append(
                MenuConfigurableOption(
                    id=row["option_id"],
                    configurable_attribute_id=row["attribute_id"],
                    title=row["option_title"],
                    extra_price=as_float(row["extra_price"]),
                    max_quantity=as_int(row["max_quantity"]),
                )
            )
    return templates


def attach_sub_products(products: List[MenuProduct]) -> List[MenuProduct]:
    """
    Second pass: hang every sub-product under its root parent and return the
    roots. A sub-product may only hang under a root; anything else (a parent
    that is itself a sub-product, a self reference, a loop) is dropped.
    """
    roots: Dict[int, MenuProduct] = {p.product_id: p for p in products if p.by_product_of is None}
    by_id: Dict[int, MenuProduct] = {p.product_id: p for p in products}

    for product in products:
        if product.by_product_of is None:
            continue
        parent = roots.get(product.by_product_of)
        if parent is not None:
            parent.sub_products.append(product)
        elif product.by_product_of in by_id:
            logger.warning(
                f"Sub-product {product.product_id} dropped: parent {product.by_product_of} is not a root product"
            )
        else:
            logger.debug(f"Sub-product {product.product_id} dropped: parent {product.by_product_of} not available")

    return list(roots.values())


class MenuService:
    """Catalog aggregate for one merchant, with a version short-circuit."""

    def __init__(self, db: AsyncSession, is_cancelled: Optional[CancellationProbe] = None):
        self.db = db
        self.is_cancelled = is_cancelled
        self.executed_steps: List[str] = []

    async def get_menu(self, merchant_id: str,
                       last_menu_update: Optional[str] = None) -> Union[MenuResponse, MenuNoUpdateResponse]:
        async with read_snapshot(self.db, self.is_cancelled) as runner:
            self.executed_steps = runner.steps

            version_rows = await runner.run("version", self.version_query(merchant_id))
            stored = version_rows[0]["last_menu_update"] if version_rows else None

            if is_current_version(last_menu_update, stored):
                logger.info(f"Menu of merchant {merchant_id} unchanged since {format_version(stored)}")
                return MenuNoUpdateResponse()

            if last_menu_update and parse_version(last_menu_update) is None:
                logger.debug(f"Ignoring unparseable last_menu_update '{last_menu_update}'")

            return await self._build_menu(runner, merchant_id, stored)

    async def _build_menu(self, runner: BatchRunner, merchant_id: str, stored: Optional[datetime]) -> MenuResponse:
        categories = await runner.run("categories", self.categories_query(merchant_id))
        product_rows = await runner.run("products", self.products_query(merchant_id))
        component_rows = await runner.run("components", self.components_query(merchant_id))
        attribute_rows = await runner.run("configurable_attributes", self.attributes_query(merchant_id))
        delay_rows = await runner.run("delays", self.delays_query())
        component_categories = await runner.run("component_categories", self.component_categories_query(merchant_id))
        all_components = await runner.run("all_components", self.all_components_query(merchant_id))

        components = group_rows(component_rows, "product_id")
        templates = build_attribute_templates(attribute_rows)

        products = []
        for row in product_rows:
            product = build_product(row)
            product.components = [build_component(c) for c in components.get(product.product_id, [])]
            product.configuration = MenuConfiguration(attributes=templates.get(product.product_id, []))
            products.append(product)

        roots_by_category = group_rows(
            [{"category": p.category, "product": p} for p in attach_sub_products(products)], "category"
        )
        products_types = [
            ProductCategory(
                category=c["categ_name"],
                category_id=c["merchant_categ_id"],
                order=as_int(c["categ_order"]),
                bg_color=c["bg_color"],
                products=[entry["product"] for entry in roots_by_category.get(c["merchant_categ_id"], [])],
            )
            for c in categories
        ]

        components_by_category = group_rows(all_components, "category_id")
        components_types = [
            ComponentCategory(
                category=c["name"],
                order=as_int(c["categ_order"]),
                components=[
                    ComponentBasic(
                        component_id=comp["component_id"],
                        name=comp["name"],
                        category=comp["category_id"],
                        price=as_float(comp["component_price"]),
                        status=as_int(comp["status"]),
                    )
                    for comp in components_by_category.get(c["merchant_categ_id"], [])
                ],
            )
            for c in component_categories
        ]

        delays = [
            DelayEntry(delay_id=d["id"], short_description=d["short_description"], duration=as_int(d["duration"]))
            for d in delay_rows
        ]

        logger.info(
            f"Menu of merchant {merchant_id}: {len(products_types)} categories, "
            f"{len(product_rows)} products, {len(components_types)} component categories"
        )
        return MenuResponse(
            last_menu_update=format_version(stored),
            products_types=products_types,
            components_types=components_types,
            delays=delays,
        )

    # --- Queries -----------------------------------------------------------

    def version_query(self, merchant_id: str):
        return (
            select(MerchantParameters.last_menu_update)
            .where(MerchantParameters.merchant_id == merchant_id)
            .limit(1)
        )

    def categories_query(self, merchant_id: str):
        return (
            select(
                ProductCategoryModel.merchant_categ_id, ProductCategoryModel.categ_name,
                ProductCategoryModel.categ_order, ProductCategoryModel.bg_color,
            )
            .where(
                and_(
                    ProductCategoryModel.merchant_id == merchant_id,
                    ProductCategoryModel.available == 1,
                    ProductCategoryModel.enabled == 1,
                )
            )
            .order_by(ProductCategoryModel.categ_order, ProductCategoryModel.merchant_categ_id)
        )

    def products_query(self, merchant_id: str):
        tva_in = TvaCategory.__table__.alias("tva_in")
        tva_delivery = TvaCategory.__table__.alias("tva_delivery")
        tva_take_away = TvaCategory.__table__.alias("tva_take_away")
        source = (
            Product.__table__
            .outerjoin(tva_in, tva_in.c.tva_id == Product.tva_in_id)
            .outerjoin(tva_delivery, tva_delivery.c.tva_id == Product.tva_delivery_id)
            .outerjoin(tva_take_away, tva_take_away.c.tva_id == Product.tva_take_away_id)
        )
        return (
            select(
                Product.product_id, Product.by_product_of, Product.name, Product.category,
                Product.price, Product.price_take_away, Product.price_delivery, Product.product_desc,
                tva_in.c.tva_rate.label("tva_rate_in"),
                tva_delivery.c.tva_rate.label("tva_rate_delivery"),
                tva_take_away.c.tva_rate.label("tva_rate_take_away"),
                Product.bg_color, Product.is_product_group, Product.status, Product.is_available_on_sno,
                Product.is_popular, Product.image_url, Product.img,
                Product.available_in, Product.available_take_away, Product.available_delivery,
            )
            .select_from(source)
            .where(and_(Product.merchant_id == merchant_id, Product.available == 1, Product.enabled == 1))
            # Roots first, then by category and name
            .order_by(Product.by_product_of.is_not(None), Product.category, Product.name, Product.product_id)
        )

    def components_query(self, merchant_id: str):
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
            .where(and_(Component.merchant_id == merchant_id, Component.available == 1))
            .order_by(Recipe.product_id, Require.id)
        )

    def attributes_query(self, merchant_id: str):
        source = (
            ProductConfigurableAttribute.__table__
            .join(
                ConfigurableAttribute.__table__,
                ConfigurableAttribute.id == ProductConfigurableAttribute.configurable_attribute_id,
            )
            .join(Product.__table__, Product.product_id == ProductConfigurableAttribute.product_id)
            .outerjoin(
                ConfigurableAttributeOption.__table__,
                and_(
                    ConfigurableAttributeOption.configurable_attribute_id == ConfigurableAttribute.id,
                    ConfigurableAttributeOption.enabled == 1,
                ),
            )
        )
        return (
            select(
                ProductConfigurableAttribute.product_id,
                ConfigurableAttribute.id.label("attribute_id"),
                ConfigurableAttribute.title.label("attribute_title"),
                ConfigurableAttribute.min_options, ConfigurableAttribute.max_options,
                ConfigurableAttribute.attribute_type,
                ConfigurableAttributeOption.id.label("option_id"),
                ConfigurableAttributeOption.title.label("option_title"),
                ConfigurableAttributeOption.extra_price, ConfigurableAttributeOption.max_quantity,
            )
            .select_from(source)
            .where(
                and_(
                    Product.merchant_id == merchant_id,
                    ConfigurableAttribute.enabled == 1,
                    ProductConfigurableAttribute.enabled == 1,
                )
            )
            .order_by(
                ProductConfigurableAttribute.product_id,
                ProductConfigurableAttribute.num_order,
                ConfigurableAttribute.id,
                ConfigurableAttributeOption.id,
            )
        )

    def delays_query(self):
        return (
            select(Delay.id, Delay.short_description, Delay.duration)
            .where(Delay.enabled == True)
            .order_by(Delay.duration, Delay.id)
        )

    def component_categories_query(self, merchant_id: str):
        return (
            select(
                ComponentCategoryModel.merchant_categ_id, ComponentCategoryModel.name,
                ComponentCategoryModel.categ_order,
            )
            .where(and_(ComponentCategoryModel.merchant_id == merchant_id, ComponentCategoryModel.available == 1))
            .order_by(ComponentCategoryModel.categ_order, ComponentCategoryModel.merchant_categ_id)
        )

    def all_components_query(self, merchant_id: str):
        return (
            select(
                Component.component_id, Component.name, Component.category_id,
                Component.status, Component.component_price,
            )
            .where(Component.merchant_id == merchant_id)
            .order_by(Component.component_id)
        )
