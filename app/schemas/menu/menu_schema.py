from pydantic import BaseModel, Field
from typing import Optional, List, Literal

from app.schemas.orders.order_schema import ComponentUsage

class MenuConfigurableOption(BaseModel):
    id: int
    configurable_attribute_id: int
    title: Optional[str] = None
    extra_price: float = 0
    max_quantity: int = 0

class MenuConfigurableAttribute(BaseModel):
    """Attribute template: no selection state on the catalog side."""
    id: int
    product_id: int
    title: Optional[str] = None
    min_options: int = 0
    max_options: int = 0
    attribute_type: Optional[str] = None
    options: List[MenuConfigurableOption] = Field(default_factory=list)

class MenuConfiguration(BaseModel):
    attributes: List[MenuConfigurableAttribute] = Field(default_factory=list)

class MenuProduct(BaseModel):
    product_id: int
    by_product_of: Optional[int] = None
    name: str
    category: Optional[int] = None
    description: Optional[str] = None
    price: float = 0
    price_take_away: float = 0
    price_delivery: float = 0
    tva_rate_in: Optional[float] = None
    tva_rate_delivery: Optional[float] = None
    tva_rate_take_away: Optional[float] = None
    bg_color: Optional[str] = None
    is_product_group: bool = False
    status: int = 0
    is_available_on_sno: bool = False
    is_popular: bool = False
    image_url: Optional[str] = None
    has_image: bool = False
    available_in: bool = False
    available_take_away: bool = False
    available_delivery: bool = False
    components: List[ComponentUsage] = Field(default_factory=list)
    sub_products: List["MenuProduct"] = Field(default_factory=list)
    configuration: MenuConfiguration = Field(default_factory=MenuConfiguration)

class ProductCategory(BaseModel):
    category: str
    category_id: int
    order: int = 0
    bg_color: Optional[str] = None
    products: List[MenuProduct] = Field(default_factory=list)

class ComponentBasic(BaseModel):
    component_id: int
    name: str
    category: Optional[int] = None
    price: float = 0
    status: int = 0

class ComponentCategory(BaseModel):
    category: str
    order: int = 0
    components: List[ComponentBasic] = Field(default_factory=list)

class DelayEntry(BaseModel):
    delay_id: int
    short_description: Optional[str] = None
    duration: int = 0

class MenuResponse(BaseModel):
    status: Literal["ok"] = "ok"
    last_menu_update: Optional[str] = None  # "YYYY-MM-DD HH:MM:SS"
    products_types: List[ProductCategory] = Field(default_factory=list)
    components_types: List[ComponentCategory] = Field(default_factory=list)
    delays: List[DelayEntry] = Field(default_factory=list)

class MenuNoUpdateResponse(BaseModel):
    status: Literal["no_update_required"] = "no_update_required"
