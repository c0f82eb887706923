from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from mamae_review.validators.product_validators import (
    ProductUpdateValidatorMixin,
    ProductValidatorMixin,
)


class ProductCategory(str, Enum):
    ALIMENTACAO = "Alimentação"
    ROUPAS_E_ACESSORIOS = "Roupas e Acessórios"
    HIGIENE_E_CUIDADOS = "Higiene e Cuidados"
    BRINQUEDOS = "Brinquedos"
    MOVEIS_E_DECORACAO = "Móveis e Decoração"
    TRANSPORTE = "Transporte"
    AMAMENTACAO = "Amamentação"
    GESTACAO = "Gestação"
    OUTROS = "Outros"


PRODUCT_CATEGORIES = [category.value for category in ProductCategory]


class ProductBase(ProductValidatorMixin, BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    name: str
    category: ProductCategory
    description: str = ""
    price: float
    store_name: str
    store_link: Optional[str] = None
    image_url: Optional[str] = None


class ProductCreate(ProductBase):
    model_config = ConfigDict(extra="forbid")


class ProductUpdate(ProductUpdateValidatorMixin, ProductValidatorMixin, BaseModel):
    """Owner-editable fields; identity, creator, timestamps and rating are not"""
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    name: Optional[str] = None
    category: Optional[ProductCategory] = None
    description: Optional[str] = None
    price: Optional[float] = None
    store_name: Optional[str] = None
    store_link: Optional[str] = None
    image_url: Optional[str] = None


class Product(BaseModel):
    id: str
    name: str
    category: str
    description: str = ""
    price: float
    store_name: str
    store_link: Optional[str] = None
    image_url: Optional[str] = None
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    created_by: str
    created_at: Optional[datetime] = None
