"""
商品路由 (Product Router)

功能说明：商品查询与管理
核心职责：
  - 商品列表（可按名称筛选）、详情（附带反馈）、按平均分查询、按平均分排序
  - 商品的增删改（仅限管理员），删除时级联删除全部反馈
API端点：GET/POST /api/v1/products, GET /best, GET /by-rating,
        GET/PUT/DELETE /api/v1/products/{id}, GET /api/v1/products/{id}/feedbacks
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.deps import get_caller, get_effects
from app.core.exceptions import NotFoundError
from app.core.store import DocumentStore, get_store
from app.models.feedback import Feedback
from app.models.product import Product
from app.models.user import User
from app.schemas.feedback import FeedbackOut
from app.schemas.product import ProductCreate, ProductDetail, ProductOut, ProductUpdate
from app.services import catalog
from app.services.effects import SideEffects

router = APIRouter(prefix="/api/v1/products", tags=["products"])

RATING_TOLERANCE = 0.01  # 按平均分查询的容差 (Tolerance for rating lookups)


def escape_like(value: str) -> str:
    """转义 LIKE 通配符，按字面匹配 % 和 _ (Escape LIKE wildcards so % and _ match literally)"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@router.get("", response_model=List[ProductOut])
async def list_products(
    name: Optional[str] = Query(None, description="名称包含（不区分大小写）"),
    store: DocumentStore = Depends(get_store),
):
    """商品列表 (List products)"""
    criteria = [Product.name.ilike(f"%{escape_like(name)}%", escape="\\")] if name else []
    return await store.find(Product, *criteria)


@router.get("/best", response_model=List[ProductOut])
async def best_products(
    limit: int = Query(20, ge=1, le=100),
    store: DocumentStore = Depends(get_store),
):
    """按缓存平均分从高到低排序 (Products ordered by cached average, best first)"""
    return await store.find(Product, order_by=Product.average_rating.desc(), limit=limit)


@router.get("/by-rating", response_model=List[ProductOut])
async def products_by_rating(
    rating: float = Query(..., ge=0, le=5),
    store: DocumentStore = Depends(get_store),
):
    """平均分在 rating ± 0.01 范围内的商品 (Products whose average is within ±0.01 of rating)"""
    return await store.find(
        Product,
        Product.average_rating >= rating - RATING_TOLERANCE,
        Product.average_rating <= rating + RATING_TOLERANCE,
    )


@router.get("/{product_id}", response_model=ProductDetail)
async def get_product(product_id: int, store: DocumentStore = Depends(get_store)):
    """商品详情，附带全部反馈 (Product detail with its feedback)"""
    product = await store.find_by_id(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    feedbacks = await store.find(Feedback, product_id=product_id)
    return ProductDetail(
        **ProductOut.model_validate(product).model_dump(),
        feedbacks=[FeedbackOut.model_validate(f) for f in feedbacks],
    )


@router.get("/{product_id}/feedbacks", response_model=List[FeedbackOut])
async def product_feedbacks(product_id: int, store: DocumentStore = Depends(get_store)):
    """商品的全部反馈 (All feedback of a product)"""
    return await store.find(Feedback, product_id=product_id)


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
async def add_product(
    data: ProductCreate,
    store: DocumentStore = Depends(get_store),
    effects: SideEffects = Depends(get_effects),
    caller: Optional[User] = Depends(get_caller),
):
    """新增商品（仅管理员） (Add product, admin only)"""
    return await catalog.add_product(store, effects, caller, data.name, data.description)


@router.put("/{product_id}", response_model=ProductOut)
async def update_product(
    product_id: int,
    data: ProductUpdate,
    store: DocumentStore = Depends(get_store),
    effects: SideEffects = Depends(get_effects),
    caller: Optional[User] = Depends(get_caller),
):
    """修改商品（仅管理员） (Update product, admin only)"""
    return await catalog.update_product(store, effects, caller, product_id, data.name, data.description)


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    store: DocumentStore = Depends(get_store),
    effects: SideEffects = Depends(get_effects),
    caller: Optional[User] = Depends(get_caller),
):
    """删除商品及其全部反馈（仅管理员） (Delete product and its feedback, admin only)"""
    return {"deleted": await catalog.delete_product(store, effects, caller, product_id)}
