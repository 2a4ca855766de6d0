"""
Cart and Wishlist API

Both live in the session's state store; every change is a dispatched action.
"""
from fastapi import APIRouter, Depends, status

from bazarx.dependencies import get_store
from bazarx.schemas.cart import (
    CartItemIn,
    CartItemOut,
    CartView,
    QuantityUpdate,
    WishlistItemIn,
    WishlistView,
)
from bazarx.state import (
    AddToCart,
    AddToWishlist,
    AppState,
    CartItem,
    ClearCart,
    RemoveFromCart,
    RemoveFromWishlist,
    Store,
    UpdateQuantity,
    WishlistItem,
    select_cart_count,
    select_cart_items,
    select_cart_total,
    select_wishlist_ids,
)
from bazarx.utils import formatting

router = APIRouter()
wishlist_router = APIRouter()


def _cart_view(state: AppState) -> CartView:
    return CartView(
        items=[
            CartItemOut(
                productId=i.product_id,
                name=i.name,
                price=i.price,
                quantity=i.quantity,
                image=i.image,
                subtotal=formatting.currency(i.price * i.quantity),
            )
            for i in select_cart_items(state)
        ],
        count=select_cart_count(state),
        total=select_cart_total(state),
        formatted_total=formatting.currency(select_cart_total(state)),
    )


def _wishlist_view(state: AppState) -> WishlistView:
    return WishlistView(
        items=[
            WishlistItemIn(productId=i.product_id, name=i.name, price=i.price, image=i.image)
            for i in state.wishlist.items
        ],
        productIds=select_wishlist_ids(state),
    )


@router.get("", response_model=CartView)
async def get_cart(store: Store = Depends(get_store)):
    return _cart_view(store.get_state())


@router.post("", response_model=CartView, status_code=status.HTTP_201_CREATED)
async def add_to_cart(item: CartItemIn, store: Store = Depends(get_store)):
    """Adding a product already in the cart increases its quantity."""
    state = store.dispatch(AddToCart(CartItem(
        product_id=item.productId,
        name=item.name,
        price=item.price,
        quantity=item.quantity,
        image=item.image,
    )))
    return _cart_view(state)


@router.put("/{product_id}", response_model=CartView)
async def update_quantity(product_id: str, update: QuantityUpdate, store: Store = Depends(get_store)):
    """A quantity of zero or less removes the item."""
    return _cart_view(store.dispatch(UpdateQuantity(product_id=product_id, quantity=update.quantity)))


@router.delete("/{product_id}", response_model=CartView)
async def remove_from_cart(product_id: str, store: Store = Depends(get_store)):
    return _cart_view(store.dispatch(RemoveFromCart(product_id)))


@router.delete("", response_model=CartView)
async def clear_cart(store: Store = Depends(get_store)):
    return _cart_view(store.dispatch(ClearCart()))


@wishlist_router.get("", response_model=WishlistView)
async def get_wishlist(store: Store = Depends(get_store)):
    return _wishlist_view(store.get_state())


@wishlist_router.post("", response_model=WishlistView, status_code=status.HTTP_201_CREATED)
async def add_to_wishlist(item: WishlistItemIn, store: Store = Depends(get_store)):
    state = store.dispatch(AddToWishlist(WishlistItem(
        product_id=item.productId,
        name=item.name,
        price=item.price,
        image=item.image,
    )))
    return _wishlist_view(state)


@wishlist_router.delete("/{product_id}", response_model=WishlistView)
async def remove_from_wishlist(product_id: str, store: Store = Depends(get_store)):
    return _wishlist_view(store.dispatch(RemoveFromWishlist(product_id)))
