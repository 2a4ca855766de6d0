"""
Application state container
"""
from bazarx.state.store import (
    AddToCart,
    AddToWishlist,
    AppState,
    AuthState,
    CartItem,
    CartState,
    ClearCart,
    Logout,
    RemoveFromCart,
    RemoveFromWishlist,
    SessionStores,
    SetCredentials,
    Store,
    UpdateQuantity,
    UpdateUser,
    WishlistItem,
    WishlistState,
    root_reducer,
    select_cart_count,
    select_cart_items,
    select_cart_total,
    select_is_authenticated,
    select_is_in_wishlist,
    select_token,
    select_user,
    select_wishlist_ids,
    session_stores,
)

__all__ = [
    "AddToCart",
    "AddToWishlist",
    "AppState",
    "AuthState",
    "CartItem",
    "CartState",
    "ClearCart",
    "Logout",
    "RemoveFromCart",
    "RemoveFromWishlist",
    "SessionStores",
    "SetCredentials",
    "Store",
    "UpdateQuantity",
    "UpdateUser",
    "WishlistItem",
    "WishlistState",
    "root_reducer",
    "select_cart_count",
    "select_cart_items",
    "select_cart_total",
    "select_is_authenticated",
    "select_is_in_wishlist",
    "select_token",
    "select_user",
    "select_wishlist_ids",
    "session_stores",
]
