"""
Per-session application state: auth, cart and wishlist slices.

State is immutable. Every change goes through ``Store.dispatch`` with one of
the action types below; reducers are pure functions of (state, action).
"""
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Tuple, Union

from bazarx.config import settings

logger = logging.getLogger(__name__)


# ---------- Slices ----------

@dataclass(frozen=True)
class AuthState:
    user: Optional[dict] = None
    token: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class CartItem:
    product_id: str
    name: str = ""
    price: float = 0
    quantity: int = 1
    image: str = ""


@dataclass(frozen=True)
class CartState:
    items: Tuple[CartItem, ...] = ()


@dataclass(frozen=True)
class WishlistItem:
    product_id: str
    name: str = ""
    price: float = 0
    image: str = ""


@dataclass(frozen=True)
class WishlistState:
    items: Tuple[WishlistItem, ...] = ()


@dataclass(frozen=True)
class AppState:
    auth: AuthState = field(default_factory=AuthState)
    cart: CartState = field(default_factory=CartState)
    wishlist: WishlistState = field(default_factory=WishlistState)


# ---------- Actions ----------

@dataclass(frozen=True)
class SetCredentials:
    user: dict
    token: str


@dataclass(frozen=True)
class UpdateUser:
    changes: dict


@dataclass(frozen=True)
class Logout:
    pass


@dataclass(frozen=True)
class AddToCart:
    item: CartItem


@dataclass(frozen=True)
class RemoveFromCart:
    product_id: str


@dataclass(frozen=True)
class UpdateQuantity:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class ClearCart:
    pass


@dataclass(frozen=True)
class AddToWishlist:
    item: WishlistItem


@dataclass(frozen=True)
class RemoveFromWishlist:
    product_id: str


Action = Union[
    SetCredentials, UpdateUser, Logout,
    AddToCart, RemoveFromCart, UpdateQuantity, ClearCart,
    AddToWishlist, RemoveFromWishlist,
]


# ---------- Reducers ----------

def auth_reducer(state: AuthState, action: Action) -> AuthState:
    if isinstance(action, SetCredentials):
        return AuthState(user=dict(action.user), token=action.token)
    if isinstance(action, UpdateUser):
        if state.user is None:
            return state
        return replace(state, user={**state.user, **action.changes})
    if isinstance(action, Logout):
        return AuthState()
    return state


def cart_reducer(state: CartState, action: Action) -> CartState:
    if isinstance(action, AddToCart):
        new = action.item
        if new.quantity <= 0:
            return state
        for i, existing in enumerate(state.items):
            if existing.product_id == new.product_id:
                merged = replace(existing, quantity=existing.quantity + new.quantity)
                return CartState(items=state.items[:i] + (merged,) + state.items[i + 1:])
        return CartState(items=state.items + (new,))
    if isinstance(action, RemoveFromCart):
        return CartState(items=tuple(i for i in state.items if i.product_id != action.product_id))
    if isinstance(action, UpdateQuantity):
        if action.quantity <= 0:
            return cart_reducer(state, RemoveFromCart(action.product_id))
        return CartState(items=tuple(
            replace(i, quantity=action.quantity) if i.product_id == action.product_id else i
            for i in state.items
        ))
    if isinstance(action, (ClearCart, Logout)):
        return CartState()
    return state


def wishlist_reducer(state: WishlistState, action: Action) -> WishlistState:
    if isinstance(action, AddToWishlist):
        if any(i.product_id == action.item.product_id for i in state.items):
            return state
        return WishlistState(items=state.items + (action.item,))
    if isinstance(action, RemoveFromWishlist):
        return WishlistState(items=tuple(i for i in state.items if i.product_id != action.product_id))
    if isinstance(action, Logout):
        return WishlistState()
    return state


def root_reducer(state: AppState, action: Action) -> AppState:
    return AppState(
        auth=auth_reducer(state.auth, action),
        cart=cart_reducer(state.cart, action),
        wishlist=wishlist_reducer(state.wishlist, action),
    )


# ---------- Selectors ----------

def select_user(state: AppState) -> Optional[dict]:
    return state.auth.user


def select_token(state: AppState) -> Optional[str]:
    return state.auth.token


def select_is_authenticated(state: AppState) -> bool:
    return state.auth.user is not None and bool(state.auth.token)


def select_cart_items(state: AppState) -> List[CartItem]:
    return list(state.cart.items)


def select_cart_count(state: AppState) -> int:
    return sum(i.quantity for i in state.cart.items)


def select_cart_total(state: AppState) -> float:
    return sum(i.price * i.quantity for i in state.cart.items)


def select_wishlist_ids(state: AppState) -> List[str]:
    return [i.product_id for i in state.wishlist.items]


def select_is_in_wishlist(state: AppState, product_id: str) -> bool:
    return product_id in select_wishlist_ids(state)


# ---------- Store ----------

Listener = Callable[[AppState], None]


class Store:
    """Holds one AppState and applies actions to it."""

    def __init__(self, reducer: Callable[[AppState, Action], AppState] = root_reducer,
                 initial: Optional[AppState] = None):
        self._reducer = reducer
        self._state = initial or AppState()
        self._listeners: List[Listener] = []

    def get_state(self) -> AppState:
        return self._state

    def dispatch(self, action: Action) -> AppState:
        self._state = self._reducer(self._state, action)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


class SessionStores:
    """Registry of stores keyed by session id.

    A missing store is rehydrated from the session's own user and token.
    Stores are dropped once their session has expired, and the least recently
    used one is dropped when ``max_sessions`` is exceeded.
    """

    def __init__(self, max_sessions: Optional[int] = None, clock: Callable[[], float] = time.time):
        self._stores: "OrderedDict[str, Store]" = OrderedDict()
        self._expiry: Dict[str, float] = {}
        self.max_sessions = max_sessions
        self.clock = clock

    def get(
        self,
        sid: str,
        user: Optional[dict] = None,
        token: Optional[str] = None,
        expires_at: Optional[float] = None,
    ) -> Store:
        self.purge_expired()
        store = self._stores.get(sid)
        if store is None:
            store = Store()
            if user is not None and token:
                store.dispatch(SetCredentials(user=user, token=token))
            self._stores[sid] = store
        else:
            self._stores.move_to_end(sid)
        if expires_at is not None:
            # a re-issued token only ever extends the session
            self._expiry[sid] = max(expires_at, self._expiry.get(sid, expires_at))
        self._evict_overflow()
        return store

    def purge_expired(self) -> int:
        now = self.clock()
        expired = [sid for sid, expires_at in self._expiry.items() if expires_at <= now]
        for sid in expired:
            self.drop(sid)
        return len(expired)

    def _evict_overflow(self) -> None:
        if not self.max_sessions:
            return
        while len(self._stores) > self.max_sessions:
            oldest = next(iter(self._stores))
            logger.info("Session store limit reached, evicting %s", oldest)
            self.drop(oldest)

    def drop(self, sid: str) -> None:
        self._expiry.pop(sid, None)
        store = self._stores.pop(sid, None)
        if store is not None:
            store.dispatch(Logout())
            logger.debug("Dropped state for session %s", sid)

    def __contains__(self, sid: str) -> bool:
        return sid in self._stores

    def __len__(self) -> int:
        return len(self._stores)


session_stores = SessionStores(max_sessions=settings.MAX_SESSION_STORES)
