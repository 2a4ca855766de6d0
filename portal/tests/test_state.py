from bazarx.state import (
    AddToCart,
    AddToWishlist,
    AppState,
    CartItem,
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
    root_reducer,
    select_cart_count,
    select_cart_total,
    select_is_authenticated,
    select_is_in_wishlist,
    select_token,
    select_user,
    select_wishlist_ids,
)


def _logged_in() -> AppState:
    return root_reducer(AppState(), SetCredentials(user={"id": "u1", "name": "Asha"}, token="t1"))


def test_reducers_do_not_mutate_previous_state():
    before = _logged_in()
    after = root_reducer(before, AddToCart(CartItem("p1", price=10)))
    assert before.cart.items == ()
    assert len(after.cart.items) == 1
    assert after.auth is before.auth


def test_set_credentials_and_update_user():
    state = _logged_in()
    assert select_is_authenticated(state)
    assert select_token(state) == "t1"
    state = root_reducer(state, UpdateUser(changes={"name": "Asha K", "phone": "99"}))
    assert select_user(state) == {"id": "u1", "name": "Asha K", "phone": "99"}


def test_update_user_without_session_is_ignored():
    state = root_reducer(AppState(), UpdateUser(changes={"name": "x"}))
    assert select_user(state) is None


def test_add_to_cart_merges_quantities():
    state = _logged_in()
    state = root_reducer(state, AddToCart(CartItem("p1", name="Rice", price=50, quantity=2)))
    state = root_reducer(state, AddToCart(CartItem("p1", name="Rice", price=50, quantity=3)))
    state = root_reducer(state, AddToCart(CartItem("p2", name="Dal", price=20)))
    assert [(i.product_id, i.quantity) for i in state.cart.items] == [("p1", 5), ("p2", 1)]
    assert select_cart_count(state) == 6
    assert select_cart_total(state) == 270


def test_add_with_non_positive_quantity_is_ignored():
    state = root_reducer(AppState(), AddToCart(CartItem("p1", quantity=0)))
    assert state.cart.items == ()


def test_update_quantity_to_zero_removes_item():
    state = root_reducer(AppState(), AddToCart(CartItem("p1", price=5, quantity=2)))
    state = root_reducer(state, UpdateQuantity("p1", 4))
    assert state.cart.items[0].quantity == 4
    state = root_reducer(state, UpdateQuantity("p1", 0))
    assert state.cart.items == ()


def test_remove_and_clear_cart():
    state = root_reducer(AppState(), AddToCart(CartItem("p1")))
    state = root_reducer(state, AddToCart(CartItem("p2")))
    state = root_reducer(state, RemoveFromCart("p1"))
    assert [i.product_id for i in state.cart.items] == ["p2"]
    assert root_reducer(state, ClearCart()).cart.items == ()


def test_wishlist_ignores_duplicates():
    state = root_reducer(AppState(), AddToWishlist(WishlistItem("p1")))
    state = root_reducer(state, AddToWishlist(WishlistItem("p1")))
    assert select_wishlist_ids(state) == ["p1"]
    assert select_is_in_wishlist(state, "p1")
    state = root_reducer(state, RemoveFromWishlist("p1"))
    assert not select_is_in_wishlist(state, "p1")


def test_logout_clears_every_slice():
    state = root_reducer(_logged_in(), AddToCart(CartItem("p1")))
    state = root_reducer(state, AddToWishlist(WishlistItem("p2")))
    state = root_reducer(state, Logout())
    assert state == AppState()


def test_store_notifies_until_unsubscribed():
    store = Store()
    seen = []
    unsubscribe = store.subscribe(lambda s: seen.append(select_cart_count(s)))
    store.dispatch(AddToCart(CartItem("p1")))
    unsubscribe()
    store.dispatch(AddToCart(CartItem("p1")))
    assert seen == [1]
    assert select_cart_count(store.get_state()) == 2


def test_session_stores_rehydrate_and_drop():
    stores = SessionStores()
    store = stores.get("s1", user={"id": "u1"}, token="t1")
    assert select_token(store.get_state()) == "t1"
    assert stores.get("s1") is store
    assert "s1" in stores and len(stores) == 1

    stores.drop("s1")
    assert "s1" not in stores
    assert store.get_state() == AppState()
    stores.drop("missing")


def test_session_stores_evict_expired_sessions():
    now = [1000.0]
    stores = SessionStores(clock=lambda: now[0])
    expired = stores.get("old", user={"id": "u1"}, token="t1", expires_at=1010)
    stores.get("new", expires_at=2000)
    stores.get("untimed")

    now[0] = 1011
    stores.get("new")
    assert "old" not in stores
    assert expired.get_state() == AppState()
    assert "new" in stores and "untimed" in stores
    assert stores.purge_expired() == 0


def test_reissued_token_extends_store_lifetime():
    now = [0.0]
    stores = SessionStores(clock=lambda: now[0])
    stores.get("s1", expires_at=100)
    stores.get("s1", expires_at=500)
    stores.get("s1", expires_at=100)
    now[0] = 200
    assert stores.purge_expired() == 0
    assert "s1" in stores


def test_session_stores_cap_evicts_least_recently_used():
    stores = SessionStores(max_sessions=2)
    stores.get("a")
    stores.get("b")
    stores.get("a")
    stores.get("c")
    assert "b" not in stores
    assert "a" in stores and "c" in stores
    assert len(stores) == 2
