"""
Tests for the in-memory cart.
"""

from decimal import Decimal

import pytest

from pdv import schemas
from pdv.domain.core.enums import CartEvent
from pdv.domain.order.cart import CartKey, CartStore, cart_key_for, make_cart_key
from pdv.domain.order.payload import build_order_payload


@pytest.fixture
def events():
    return []


@pytest.fixture
def cart(events):
    return CartStore(listeners=[lambda event, line: events.append(event)])


class TestCartKey:
    """Tests for cart keys and signatures."""

    def test_signature_format(self):
        key = make_cart_key("pizza", "grande", [("borda", 2), ("bacon", 1)])
        assert key.signature == "pizza__grande__bacon:1|borda:2"
        assert str(key) == key.signature

    def test_optional_order_does_not_matter(self):
        a = make_cart_key("p", None, [("b", 1), ("a", 2)])
        b = make_cart_key("p", None, [("a", 2), ("b", 1)])
        assert a == b
        assert a.signature == "p__base__a:2|b:1"

    def test_zero_quantity_optionals_are_dropped(self):
        assert make_cart_key("p", "v", [("a", 0)]).signature == "p__v__none"

    def test_key_for_line(self, make_line, optionals, pizza):
        key = cart_key_for(make_line(variation=pizza.variations[0], optionals=optionals))
        assert isinstance(key, CartKey)
        assert key == CartKey("pizza", "grande", (("bacon", 1), ("borda", 2)))


class TestAddItem:
    """Tests for CartStore.add_item."""

    def test_same_key_merges_into_one_line(self, cart, events, make_line):
        """Adding the same composition twice increments quantity by one."""
        cart.add_item(make_line())
        line = cart.add_item(make_line(quantity=5))
        assert len(cart) == 1
        assert line.quantity == 2
        assert events == [CartEvent.added, CartEvent.updated]

    def test_different_compositions_are_separate_lines(self, cart, make_line, optionals):
        cart.add_item(make_line())
        cart.add_item(make_line(optionals=optionals))
        assert len(cart) == 2
        assert cart.item_count == 2

    def test_new_line_gets_signature_and_minimum_quantity(self, cart, make_line):
        line = cart.add_item(make_line(quantity=0))
        assert line.quantity == 1
        assert line.signature == "pizza__base__none"

    def test_zero_quantity_optionals_are_filtered(self, cart, make_line):
        opt = schemas.OptionalIn(id="borda", name="Borda", price=5, quantity=0)
        line = cart.add_item(make_line(optionals=[opt]))
        assert line.selected_optionals == []

    def test_insertion_order_is_kept(self, cart, make_line, optionals):
        cart.add_item(make_line(optionals=optionals))
        cart.add_item(make_line())
        assert [line.signature for line in cart] == [
            "pizza__base__bacon:1|borda:2",
            "pizza__base__none",
        ]


    def test_iteration_yields_cart_lines(self, cart, make_line):
        cart.add_item(make_line())
        assert all(isinstance(line, schemas.CartLine) for line in cart)


class TestUpdates:
    """Tests for quantity, observation, removal and clearing."""

    def test_quantity_to_zero_removes_line(self, cart, events, make_line):
        line = cart.add_item(make_line())
        cart.update_item_quantity(line.signature, -5)
        assert cart.is_empty
        assert events[-1] is CartEvent.removed

    def test_quantity_increment_by_key(self, cart, make_line):
        line = cart.add_item(make_line())
        key = cart_key_for(line)
        cart.update_item_quantity(key, 2)
        assert cart.get(key).quantity == 3

    def test_unknown_key_is_ignored(self, cart, events, make_line):
        cart.add_item(make_line())
        cart.update_item_quantity("nope", 1)
        cart.update_item_observation("nope", "x")
        cart.remove_item("nope")
        assert len(cart) == 1
        assert events == [CartEvent.added]

    def test_observation(self, cart, make_line):
        line = cart.add_item(make_line())
        cart.update_item_observation(line.signature, "sem cebola")
        assert cart.get(line.signature).observation == "sem cebola"
        cart.update_item_observation(line.signature, None)
        assert cart.get(line.signature).observation == ""

    def test_remove_item(self, cart, make_line):
        line = cart.add_item(make_line())
        cart.remove_item(line.signature)
        assert cart.get(line.signature) is None

    def test_clear_emits_cleared(self, make_line):
        seen = []
        cart = CartStore()
        cart.subscribe(lambda event, line: seen.append((event, line)))
        cart.add_item(make_line())
        cart.clear()
        assert cart.is_empty
        assert seen[-1] == (CartEvent.cleared, None)

    def test_unsubscribe(self, make_line):
        seen = []
        cart = CartStore()
        unsubscribe = cart.subscribe(lambda event, line: seen.append(event))
        cart.add_item(make_line())
        unsubscribe()
        cart.add_item(make_line())
        assert seen == [CartEvent.added]


class TestLoad:
    """Tests for CartStore.load."""

    def test_load_merges_duplicates_and_skips_empty(self, make_line, optionals):
        cart = CartStore()
        cart.add_item(make_line(optionals=optionals))
        cart.load([make_line(quantity=1), make_line(quantity=2), make_line(quantity=0, optionals=optionals)])
        assert len(cart) == 1
        assert cart.lines[0].quantity == 3
        assert cart.lines[0].signature == "pizza__base__none"

    def test_load_drops_zero_quantity_optionals(self, make_line):
        opt = schemas.OptionalIn(id="bacon", name="Bacon extra", price=12, quantity=0)
        cart = CartStore()
        cart.load([make_line(optionals=[opt])])
        assert cart.lines[0].selected_optionals == []
        payload = build_order_payload(cart.lines, schemas.OrderDestination(table_id="5"))
        assert payload["products"][0]["optionals"] == []

    def test_totals(self, make_line, optionals):
        cart = CartStore()
        cart.load([make_line(quantity=2, optionals=optionals)])
        assert cart.totals().total == Decimal("114")
