"""
Tests for cart line upserts and login-time cart merging.
"""
from storefront.services.cart_merge import CartLine, add_line, merge_carts


def line(product_id: str, quantity: int, color: str = "", size: str = "") -> CartLine:
    return CartLine.of(product_id, quantity, color, size)


class TestAddLine:
    def test_new_variant_is_appended(self):
        cart = [line("p1", 1, "red")]

        result = add_line(cart, line("p1", 1, "blue"))

        assert [l.key for l in result] == [("p1", "red", ""), ("p1", "blue", "")]

    def test_same_variant_increments(self):
        cart = [line("p1", 2, "red", "M")]

        result = add_line(cart, line("p1", 3, "red", "M"))

        assert len(result) == 1
        assert result[0].quantity == 5

    def test_replace_quantity(self):
        cart = [line("p1", 2)]

        result = add_line(cart, line("p1", 7), replace_quantity=True)

        assert result[0].quantity == 7

    def test_input_cart_is_not_mutated(self):
        cart = [line("p1", 2)]

        add_line(cart, line("p1", 1))

        assert cart[0].quantity == 2

    def test_blank_variants_normalize(self):
        assert CartLine.of("p1", 1, None, "  ").key == CartLine.of("p1", 1, "", "").key


class TestMergeCarts:
    def test_merge_with_itself_is_identity(self):
        cart = [line("p1", 2, "red"), line("p2", 1)]

        assert merge_carts(cart, cart) == cart

    def test_overlapping_key_takes_max_not_sum(self):
        server = [line("p1", 2, "red")]
        local = [line("p1", 5, "red")]

        merged = merge_carts(server, local)

        assert merged == [line("p1", 5, "red")]

    def test_server_quantity_kept_when_larger(self):
        merged = merge_carts([line("p1", 4)], [line("p1", 1)])

        assert merged[0].quantity == 4

    def test_server_order_preserved_and_local_appended(self):
        server = [line("p1", 1), line("p2", 1)]
        local = [line("p3", 1), line("p1", 2)]

        merged = merge_carts(server, local)

        assert [l.product_id for l in merged] == ["p1", "p2", "p3"]
        assert merged[0].quantity == 2

    def test_different_variants_stay_separate(self):
        merged = merge_carts([line("p1", 1, "red")], [line("p1", 1, "blue")])

        assert len(merged) == 2

    def test_empty_server_cart(self):
        local = [line("p1", 3)]

        assert merge_carts([], local) == local

    def test_non_positive_quantities_dropped(self):
        merged = merge_carts([line("p1", 0)], [line("p2", -1), line("p3", 1)])

        assert [l.product_id for l in merged] == ["p3"]

    def test_duplicate_local_keys_collapse(self):
        merged = merge_carts([], [line("p1", 1), line("p1", 3)])

        assert merged == [line("p1", 3)]
