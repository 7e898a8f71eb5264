"""
Tests for inventory reconciliation and low-stock reporting.
"""

from florist.services.inventory import (
    changed_templates,
    consumed_quantities,
    low_stock_templates,
    reconcile_inventory,
)

from tests.factories import make_line, make_order, make_template


class TestReconcileInventory:
    """Tests for reconcile_inventory."""

    def test_count_never_goes_negative(self):
        rose = make_template("Red Rose", inventory_count=3)
        order = make_order([make_line("Red Rose", "2.50", 10)])

        [updated] = reconcile_inventory(order, [rose])

        assert updated.inventory_count == 0

    def test_decrements_by_line_quantity(self):
        rose = make_template("Red Rose", inventory_count=48)
        order = make_order([make_line("Red Rose", "2.50", 12)])

        [updated] = reconcile_inventory(order, [rose])

        assert updated.inventory_count == 36
        assert rose.inventory_count == 48

    def test_untracked_template_is_untouched(self):
        ribbon = make_template("Satin Ribbon", category="accessory")
        order = make_order([make_line("Satin Ribbon", "0.75", 2, "accessory")])

        [updated] = reconcile_inventory(order, [ribbon])

        assert updated is ribbon
        assert updated.inventory_count is None

    def test_requires_exact_name_and_category(self):
        rose = make_template("Red Rose", inventory_count=10)
        order = make_order(
            [
                make_line("red rose", "2.50", 1),
                make_line("Red Rose", "2.50", 1, "other"),
                make_line("Rose", "2.50", 1),
            ]
        )

        [updated] = reconcile_inventory(order, [rose])

        assert updated.inventory_count == 10

    def test_repeated_lines_are_summed(self):
        rose = make_template("Red Rose", inventory_count=10)
        order = make_order([make_line("Red Rose", "2.50", 3), make_line("Red Rose", "2.50", 4)])

        assert consumed_quantities(order) == {("Red Rose", "stem"): 7}
        [updated] = reconcile_inventory(order, [rose])
        assert updated.inventory_count == 3

    def test_changed_templates_only_lists_new_counts(self, sample_catalog):
        order = make_order(
            [
                make_line("Red Rose", "2.50", 12),
                make_line("Glass Vase", "8.00", 1, "vase"),
                make_line("Satin Ribbon", "0.75", 1, "accessory"),
            ]
        )

        updated = reconcile_inventory(order, sample_catalog)
        changed = changed_templates(sample_catalog, updated)

        # Glass Vase was already at zero
        assert [(t.name, t.inventory_count) for t in changed] == [("Red Rose", 36)]


class TestLowStock:
    """Tests for low_stock_templates."""

    def test_lists_at_or_below_threshold_and_out_of_stock(self, sample_catalog):
        low = low_stock_templates(sample_catalog)

        assert [t.name for t in low] == ["Glass Vase", "White Lily"]

    def test_out_of_stock_without_threshold_is_low(self):
        foam = make_template("Floral Foam", category="other", inventory_count=0)
        assert low_stock_templates([foam]) == [foam]

    def test_threshold_boundary_is_inclusive(self):
        rose = make_template("Red Rose", inventory_count=24, low_stock_threshold=24)
        assert low_stock_templates([rose]) == [rose]
