"""
Tests for recipe cost analysis and recipe-to-order drafting.
"""

from decimal import Decimal

from florist.services.recipe_analysis import analyze_recipe, draft_lines_from_recipe

from tests.factories import STANDARD_MARKUP, make_recipe, make_template


class TestAnalyzeRecipe:
    """Tests for analyze_recipe."""

    def test_rose_and_vase_recipe_against_reference_price(self):
        recipe = make_recipe([("Red Rose", 12, "stem"), ("Vase", 1, "vase")], reference_price="75.00")
        catalog = [make_template("Red Rose", "2.50", "stem"), make_template("Vase", "8.00", "vase")]

        analysis = analyze_recipe(recipe, catalog, {"stem": Decimal("2.5"), "vase": Decimal("2.0")})

        assert analysis.complete
        assert analysis.total_wholesale == Decimal("38.00")
        assert analysis.total_retail == Decimal("91.00")
        assert analysis.profit == Decimal("53.00")
        assert analysis.reference_profit == Decimal("37.00")
        assert analysis.profit_delta == Decimal("-16.00")

    def test_missing_ingredients_are_listed(self):
        recipe = make_recipe([("Red Rose", 6, "stem"), ("Peony", 3, "stem"), ("Orchid", 1, "stem")])
        catalog = [make_template("Red Rose", "2.50")]

        analysis = analyze_recipe(recipe, catalog, STANDARD_MARKUP)

        assert not analysis.complete
        assert analysis.missing_ingredients == ("Peony", "Orchid")
        assert analysis.total_wholesale == Decimal("15.00")

    def test_retail_uses_ingredient_category(self):
        # Template is filed as "other" but the recipe calls it an accessory
        recipe = make_recipe([("Ribbon", 2, "accessory")])
        catalog = [make_template("Satin Ribbon", "1.00", "other")]

        analysis = analyze_recipe(recipe, catalog, STANDARD_MARKUP)

        assert analysis.total_retail == Decimal("6.00")

    def test_empty_recipe_is_complete_with_zero_cost(self):
        recipe = make_recipe([], reference_price="20.00")

        analysis = analyze_recipe(recipe, [], STANDARD_MARKUP)

        assert analysis.complete
        assert analysis.total_wholesale == 0
        assert analysis.reference_profit == Decimal("20.00")


class TestDraftLinesFromRecipe:
    """Tests for draft_lines_from_recipe."""

    def test_lines_keep_ingredient_name_with_template_cost(self):
        recipe = make_recipe([("Rose", 12, "stem"), ("Vase", 1, "vase")])
        catalog = [make_template("Red Rose", "2.50"), make_template("Glass Vase", "8.00", "vase")]

        drafted = draft_lines_from_recipe(recipe, catalog)

        assert drafted.complete
        assert [(line.name, line.wholesale_cost, line.quantity, line.category) for line in drafted.line_items] == [
            ("Rose", Decimal("2.50"), 12, "stem"),
            ("Vase", Decimal("8.00"), 1, "vase"),
        ]

    def test_reports_all_missing_ingredients(self):
        recipe = make_recipe([("Peony", 3, "stem"), ("Rose", 1, "stem"), ("Orchid", 2, "stem")])
        catalog = [make_template("Red Rose", "2.50")]

        drafted = draft_lines_from_recipe(recipe, catalog)

        assert drafted.missing_ingredients == ("Peony", "Orchid")
        assert len(drafted.line_items) == 1
