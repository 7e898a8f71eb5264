"""
Recipe cost analysis.

Prices a recipe by resolving each ingredient against the catalog and
compares the result with the recipe's external reference price.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from florist.schemas import ArrangementRecipe, LineItem, ProductTemplate
from florist.services.matching import IngredientMatcher, match_all, sort_catalog
from florist.services.pricing import ZERO, MarkupTable, line_retail, line_wholesale, to_money
from shared.config.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RecipeCostAnalysis:
    """
    Cost breakdown of one recipe.

    Money fields only cover resolved ingredients; they are meaningful only
    when ``complete`` is True.
    """

    recipe_id: str
    total_wholesale: Decimal
    total_retail: Decimal
    profit: Decimal
    reference_price: Decimal
    reference_profit: Decimal
    profit_delta: Decimal
    missing_ingredients: tuple[str, ...] = ()

    @property
    def complete(self) -> bool:
        return not self.missing_ingredients


@dataclass(frozen=True)
class RecipeDraftLines:
    """Line items pre-populated from a recipe, plus every unresolved ingredient."""

    line_items: list[LineItem] = field(default_factory=list)
    missing_ingredients: tuple[str, ...] = ()

    @property
    def complete(self) -> bool:
        return not self.missing_ingredients


def analyze_recipe(
    recipe: ArrangementRecipe,
    catalog: Iterable[ProductTemplate],
    markup_table: MarkupTable,
    matcher: IngredientMatcher | None = None,
) -> RecipeCostAnalysis:
    """
    Price a recipe against the catalog.

    Retail uses the multiplier of the ingredient's own category, not the
    matched template's. Unresolved ingredients are listed, never raised.

    Raises:
        MissingMarkupError: If a resolved ingredient's category has no usable multiplier.
    """
    report = match_all((i.name for i in recipe.ingredients), sort_catalog(catalog), matcher)

    total_wholesale = ZERO
    total_retail = ZERO

    for ingredient in recipe.ingredients:
        template = report.matches.get(ingredient.name)
        if template is None:
            continue
        total_wholesale += line_wholesale(template.wholesale_cost, ingredient.quantity)
        total_retail += line_retail(
            template.wholesale_cost, ingredient.quantity, ingredient.category, markup_table
        )

    total_wholesale = to_money(total_wholesale)
    total_retail = to_money(total_retail)
    profit = total_retail - total_wholesale
    reference_profit = recipe.reference_price - total_wholesale

    if report.missing:
        logger.debug("Recipe has unresolved ingredients", recipe_id=recipe.id, missing=len(report.missing))

    return RecipeCostAnalysis(
        recipe_id=recipe.id,
        total_wholesale=total_wholesale,
        total_retail=total_retail,
        profit=profit,
        reference_price=recipe.reference_price,
        reference_profit=reference_profit,
        profit_delta=reference_profit - profit,
        missing_ingredients=tuple(report.missing),
    )


def draft_lines_from_recipe(
    recipe: ArrangementRecipe,
    catalog: Iterable[ProductTemplate],
    matcher: IngredientMatcher | None = None,
) -> RecipeDraftLines:
    """
    Build order line items from a recipe.

    Each line keeps the ingredient's name, quantity and category with the
    matched template's cost. Callers must not build an order while
    ``missing_ingredients`` is non-empty.
    """
    report = match_all((i.name for i in recipe.ingredients), sort_catalog(catalog), matcher)

    lines: list[LineItem] = []
    for ingredient in recipe.ingredients:
        template = report.matches.get(ingredient.name)
        if template is None:
            continue
        lines.append(
            LineItem(
                name=ingredient.name,
                wholesale_cost=template.wholesale_cost,
                quantity=ingredient.quantity,
                category=ingredient.category,
            )
        )

    return RecipeDraftLines(line_items=lines, missing_ingredients=tuple(report.missing))
