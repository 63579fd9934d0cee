"""Page context.

Everything about a shop page that follows from its URL path alone: the
resolved category path, the lowest-level category options, the attributes
behind the color, size and dynamic filters, and the filter toggles.
"""

from dataclasses import dataclass

from storefront.catalog.filter_state import FilterState
from storefront.catalog.hierarchy import CategoryFacetOption, ResolvedPath
from storefront.catalog.store import CatalogScope
from storefront.domain.entities import Attribute, FilterVisibility


@dataclass(frozen=True)
class PageContext:
    """Filter-independent context of one shop page.

    Attributes:
        path: Resolved category path (found).
        lowest_level_options: Categories offered as the category facet.
        color_attribute: Attribute behind the color filter, if any.
        size_attribute: Attribute behind the size filter, if any.
        dynamic_attributes: Category-scoped attributes with options,
            excluding the color and size attributes.
        visibility: Which fixed filters the page shows.
    """

    path: ResolvedPath
    lowest_level_options: tuple[CategoryFacetOption, ...] = ()
    color_attribute: Attribute | None = None
    size_attribute: Attribute | None = None
    dynamic_attributes: tuple[Attribute, ...] = ()
    visibility: FilterVisibility = FilterVisibility()

    @property
    def key(self) -> tuple[str | None, ...]:
        """Cache key of the page: its resolved category ids."""
        return self.path.level_ids

    @property
    def lowest_level(self) -> int | None:
        """Tree level of the category facet options."""
        if not self.lowest_level_options:
            return None
        return self.lowest_level_options[0].level

    def selected_levels(self, state: FilterState) -> frozenset[str]:
        """Selected category ids that are offered on this page; others are ignored."""
        offered = {option.id for option in self.lowest_level_options}
        return frozenset(state.levels & offered)

    def scope(
        self,
        state: FilterState,
        seller_ids: frozenset[str] | None,
        include_brands: bool = True,
    ) -> CatalogScope:
        """Build the base scope for a filter state on this page.

        Args:
            state: Current filter state.
            seller_ids: Seller allowlist.
            include_brands: Apply the brand selection.

        Returns:
            Scope without any candidate narrowing.
        """
        return CatalogScope(
            category_id=self.path.id_at(1),
            subcategory_id=self.path.id_at(2),
            sub_subcategory_id=self.path.id_at(3),
            sub_sub_subcategory_id=self.path.id_at(4),
            lowest_level=self.lowest_level,
            lowest_level_ids=self.selected_levels(state),
            brand_ids=state.brands if include_brands else frozenset(),
            seller_ids=seller_ids,
        )
