"""Category budgets.

The category sheet holds the monthly and daily budget in two stacked cells and one
``category | sub-category | budget`` row per budgeted category.
"""
import dataclasses
import math
from typing import Any, Dict, List, Optional

from . import cells
from ..status import status


@dataclasses.dataclass(frozen=True)
class BudgetCategory:
    category_name: str
    sub_category_name: str
    budget: float

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


@dataclasses.dataclass(frozen=True)
class CategoryBudget:
    monthly_budget: float
    daily_budget: float
    categories: tuple = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'monthly_budget': self.monthly_budget,
            'daily_budget': self.daily_budget,
            'categories': [c.to_dict() for c in self.categories],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CategoryBudget':
        """Build a budget from request data.

        Raises:
            status.InvalidFieldsException: If a field is missing or not a valid amount.
        """
        if not isinstance(data, dict):
            raise status.InvalidFieldsException(f'Budget must be a mapping, got {type(data)}.')

        categories = []
        for item in data.get('categories') or []:
            if not isinstance(item, dict):
                raise status.InvalidFieldsException(f'Budget category must be a mapping, got {type(item)}.')
            name = cells.to_cell(item.get('category_name')).text
            if not name:
                raise status.InvalidFieldsException('Budget category is missing "category_name".')
            categories.append(BudgetCategory(
                category_name=name,
                sub_category_name=cells.to_cell(item.get('sub_category_name')).text,
                budget=_budget_amount(item.get('budget'), f'{name} budget'),
            ))

        return cls(
            monthly_budget=_budget_amount(data.get('monthly_budget'), 'monthly_budget'),
            daily_budget=_budget_amount(data.get('daily_budget'), 'daily_budget'),
            categories=tuple(categories),
        )


def _budget_amount(value: Any, name: str) -> float:
    if value is None or isinstance(value, bool):
        raise status.InvalidFieldsException(f'"{name}" must be a number.')
    if isinstance(value, str):
        value = cells.parse_amount(value)
    try:
        amount = float(value)
    except (TypeError, ValueError) as ex:
        raise status.InvalidFieldsException(f'"{name}" must be a number.') from ex
    if not math.isfinite(amount) or amount < 0:
        raise status.InvalidFieldsException(f'"{name}" must be a non-negative number, got {value}.')
    return amount


def parse_budget(budget_rows: List[List[Any]], category_rows: List[List[Any]],
                 currency_symbol: Optional[str] = None) -> CategoryBudget:
    """Read a budget from the budget cells and the category rows of the category sheet."""
    monthly = cells.parse_amount(cells.cell_at(budget_rows[0], 0), currency_symbol) if budget_rows else 0.0
    daily = cells.parse_amount(cells.cell_at(budget_rows[1], 0), currency_symbol) if len(budget_rows) > 1 else 0.0

    categories = []
    for row in category_rows:
        name = cells.cell_at(row, 0).text
        if not name:
            continue
        categories.append(BudgetCategory(
            category_name=name,
            sub_category_name=cells.cell_at(row, 1).text,
            budget=cells.parse_amount(cells.cell_at(row, 2), currency_symbol),
        ))
    return CategoryBudget(monthly_budget=monthly, daily_budget=daily, categories=tuple(categories))


def budget_cell_rows(budget: CategoryBudget) -> List[List[Any]]:
    return [[budget.monthly_budget], [budget.daily_budget]]


def category_rows(budget: CategoryBudget) -> List[List[Any]]:
    return [[c.category_name, c.sub_category_name, c.budget] for c in budget.categories]
