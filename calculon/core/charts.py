# calculon/core/charts.py
import io
from typing import List, Union

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import pandas as pd

from calculon.config import CATEGORY_COLORS, DEFAULT_CATEGORY_COLOR
from calculon.core.budget import BudgetSummary, chart_slices
from calculon.core.models import Expense
from calculon.utils.text_utils import format_currency

THEME_STYLES = {
    'light': 'default',
    'dark': 'dark_background',
}

SORT_FIELDS = ('date', 'amount', 'category')


# --- Expense listing ---
def sort_expenses(expenses: List[Expense], field: str = 'date',
                  direction: str = 'desc') -> List[Expense]:
    """Sorts expenses by date, amount or category. Unknown fields keep the input order."""
    if field not in SORT_FIELDS:
        return list(expenses)

    if field == 'category':
        key = lambda e: e.category.casefold()
    else:
        key = lambda e: getattr(e, field)
    return sorted(expenses, key=key, reverse=(direction == 'desc'))


# --- Category ring ---
def category_color(category: str) -> str:
    return CATEGORY_COLORS.get(category, DEFAULT_CATEGORY_COLOR)


def generate_budget_ring_chart(summary: BudgetSummary,
                               theme: str = 'light') -> Union[io.BytesIO, None]:
    """Donut of spending per category with the budget percentage in the middle."""
    if summary is None:
        return None

    slices = pd.Series(dict(chart_slices(summary.category_breakdown)))
    colors = [category_color(category) for category in slices.index]

    with plt.style.context(THEME_STYLES.get(theme, 'default')):
        fig, ax = plt.subplots(figsize=(6, 6))
        ax.pie(
            slices.values,
            colors=colors,
            startangle=90,
            counterclock=False,
            wedgeprops={'width': 0.2},
            radius=0.8,
        )
        ax.set_aspect('equal')

        text_color = 'white' if theme == 'dark' else '#111827'
        ax.text(0, 0.08, f"{summary.progress_percentage:.1f}%", ha='center', va='center',
                fontsize=26, fontweight='bold', color=text_color)
        ax.text(0, -0.12,
                f"{format_currency(summary.total_spent)} / {format_currency(summary.adjusted_budget)}",
                ha='center', va='center', fontsize=12, color=text_color)
        if summary.is_over_budget:
            ax.text(0, -0.28, 'Over budget!', ha='center', va='center',
                    fontsize=11, fontweight='bold', color='#dc2626')

        if summary.category_breakdown:
            labels = [f"{category}: {format_currency(amount)}"
                      for category, amount in summary.category_breakdown.items()]
            ax.legend(ax.patches, labels, loc='upper center',
                      bbox_to_anchor=(0.5, 0.02), ncol=2, frameon=False)

        plt.tight_layout()

        buf = io.BytesIO()
        fig.savefig(buf, format='png', dpi=150)
        buf.seek(0)
        plt.close(fig)
    return buf
