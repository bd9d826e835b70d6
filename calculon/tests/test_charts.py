import io
import unittest

from calculon.core.budget import calculate_budget_progress
from calculon.core.charts import category_color, generate_budget_ring_chart, sort_expenses
from calculon.core.models import Expense, Goal

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'


def make_expense(expense_id, amount, category, date):
    return Expense(expense_id, 'goal-1', amount, category, date)


class TestRingChart(unittest.TestCase):
    def setUp(self):
        self.goal = Goal('goal-1', 'user-1', 'Holidays', 100, '2025-12-31')

    def assert_png(self, buf):
        self.assertIsInstance(buf, io.BytesIO)
        self.assertEqual(buf.read(8), PNG_SIGNATURE)

    def test_chart_with_categories(self):
        summary = calculate_budget_progress(self.goal, [
            make_expense('e1', 30, 'ING', '2025-07-01'),
            make_expense('e2', 20, 'Cash', '2025-07-02'),
        ], [])
        self.assert_png(generate_budget_ring_chart(summary))

    def test_chart_without_expenses(self):
        summary = calculate_budget_progress(self.goal, [], [])
        self.assert_png(generate_budget_ring_chart(summary))

    def test_dark_over_budget_chart(self):
        summary = calculate_budget_progress(self.goal, [make_expense('e1', 150, 'Revolut', '2025-07-01')], [])
        self.assert_png(generate_budget_ring_chart(summary, theme='dark'))

    def test_no_summary(self):
        self.assertIsNone(generate_budget_ring_chart(None))

    def test_category_colors(self):
        self.assertEqual(category_color('ING'), '#f97316')
        self.assertEqual(category_color('Cash'), '#6b7280')


class TestSortExpenses(unittest.TestCase):
    def setUp(self):
        self.expenses = [
            make_expense('e1', 30, 'revolut', '2025-07-02'),
            make_expense('e2', 10, 'ING', '2025-07-05'),
            make_expense('e3', 20, 'Other', '2025-07-01'),
        ]

    def ids(self, expenses):
        return [e.id for e in expenses]

    def test_default_is_newest_first(self):
        self.assertEqual(self.ids(sort_expenses(self.expenses)), ['e2', 'e1', 'e3'])

    def test_amount_ascending(self):
        self.assertEqual(self.ids(sort_expenses(self.expenses, 'amount', 'asc')), ['e2', 'e3', 'e1'])

    def test_category_ignores_case(self):
        self.assertEqual(self.ids(sort_expenses(self.expenses, 'category', 'asc')), ['e2', 'e3', 'e1'])

    def test_unknown_field_keeps_order(self):
        self.assertEqual(self.ids(sort_expenses(self.expenses, 'notes')), ['e1', 'e2', 'e3'])


if __name__ == '__main__':
    unittest.main()
