"""
Unit tests for Byeboros.data.transactions
(filters, time-of-day sort, day groups, labels and totals).

Run with:
    python -m unittest tests.test_transactions
"""
import datetime

from Byeboros.data import mapper
from Byeboros.data import transactions
from Byeboros.status import status
from tests.base import BaseTestCase

EXPENSE_ROWS = [
    ['Coffee', 'Food', 'Medium', '50000', '', '2/15/2026 08:30:00', 'alice'],
    ['Lunch', 'Food', 'High', '75.000', '', '2/16/2026 12:00:00', 'alice'],
    ['Dinner', 'food', 'Low', 'Rp 120.000', '', '2/15/2026 19:00:00', 'bob'],
    ['Taxi', 'Transport', 'High', '30000', '', '2/10/2026 07:30:00', 'bob'],
]
INCOME_ROWS = [
    ['Salary', 'Gaji', '5000000', '', '2/16/2026 07:00:00', 'alice'],
]


class GroupTransactionsTests(BaseTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.records = mapper.map_transactions(EXPENSE_ROWS, INCOME_ROWS)

    def test_groups_follow_time_of_day_order(self):
        groups = transactions.group_transactions(self.records, clock=self.clock)

        # Dinner 19:00, Lunch 12:00, Coffee 08:30, Taxi 07:30, Salary 07:00
        self.assertEqual(
            [g.date for g in groups],
            [datetime.date(2026, 2, 15), datetime.date(2026, 2, 16), datetime.date(2026, 2, 10)]
        )
        self.assertEqual([r.description for r in groups[0].items], ['Dinner', 'Coffee'])
        self.assertEqual([r.description for r in groups[1].items], ['Lunch', 'Salary'])
        self.assertEqual([r.description for r in groups[2].items], ['Taxi'])

    def test_totals(self):
        groups = {g.date: g for g in transactions.group_transactions(self.records, clock=self.clock)}
        feb15 = groups[datetime.date(2026, 2, 15)]
        feb16 = groups[datetime.date(2026, 2, 16)]
        self.assertEqual(feb15.total_expense, 170000.0)
        self.assertEqual(feb15.total_income, 0.0)
        self.assertEqual(feb16.total_expense, 75000.0)
        self.assertEqual(feb16.total_income, 5000000.0)

    def test_labels(self):
        groups = {g.date: g for g in transactions.group_transactions(self.records, clock=self.clock)}
        self.assertEqual(groups[datetime.date(2026, 2, 16)].label, 'Hari Ini')
        self.assertEqual(groups[datetime.date(2026, 2, 15)].label, 'Kemarin')
        self.assertEqual(groups[datetime.date(2026, 2, 10)].label, '10 Feb 2026')

    def test_same_time_keeps_input_order(self):
        rows = [
            ['First', 'Food', '', '1', '', '2/14/2026 09:00:00', 'a'],
            ['Second', 'Food', '', '1', '', '2/14/2026 09:00:00', 'a'],
        ]
        groups = transactions.group_transactions(mapper.map_rows(rows, mapper.Kind.Expense), clock=self.clock)
        self.assertEqual([r.description for r in groups[0].items], ['First', 'Second'])

    def test_date_filter(self):
        for value in ('2026-02-15', datetime.date(2026, 2, 15)):
            with self.subTest(value=value):
                groups = transactions.group_transactions(self.records, date_filter=value, clock=self.clock)
                self.assertEqual(len(groups), 1)
                self.assertEqual(len(groups[0].items), 2)

    def test_invalid_date_filter(self):
        with self.assertRaises(status.InvalidFilterException):
            transactions.group_transactions(self.records, date_filter='15-02-2026', clock=self.clock)
        with self.assertRaises(status.InvalidFilterException):
            transactions.group_transactions(self.records, date_filter=20260215, clock=self.clock)

    def test_category_filter_is_case_insensitive(self):
        groups = transactions.group_transactions(self.records, category_filter='FOOD', clock=self.clock)
        descriptions = [r.description for g in groups for r in g.items]
        self.assertEqual(descriptions, ['Dinner', 'Lunch', 'Coffee'])

    def test_no_match(self):
        self.assertEqual(transactions.group_transactions(self.records, category_filter='Rent', clock=self.clock), [])
        self.assertEqual(transactions.group_transactions([], clock=self.clock), [])

    def test_idempotent(self):
        first = transactions.group_transactions(self.records, clock=self.clock)
        second = transactions.group_transactions(self.records, clock=self.clock)
        self.assertEqual(first, second)

    def test_to_dict(self):
        group = transactions.group_transactions(self.records, clock=self.clock)[1]
        data = group.to_dict()
        self.assertEqual(data['group_label'], 'Hari Ini')
        self.assertEqual(data['group_date'], '2026-02-16')
        self.assertEqual([t['id'] for t in data['items']], ['txn_exp_2', 'txn_inc_1'])
        self.assertEqual(data['items'][1]['label'], 'PEMASUKAN')
        self.assertEqual(set(data), {'group_label', 'group_date', 'total_expense', 'total_income', 'items'})
