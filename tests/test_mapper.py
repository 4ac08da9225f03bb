"""
Unit tests for Byeboros.data.mapper
(block mapping, sign conventions, positional ids, skipped rows).

Run with:
    python -m unittest tests.test_mapper
"""
import datetime

from Byeboros.data import mapper
from Byeboros.data.mapper import Kind
from Byeboros.settings import lib
from tests.base import BaseTestCase

COFFEE = ['Coffee', 'Food', 'Medium', '50000', '', '2/15/2026 08:30:00', 'alice']
SALARY = ['Salary', 'Gaji', 'Rp 5.000.000', 'February', '2/1/2026 09:00:00', 'bob']


class MapRowsTests(BaseTestCase):

    def test_expense_row(self):
        records = mapper.map_rows([COFFEE], Kind.Expense)
        self.assertEqual(len(records), 1)
        record = records[0]
        self.assertEqual(record.id, 'txn_exp_1')
        self.assertEqual(record.amount, -50000.0)
        self.assertEqual(record.kind, Kind.Expense)
        self.assertEqual(record.description, 'Coffee')
        self.assertEqual(record.category, 'Food')
        self.assertEqual(record.priority, 'Medium')
        self.assertEqual(record.author, 'alice')
        self.assertEqual(record.occurred_at, datetime.datetime(2026, 2, 15, 8, 30))
        self.assertEqual(record.date, datetime.date(2026, 2, 15))

    def test_income_row(self):
        record = mapper.map_rows([SALARY], Kind.Income)[0]
        self.assertEqual(record.id, 'txn_inc_1')
        self.assertEqual(record.amount, 5000000.0)
        self.assertEqual(record.notes, 'February')
        self.assertIsNone(record.priority)

    def test_sign_follows_kind(self):
        expense = mapper.map_rows([['Refund', 'Food', '', '-1.000', '', '2/15/2026', 'a']], Kind.Expense)[0]
        income = mapper.map_rows([['Fix', 'Gaji', '-1.000', '', '2/15/2026', 'a']], Kind.Income)[0]
        self.assertEqual(expense.amount, -1000.0)
        self.assertEqual(income.amount, 1000.0)

    def test_bad_amount_is_zero(self):
        record = mapper.map_rows([['Gift', 'Other', '', 'n/a', '', '2/15/2026', 'a']], Kind.Expense)[0]
        self.assertEqual(record.amount, 0.0)

    def test_skipped_rows_keep_their_position(self):
        rows = [
            ['Short', 'Food', 'High', '1000'],
            ['Bad date', 'Food', 'High', '1000', '', 'yesterday', 'a'],
            [],
            COFFEE,
        ]
        records = mapper.map_rows(rows, Kind.Expense)
        self.assertEqual([r.id for r in records], ['txn_exp_4'])

    def test_minimum_length(self):
        # Author is optional, the timestamp column is not
        expense = mapper.map_rows([COFFEE[:6]], Kind.Expense)
        income = mapper.map_rows([SALARY[:5]], Kind.Income)
        self.assertEqual(expense[0].author, '')
        self.assertEqual(income[0].author, '')
        self.assertEqual(mapper.map_rows([COFFEE[:5]], Kind.Expense), [])
        self.assertEqual(mapper.map_rows([SALARY[:4]], Kind.Income), [])

    def test_dropped_rows_are_logged(self):
        with self.assertLogs(level='WARNING') as cm:
            mapper.map_rows([['Short'], COFFEE], Kind.Expense)
        self.assertTrue(any('Dropped 1 malformed expense rows' in m for m in cm.output))

    def test_strict_rows_logs_each_row(self):
        lib.settings['strict_rows'] = True
        with self.assertLogs(level='WARNING') as cm:
            records = mapper.map_rows([['Short'], ['x', 'y', 'z', '1', '', 'bad', 'a'], COFFEE], Kind.Expense)
        self.assertEqual(len(records), 1)
        self.assertTrue(any('row 1 has 1 cells' in m for m in cm.output))
        self.assertTrue(any('row 2 has an unparseable timestamp' in m for m in cm.output))


class MapTransactionsTests(BaseTestCase):

    def test_independent_counters(self):
        records = mapper.map_transactions([COFFEE, COFFEE], [SALARY])
        self.assertEqual([r.id for r in records], ['txn_exp_1', 'txn_exp_2', 'txn_inc_1'])

    def test_unread_block(self):
        records = mapper.map_transactions(None, [SALARY])
        self.assertEqual([r.kind for r in records], [Kind.Income])
        self.assertEqual(mapper.map_transactions(None, None), [])


class ToDictTests(BaseTestCase):

    def test_expense(self):
        data = mapper.map_rows([COFFEE], Kind.Expense)[0].to_dict()
        self.assertEqual(data['id'], 'txn_exp_1')
        self.assertEqual(data['transaction_name'], 'Coffee')
        self.assertEqual(data['time'], '08:30')
        self.assertEqual(data['amount_display'], '-Rp 50.000')
        self.assertEqual(data['priority'], 'Medium')
        self.assertEqual(data['type'], 'expense')
        self.assertNotIn('label', data)

    def test_income_label(self):
        data = mapper.map_rows([SALARY], Kind.Income)[0].to_dict()
        self.assertEqual(data['label'], 'PEMASUKAN')
        self.assertEqual(data['amount_display'], '+Rp 5.000.000')
        self.assertNotIn('priority', data)
