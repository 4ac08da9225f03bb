"""
Unit tests for Byeboros.settings.lib and Byeboros.settings.locale
(validators, ConfigPaths, SettingsAPI and the Babel helpers).

Run with:
    python -m unittest tests.test_settings
"""
import copy
import json
from typing import Any, Dict

from Byeboros.settings import lib
from Byeboros.settings import locale
from Byeboros.status import status
from tests.base import BaseTestCase


def template_ledger() -> Dict[str, Any]:
    with lib.settings.ledger_template.open('r', encoding='utf-8') as f:
        return json.load(f)


class HelperTests(BaseTestCase):

    def test_is_valid_a1_range(self):
        for value in ('A2:G', 'P2', 'E2:E3', 'A:F', 'AA10:AB'):
            with self.subTest(value=value):
                self.assertTrue(lib.is_valid_a1_range(value))
        for value in ('', 'Februari!A2:G', 'a2:g', '2:3', 'A2:', None):
            with self.subTest(value=value):
                self.assertFalse(lib.is_valid_a1_range(value))


class ConfigPathsTests(BaseTestCase):

    def test_paths_follow_environment(self):
        self.assertEqual(str(lib.settings.config_dir), self.config_dir)
        self.assertTrue(lib.settings.ledger_path.exists())
        self.assertTrue(lib.settings.auth_dir.is_dir())
        self.assertEqual(lib.settings.creds_path.parent, lib.settings.auth_dir)

    def test_ledger_is_copied_from_template(self):
        with lib.settings.ledger_path.open('r', encoding='utf-8') as f:
            self.assertEqual(json.load(f), template_ledger())


class ValidationTests(BaseTestCase):

    def test_template_is_valid(self):
        lib.settings.validate_ledger_data(template_ledger())

    def test_missing_section(self):
        data = template_ledger()
        del data['layout']
        with self.assertRaises(ValueError):
            lib.settings.validate_ledger_data(data)

    def test_invalid_values(self):
        cases = [
            ('layout', 'expense_block', 'Februari!A2:G', ValueError),
            ('layout', 'expense_total', 5, TypeError),
            ('labels', 'today', None, TypeError),
            ('metadata', 'timezone', 'Mars/Olympus', ValueError),
            ('metadata', 'value_render_option', 'RAW', ValueError),
            ('metadata', 'strict_rows', 'yes', TypeError),
            ('spreadsheet', 'category_sheet', 1, TypeError),
        ]
        for section, key, value, error in cases:
            with self.subTest(section=section, key=key):
                data = copy.deepcopy(template_ledger())
                data[section][key] = value
                with self.assertRaises(error):
                    lib.settings.validate_ledger_data(data)

    def test_missing_layout_key(self):
        data = template_ledger()
        del data['layout']['income_master']
        with self.assertRaises(ValueError):
            lib.settings.validate_ledger_data(data)

    def test_invalid_file_raises_status(self):
        lib.settings.ledger_path.write_text('{"spreadsheet": {}}', encoding='utf-8')
        with self.assertRaises(status.LedgerConfigInvalidException):
            lib.settings.load_ledger()

    def test_missing_file_raises_status(self):
        lib.settings.ledger_path.unlink()
        with self.assertRaises(status.LedgerConfigNotFoundException):
            lib.settings.load_ledger()


class SettingsAPITests(BaseTestCase):

    def test_metadata_access(self):
        self.assertEqual(lib.settings['locale'], 'id_ID')
        self.assertEqual(lib.settings['timezone'], 'Asia/Jakarta')
        self.assertEqual(lib.settings['currency_symbol'], 'Rp')
        self.assertFalse(lib.settings['strict_rows'])
        with self.assertRaises(KeyError):
            lib.settings['theme']

    def test_metadata_is_persisted(self):
        lib.settings['strict_rows'] = True
        reloaded = lib.SettingsAPI()
        self.assertTrue(reloaded['strict_rows'])

    def test_set_section_rolls_back(self):
        layout = lib.settings.get_section('layout')
        bad = dict(layout, expense_block='not a range')
        with self.assertRaises(ValueError):
            lib.settings.set_section('layout', bad)
        self.assertEqual(lib.settings.get_section('layout'), layout)

    def test_set_and_revert_section(self):
        lib.settings.set_section('spreadsheet', {'id': 'abc', 'category_sheet': 'Anggaran', 'master_sheet': 'Master'})
        self.assertEqual(lib.SettingsAPI().get_section('spreadsheet')['id'], 'abc')

        lib.settings.revert_section('spreadsheet')
        self.assertEqual(lib.SettingsAPI().get_section('spreadsheet'), template_ledger()['spreadsheet'])

    def test_unknown_section(self):
        with self.assertRaises(ValueError):
            lib.settings.set_section('headers', {})
        with self.assertRaises(KeyError):
            lib.settings.get_section('headers')

    def test_get_section_returns_copy(self):
        labels = lib.settings.get_section('labels')
        labels['today'] = 'Today'
        self.assertEqual(lib.settings.get_section('labels')['today'], 'Hari Ini')


class LocaleTests(BaseTestCase):

    def test_month_names(self):
        names = locale.month_names('id_ID')
        self.assertEqual(len(names), 12)
        self.assertEqual(names[0], 'Januari')
        self.assertEqual(names[11], 'Desember')

    def test_grouped_integer(self):
        self.assertEqual(locale.format_grouped_integer(1234567, 'id_ID'), '1.234.567')
        self.assertEqual(locale.format_grouped_integer(1234567, 'en_US'), '1,234,567')

    def test_unknown_locale_falls_back(self):
        self.assertEqual(locale.format_grouped_integer(1000, 'xx_INVALID'), '1.000')
