"""Settings library for the ledger configuration.

Provides:
    - Schema validation and enforcement for ledger.json structure.
    - Loading, saving, reverting, and managing the service settings.
    - Paths of the configuration and credential files.
    - Constants for the sheet layout and the metadata keys.
"""

import json
import logging
import os
import pathlib
import re
import shutil
from typing import Dict, Any, Optional, List

from ..status import status

app_name: str = 'Byeboros'

CONFIG_DIR_ENV_KEY: str = 'BYEBOROS_CONFIG_DIR'
SERVICE_ACCOUNT_ENV_KEY: str = 'GOOGLE_SERVICE_ACCOUNT_FILE'

# Matches 'A2:G', 'P2', 'E2:E3', 'A:F' - column letters with an optional row number
A1_RANGE_PATTERN: str = r'[A-Z]{1,3}[0-9]*(:[A-Z]{1,3}[0-9]*)?'

VALUE_RENDER_OPTIONS: List[str] = ['FORMATTED_VALUE', 'UNFORMATTED_VALUE', 'FORMULA']

METADATA_KEYS: List[str] = [
    'locale',
    'timezone',
    'currency_symbol',
    'strict_rows',
    'value_render_option',
]

LAYOUT_KEYS: List[str] = [
    'expense_block',
    'income_block',
    'expense_total',
    'expense_categories',
    'expense_priorities',
    'income_total',
    'income_master',
    'budget_categories',
    'budget_cells',
]

LABEL_KEYS: List[str] = [
    'today',
    'yesterday',
    'income',
    'high',
    'medium',
    'low',
    'other',
    'daily_average',
]

LEDGER_SCHEMA: Dict[str, Any] = {
    'spreadsheet': {
        'type': dict,
        'required': True,
        'item_schema': {
            'id': {'type': str, 'required': False},
            'category_sheet': {'type': str, 'required': True},
            'master_sheet': {'type': str, 'required': True},
        }
    },
    'metadata': {
        'type': dict,
        'required': True,
        'required_keys': METADATA_KEYS,
        'item_schema': {
            'locale': {'type': str, 'required': True},
            'timezone': {'type': str, 'required': True},
            'currency_symbol': {'type': str, 'required': True},
            'strict_rows': {'type': bool, 'required': True},
            'value_render_option': {'type': str, 'required': True},
        }
    },
    'layout': {
        'type': dict,
        'required': True,
        'required_keys': LAYOUT_KEYS,
        'value_type': str,
    },
    'labels': {
        'type': dict,
        'required': True,
        'required_keys': LABEL_KEYS,
        'value_type': str,
    },
}


def is_valid_a1_range(value: str) -> bool:
    """Check if a string is a sheet-less A1 range such as 'A2:G' or 'P2'.

    Args:
        value (str): Range string to validate.

    Returns:
        bool: True if value is a valid range, False otherwise.
    """
    return bool(re.fullmatch(A1_RANGE_PATTERN, value or ''))


def _validate_item_schema(section: str, section_dict: Dict[str, Any], item_schema: Dict[str, Any]) -> None:
    """Validate the fields of a section against its item schema.

    Args:
        section: Name of the section, used in error messages.
        section_dict: The section data.
        item_schema: Dict describing required fields and their types.

    Raises:
        ValueError: If a required field is missing.
        TypeError: If a field is of the wrong type.
    """
    logging.debug(f'Validating "{section}" section.')
    for field, field_specs in item_schema.items():
        if field_specs['required'] and field not in section_dict:
            msg = f'"{section}" is missing "{field}".'
            logging.error(msg)
            raise ValueError(msg)
        if field not in section_dict:
            continue
        if not isinstance(section_dict[field], field_specs['type']):
            msg = (
                f'"{section}" field "{field}" must be {field_specs["type"]}, '
                f'got {type(section_dict[field])}.'
            )
            logging.error(msg)
            raise TypeError(msg)


def _validate_metadata(metadata_dict: Dict[str, Any], specs: Dict[str, Any]) -> None:
    """Validate the 'metadata' section of the ledger configuration.

    Args:
        metadata_dict: The metadata section.
        specs: Schema dict containing 'item_schema'.

    Raises:
        ValueError: If a key is missing, the timezone is unknown or the render option is invalid.
        TypeError: If a value is of the wrong type.
    """
    _validate_item_schema('metadata', metadata_dict, specs['item_schema'])

    if metadata_dict['value_render_option'] not in VALUE_RENDER_OPTIONS:
        msg = f'value_render_option must be one of {VALUE_RENDER_OPTIONS}.'
        logging.error(msg)
        raise ValueError(msg)

    import zoneinfo
    try:
        zoneinfo.ZoneInfo(metadata_dict['timezone'])
    except (zoneinfo.ZoneInfoNotFoundError, ValueError) as ex:
        msg = f'Unknown timezone "{metadata_dict["timezone"]}".'
        logging.error(msg)
        raise ValueError(msg) from ex


def _validate_string_map(section: str, section_dict: Dict[str, Any], specs: Dict[str, Any]) -> None:
    """Validate a section that maps a fixed set of keys to strings.

    Layout values must also be valid A1 ranges.

    Args:
        section: Name of the section.
        section_dict: The section data.
        specs: Schema dict containing 'required_keys' and 'value_type'.

    Raises:
        ValueError: If keys are missing or a layout value is not a range.
        TypeError: If a value is not a string.
    """
    logging.debug(f'Validating "{section}" section.')
    missing = [k for k in specs['required_keys'] if k not in section_dict]
    if missing:
        msg = f'"{section}" is missing keys {missing}.'
        logging.error(msg)
        raise ValueError(msg)

    for key, val in section_dict.items():
        if not isinstance(val, specs['value_type']):
            msg = f'All "{section}" values must be strings, "{key}" is {type(val)}.'
            logging.error(msg)
            raise TypeError(msg)
        if section == 'layout' and not is_valid_a1_range(val):
            msg = f'Layout "{key}" must be an A1 range without a sheet name, got "{val}".'
            logging.error(msg)
            raise ValueError(msg)


class ConfigPaths:
    """Manage the configuration file paths and ensure the default template exists.

    The config directory is read from the ``BYEBOROS_CONFIG_DIR`` environment variable,
    and defaults to ``~/.byeboros``.
    """

    def __init__(self) -> None:
        """Set up the paths and ensure required directories and templates exist."""
        p = os.environ.get(CONFIG_DIR_ENV_KEY, '')
        self.config_dir: pathlib.Path = pathlib.Path(p) if p else pathlib.Path.home() / f'.{app_name.lower()}'
        logging.debug(f'Using config directory: {self.config_dir}')

        self.template_dir: pathlib.Path = pathlib.Path(__file__).parent.parent / 'config'
        self.ledger_template: pathlib.Path = self.template_dir / 'ledger.json.template'

        self.auth_dir: pathlib.Path = self.config_dir / 'auth'

        # Config files
        self.ledger_path: pathlib.Path = self.config_dir / 'ledger.json'
        self.creds_path: pathlib.Path = self.auth_dir / 'creds.json'

        service_account = os.environ.get(SERVICE_ACCOUNT_ENV_KEY, '')
        self.service_account_path: pathlib.Path = (
            pathlib.Path(service_account) if service_account else self.auth_dir / 'service_account.json'
        )

        self._verify_and_prepare()

    def _verify_and_prepare(self) -> None:
        """Verify the template exists and prepare the configuration directories and files.

        Raises:
            FileNotFoundError: If the ledger template is missing.
        """
        if not self.ledger_template.exists():
            msg = f'Missing ledger template: {self.ledger_template}'
            logging.error(msg)
            raise FileNotFoundError(msg)

        if not self.auth_dir.exists():
            logging.debug(f'Creating auth directory: {self.auth_dir}')
            self.auth_dir.mkdir(parents=True, exist_ok=True)

        # Ensure a valid ledger exists even if we haven't yet set it up
        if not self.ledger_path.exists():
            logging.debug(f'Copying default ledger from template to {self.ledger_path}')
            shutil.copy(self.ledger_template, self.ledger_path)

    def revert_ledger_to_template(self) -> None:
        """Restore ledger.json from the default template file."""
        logging.debug(f'Reverting ledger to template: {self.ledger_template}')
        shutil.copy(self.ledger_template, self.ledger_path)


class SettingsAPI(ConfigPaths):
    """
    Provides an interface to get/set/revert/save ledger.json sections.
    """

    def __init__(self, ledger_path: Optional[str] = None) -> None:
        """Initialize SettingsAPI and load the ledger data.

        Args:
            ledger_path: Optional path to a custom ledger.json file.
        """
        super().__init__()

        self.ledger_path: pathlib.Path = pathlib.Path(ledger_path) if ledger_path else self.ledger_path

        self.ledger_data: Dict[str, Any] = {}
        for k in LEDGER_SCHEMA.keys():
            self.ledger_data[k] = {}

        self.load_ledger()

    def __getitem__(self, key: str) -> Any:
        """Retrieve a metadata value using dictionary-style access.

        Args:
            key: Metadata key to retrieve.

        Returns:
            Value stored for the metadata key.

        Raises:
            KeyError: If key is not in METADATA_KEYS.
        """
        if key not in METADATA_KEYS:
            raise KeyError(f'Invalid metadata key: {key}, must be one of {METADATA_KEYS}')

        _type = LEDGER_SCHEMA['metadata']['item_schema'][key]['type']
        v = self.ledger_data['metadata'].get(key)

        if not isinstance(v, _type):
            logging.error(f'Metadata key "{key}" is not of type {_type}, got {type(v)}.')
            return None

        return v

    def __setitem__(self, key: str, value: Any) -> None:
        """Assign a metadata value using dictionary-style access and persist it.

        Args:
            key: Metadata key to set.
            value: Value to assign to the metadata key.

        Raises:
            KeyError: If key is not in METADATA_KEYS.
        """
        if key not in METADATA_KEYS:
            raise KeyError(f'Invalid metadata key: {key}, must be one of {METADATA_KEYS}')

        _type = LEDGER_SCHEMA['metadata']['item_schema'][key]['type']
        if not isinstance(value, _type):
            logging.warning(f'Metadata key "{key}" is not of type {_type}, got {type(value)}.')
            value = _type(value)

        data = self.ledger_data['metadata'].copy()
        data[key] = value
        self.set_section('metadata', data)

    def load_ledger(self) -> Dict[str, Any]:
        """Load ledger.json from disk and validate against schema.

        Returns:
            The loaded ledger data dictionary.

        Raises:
            status.LedgerConfigNotFoundException: If ledger.json file is missing.
            status.LedgerConfigInvalidException: If JSON parsing or validation fails.
        """
        logging.debug(f'Loading ledger from "{self.ledger_path}"')
        if not self.ledger_path.exists():
            raise status.LedgerConfigNotFoundException(str(self.ledger_path))

        try:
            with self.ledger_path.open('r', encoding='utf-8') as f:
                data: Dict[str, Any] = json.load(f)
            self.validate_ledger_data(data=data)
        except (ValueError, TypeError) as ex:
            raise status.LedgerConfigInvalidException(str(ex)) from ex

        self.ledger_data = data
        return self.ledger_data

    def validate_ledger_data(self, data: Dict[str, Any] = None) -> None:
        """Validate ledger data against the defined LEDGER_SCHEMA.

        Args:
            data (dict, optional): Ledger data to validate. Defaults to self.ledger_data.

        Raises:
            ValueError: If data is empty, a required section is missing or a value is invalid.
            TypeError: If a section or value is of the wrong type.
        """
        if data is None:
            data = self.ledger_data
        if not data:
            raise ValueError('Ledger data is empty.')

        logging.debug('Validating ledger data against schema.')
        for field, specs in LEDGER_SCHEMA.items():
            if specs.get('required') and field not in data:
                raise ValueError(f'Missing required field: {field}')

            if field not in data:
                continue

            if not isinstance(data[field], specs['type']):
                raise TypeError(f'Field "{field}" must be {specs["type"]}, got {type(data[field])}.')

            if field == 'spreadsheet':
                _validate_item_schema(field, data[field], specs['item_schema'])
            elif field == 'metadata':
                _validate_metadata(data[field], specs)
            elif field in ('layout', 'labels'):
                _validate_string_map(field, data[field], specs)

        logging.debug('Ledger data is valid.')

    def get_section(self, section_name: str) -> Dict[str, Any]:
        """Retrieve a copy of configuration data for a ledger section.

        Args:
            section_name: Section name, a key of the ledger schema.

        Returns:
            A copied dict of the requested section data.

        Raises:
            KeyError: If section_name is not in ledger_data.
        """
        return self.ledger_data[section_name].copy()

    def set_section(self, section_name: str, new_data: Dict[str, Any]) -> None:
        """Replace, validate and persist a configuration section.

        The previous section data is restored if validation fails.

        Args:
            section_name: Section to update.
            new_data: New data dict for the section.

        Raises:
            ValueError: If section_name is unrecognized or the data is invalid.
            TypeError: If the data contains values of the wrong type.
        """
        if section_name not in LEDGER_SCHEMA:
            msg = f'Unknown section_name for set: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        current_section_data: Dict[str, Any] = self.ledger_data.get(section_name, {}).copy()

        self.ledger_data[section_name] = new_data
        try:
            self.validate_ledger_data()
        except (ValueError, TypeError) as e:
            logging.error(f'Validation error on set_section("{section_name}"): {e}')
            self.ledger_data[section_name] = current_section_data
            raise
        self.save_section(section_name)

    def revert_section(self, section_name: str) -> None:
        """Revert a configuration section to its template default and save.

        Args:
            section_name: Section to revert.

        Raises:
            ValueError: If section_name is invalid.
        """
        if section_name not in LEDGER_SCHEMA:
            msg = f'Unknown section_name for revert: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        with self.ledger_template.open('r', encoding='utf-8') as f:
            template_data: Dict[str, Any] = json.load(f)

        self.ledger_data[section_name] = template_data[section_name]
        self.save_section(section_name)

    def save_section(self, section_name: str) -> None:
        """Persist a single configuration section to the ledger file.

        Args:
            section_name: The section to save.

        Raises:
            ValueError: If section_name is not recognized.
        """
        if section_name not in LEDGER_SCHEMA:
            msg = f'Unknown section_name for save: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        with self.ledger_path.open('r', encoding='utf-8') as f:
            original_data: Dict[str, Any] = json.load(f)

        new_data: Dict[str, Any] = original_data.copy()
        new_data[section_name] = self.ledger_data[section_name]

        with self.ledger_path.open('w', encoding='utf-8') as f:
            json.dump(new_data, f, indent=4, ensure_ascii=False)
        logging.debug(f'Saved section "{section_name}" to "{self.ledger_path}"')


settings: SettingsAPI = SettingsAPI()
