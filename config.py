import logging
import os
from datetime import datetime, time
from typing import Dict, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from models import Zone
from price_fetcher import DEFAULT_BASE_URL

logger = logging.getLogger(__name__)

DEFAULTS = {
    'zone': None,
    'api_base_url': DEFAULT_BASE_URL,
    'request_timeout': 10,
    'tomorrow_cutoff': '13:00',
    'timezone': 'Europe/Stockholm',
    'allowed_charging_hours': [2, 4, 8],
    'log_file': None,
}


def load_env(env_path: str = '.env') -> None:
    if os.path.exists(env_path):
        with open(env_path) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith('#') and '=' in line:
                    key, value = line.split('=', 1)
                    os.environ[key] = value


class Config:
    def __init__(self, config_path: str = 'config.yaml'):
        self.config_path = config_path
        load_env()
        self.data = self.load_config()
        self.validate_config()

    def load_config(self) -> Dict:
        data = dict(DEFAULTS)
        if os.path.exists(self.config_path):
            with open(self.config_path) as f:
                try:
                    loaded = yaml.safe_load(f) or {}
                except yaml.YAMLError as e:
                    raise ValueError(f"Cannot parse {self.config_path}: {e}") from e
            if not isinstance(loaded, dict):
                raise ValueError(f"{self.config_path} must contain a mapping of settings")
            data.update(loaded)
        else:
            logger.debug(f"config.load path={self.config_path} found=false using=defaults")
        # Override with environment variables if available
        env_keys = ['zone', 'api_base_url']
        for key in env_keys:
            env_key = key.upper()
            if env_key in os.environ:
                data[key] = os.environ[env_key]
        return data

    def validate_config(self) -> None:
        if self.data['zone'] is not None:
            Zone.parse(str(self.data['zone']))
        try:
            datetime.strptime(str(self.data['tomorrow_cutoff']), '%H:%M')
        except ValueError:
            raise ValueError(f"tomorrow_cutoff must be HH:MM, got {self.data['tomorrow_cutoff']!r}") from None
        try:
            ZoneInfo(str(self.data['timezone']))
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone {self.data['timezone']!r}") from None
        hours = self.data['allowed_charging_hours']
        if not isinstance(hours, list) or not hours \
                or any(isinstance(h, bool) or not isinstance(h, int) or h <= 0 for h in hours):
            raise ValueError(f"allowed_charging_hours must be positive whole hours, got {hours!r}")
        try:
            timeout = float(self.data['request_timeout'])
        except (TypeError, ValueError):
            timeout = 0
        if timeout <= 0:
            raise ValueError("request_timeout must be a positive number of seconds")

    @property
    def zone(self) -> Optional[Zone]:
        return Zone.parse(str(self.data['zone'])) if self.data['zone'] is not None else None

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(str(self.data['timezone']))

    @property
    def tomorrow_cutoff(self) -> time:
        return datetime.strptime(str(self.data['tomorrow_cutoff']), '%H:%M').time()

    @property
    def allowed_charging_hours(self) -> Tuple[int, ...]:
        return tuple(self.data['allowed_charging_hours'])

    def __getitem__(self, key):
        return self.data[key]

    def get(self, key, default=None):
        return self.data.get(key, default)
