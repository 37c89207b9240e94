#!/usr/bin/env python3
"""Check config.example.yaml against the configuration models."""

import sys
from pathlib import Path

import yaml

from notification_system.config import validate_config_file

EXPECTED_SECTIONS = ("mail", "broker", "http", "logging")


def verify_config_structure(config_file: Path = Path("config.example.yaml")) -> bool:
    """Verify the example file parses, validates and documents every section."""
    if not config_file.exists():
        print(f"✗ {config_file} not found")
        return False

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        print(f"✗ Failed to parse {config_file}: {e}")
        return False

    missing = [section for section in EXPECTED_SECTIONS if section not in config]
    if missing:
        print(f"✗ {config_file} is missing sections: {', '.join(missing)}")
        return False

    if not validate_config_file(config_file):
        return False

    mail = config["mail"]
    broker = config["broker"]
    print(f"  - Mail: {mail.get('max_retries')} attempts, {mail.get('retry_delay_ms')} ms apart")
    print(f"  - Broker: topic {broker.get('topic')}, group {broker.get('consumer_group')}")
    print(f"  - HTTP: {config['http'].get('host')}:{config['http'].get('port')}")
    return True


if __name__ == "__main__":
    sys.exit(0 if verify_config_structure() else 1)
