"""
Checklist Templates for the Offboarding Engine.

This module reads the offboarding templates configuration file and
builds the default checklists a new offboarding process is seeded with:
asset items to collect, settlement clearance items, systems to deactivate
and the catalogue of exit-interview reasons.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..models import AssetItem, SettlementItem, SystemAccess

logger = logging.getLogger(__name__)

TEMPLATES_FILENAME = "offboarding_templates.yaml"


class ChecklistTemplates:
    """
    Default checklists for new offboarding processes.

    Reads configuration from offboarding_templates.yaml. The ``default``
    section applies to everyone; a ``departments.<name>`` section adds
    items on top of it for employees of that department.
    """

    def __init__(self, templates_file: Optional[Union[str, Path]] = None):
        """
        Initialize the checklist templates.

        Args:
            templates_file: Path to the templates YAML file.
                           Defaults to the file shipped with the engine.
        """
        if templates_file is None:
            templates_file = Path(__file__).parent / TEMPLATES_FILENAME

        self.templates_file = Path(templates_file)
        self.templates: Dict[str, Any] = {}

        self._load_templates()

    def _load_templates(self):
        """Load templates from the YAML file."""
        if not self.templates_file.exists():
            logger.warning(f"Templates file not found: {self.templates_file}")
            return

        try:
            with open(self.templates_file, encoding="utf-8") as f:
                self.templates = yaml.safe_load(f) or {}
            logger.info(f"Loaded offboarding templates from {self.templates_file}")

        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load offboarding templates: {e}")
            raise

    def _section(self, name: str, department: Optional[str]) -> List[Dict[str, Any]]:
        """Default entries for a section, followed by department extras without duplicate ids."""
        entries = list(self.templates.get("default", {}).get(name, []))

        if department:
            dept_config = self.templates.get("departments", {}).get(department)
            if dept_config:
                seen = {e.get("id") for e in entries}
                entries.extend(e for e in dept_config.get(name, []) if e.get("id") not in seen)
            else:
                logger.debug(f"No template overrides for department: {department}")

        return entries

    def get_asset_items(self, department: Optional[str] = None) -> List[AssetItem]:
        """Assets every leaver has to return, none returned yet."""
        return [
            AssetItem(id=entry["id"], item=entry["item"])
            for entry in self._section("assets", department)
        ]

    def get_settlement_checklist(self, department: Optional[str] = None) -> List[SettlementItem]:
        """Financial clearance items, all pending."""
        return [
            SettlementItem(id=entry["id"], item=entry["item"])
            for entry in self._section("settlement", department)
        ]

    def get_systems(self, department: Optional[str] = None) -> List[SystemAccess]:
        """System accesses to close, none deactivated yet."""
        return [
            SystemAccess(id=entry["id"], name=entry["name"])
            for entry in self._section("systems", department)
        ]

    def get_exit_reasons(self) -> List[str]:
        """Catalogue of departure reasons offered in the exit interview."""
        return list(self.templates.get("exit_reasons", []))

    def get_all_departments(self) -> List[str]:
        """Get list of all departments with template overrides."""
        return list(self.templates.get("departments", {}).keys())

    def reload(self):
        """Reload the templates file."""
        logger.info("Reloading offboarding templates")
        self._load_templates()
