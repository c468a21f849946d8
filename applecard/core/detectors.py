"""
Template loading and detection.
"""
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List, Union
import logging

from .loader import read_lines
from .anchors import find_anchors
from .errors import LineSourceError

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_ID = "apple_card_v1"


class TemplateDetector:
    """Detects which template matches a statement."""

    def __init__(self, templates_dir: Path = None):
        self.templates_dir = templates_dir or Path(__file__).parent.parent / "templates"
        self.templates = {}
        self._load_templates()

    def _load_templates(self):
        """Load all available templates."""
        if not self.templates_dir.exists():
            logger.warning(f"Templates directory not found: {self.templates_dir}")
            return

        for yaml_file in sorted(self.templates_dir.glob("*.yaml")):
            try:
                with open(yaml_file, 'r', encoding='utf-8') as f:
                    template_data = yaml.safe_load(f)
                if not isinstance(template_data, dict):
                    logger.error(f"Error loading template {yaml_file}: expected a mapping")
                    continue
                template_id = template_data.get('template_id')
                if template_id:
                    self.templates[template_id] = template_data
                    logger.debug(f"Loaded template: {template_id}")
            except (OSError, yaml.YAMLError) as e:
                logger.error(f"Error loading template {yaml_file}: {e}")

    def detect_template(self, lines: List[str]) -> Optional[str]:
        """
        Detect which template matches the statement lines.

        Args:
            lines: Statement text lines

        Returns:
            Template ID if found, None otherwise
        """
        if not lines:
            logger.error("No lines to match against")
            return None

        for template_id, template_config in self.templates.items():
            if self._matches_template(lines, template_config):
                logger.info(f"Statement matches template: {template_id}")
                return template_id

        logger.warning("No matching template found")
        return None

    def _matches_template(self, lines: List[str], template_config: Dict[str, Any]) -> bool:
        """
        Check if lines contain every anchor a template requires.

        Args:
            lines: Statement text lines
            template_config: Template configuration

        Returns:
            True if template matches, False otherwise
        """
        page_match = template_config.get('page_match', {})
        must_contain = page_match.get('must_contain', [])
        fuzzy_threshold = page_match.get('fuzzy_threshold', 85)

        if not must_contain:
            logger.warning("Template has no 'must_contain' requirements")
            return False

        found_anchors = find_anchors(lines, must_contain, fuzzy_threshold)
        if len(found_anchors) == len(must_contain):
            return True

        logger.debug(f"Template mismatch: found {len(found_anchors)}/{len(must_contain)} required anchors")
        return False

    def get_template(self, template_id: str) -> Optional[Dict[str, Any]]:
        """Get template configuration by ID."""
        return self.templates.get(template_id)

    def list_templates(self) -> List[str]:
        """List all available template IDs."""
        return list(self.templates.keys())


def detect_template(pdf_path: Union[str, Path]) -> Optional[str]:
    """
    Convenience function to detect the template for a PDF.

    Args:
        pdf_path: Path to PDF file

    Returns:
        Template ID if found, None otherwise
    """
    try:
        lines = read_lines(pdf_path)
    except LineSourceError as e:
        logger.error(f"Error detecting template: {e}")
        return None

    return TemplateDetector().detect_template(lines)
