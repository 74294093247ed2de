"""
L4 Execution: Config file generation.

Renders the application's ``config.yaml`` from a template. An existing
config is never overwritten: the new one is written beside it as
``config.yaml.new``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from remembrances_installer.core.services.install.data.config_template import (
    CONFIG_TEMPLATE,
)
from remembrances_installer.core.services.install.execution.file_install import (
    InstallLayout,
)

logger = logging.getLogger(__name__)


def render_template(template: str, inputs: dict) -> str:
    """Substitute ``{var}`` placeholders with input values.

    Simple string replacement: no Jinja, no escaping. Unknown
    placeholders are left as-is.
    """
    result = template
    for key, value in inputs.items():
        result = result.replace(f"{{{key}}}", str(value))
    return result


def config_inputs(layout: InstallLayout, model_name: str, now: datetime | None = None) -> dict:
    """Template values derived from the install layout."""
    return {
        "generated_at": (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S"),
        "kb_path": layout.data_dir / "knowledge-base",
        "db_path": f"surrealkv://{layout.data_dir / 'remembrances.db'}",
        "model_path": layout.models_dir / model_name,
        "log_path": layout.data_dir / "remembrances-mcp.log",
    }


def write_config(layout: InstallLayout, model_name: str, now: datetime | None = None) -> Path:
    """Create the knowledge-base dir and write the rendered config.

    Returns:
        The path actually written (``config.yaml`` or ``config.yaml.new``).
    """
    inputs = config_inputs(layout, model_name, now)
    Path(inputs["kb_path"]).mkdir(parents=True, exist_ok=True)
    layout.config_dir.mkdir(parents=True, exist_ok=True)

    config_file = layout.config_dir / "config.yaml"
    if config_file.exists():
        logger.warning("Configuration file already exists at %s", config_file)
        config_file = layout.config_dir / "config.yaml.new"
        logger.warning("Saving new config as %s", config_file)

    config_file.write_text(render_template(CONFIG_TEMPLATE, inputs), encoding="utf-8")
    logger.info("Configuration created at %s", config_file)
    return config_file
