"""
apigen Integration

Config-driven entry point: takes an API description (or a FastAPI app to
introspect), generates the TypeScript client module and writes it to the
configured location.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from fastapi import FastAPI

from apigen.core.schema import API
from apigen.core.config import load_apigen_config, ApigenConfig
from apigen.introspection.routes import introspect_app
from apigen.generators.typescript.pipeline import generate_typescript, write_generated_file


logger = logging.getLogger(__name__)


def integrate(
    target: Union[API, FastAPI],
    project_root: Optional[str] = None,
    output: Optional[str] = None,
    verbose: bool = False,
    config: Optional[ApigenConfig] = None
) -> Tuple[API, str]:
    """
    Generate and write the TypeScript client for an API or a FastAPI app.

    Args:
        target: API description, or FastAPI application to introspect
        project_root: Project root directory (defaults to current directory)
        output: Output file path, overriding the configured one
            (relative paths are resolved against project_root)
        verbose: Enable detailed logging output
        config: Configuration to use instead of apigen.config.json

    Returns:
        Tuple[API, str]:
            - API: The description that was generated from
            - str: Generated module content

    Raises:
        SchemaConflictError: Conflicting type names or client classes
        TemplateMismatchError: Path templates that disagree with their parameters
        WriteError: The output file could not be written
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s: %(message)s')

    if project_root is None:
        project_root = str(Path.cwd().resolve())
    else:
        project_root = str(Path(project_root).resolve())

    if config is None:
        config = load_apigen_config(project_root)

    if isinstance(target, FastAPI):
        api = introspect_app(target, version=config.version, base_path=config.basePath)
    else:
        api = target

    output_path = Path(output) if output else Path(config.get_output_location(project_root))
    if not output_path.is_absolute():
        output_path = Path(project_root) / output_path

    if verbose:
        logger.info("Starting apigen generation")
        logger.debug(f"Project root: {project_root}")
        logger.debug(f"Output path: {output_path}")
        logger.debug(f"Root path: {api.endpoint_base_path}")

    content = generate_typescript(api, config)
    write_generated_file(str(output_path), content)

    endpoint_count = len(api.all_endpoints())
    group_count = len(api.endpoint_groups)
    if verbose:
        logger.info(f"Generation complete: {group_count} groups, {endpoint_count} endpoints")
    else:
        print(f"apigen: Generated {output_path} ({group_count} clients, {endpoint_count} endpoints)")

    return api, content
