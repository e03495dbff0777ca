"""Default labels derived from the Azure Functions execution environment"""
from importlib import metadata
from typing import List, Optional
import structlog
from config import Config
from metrics.models import Label
from .regions import get_region_name

DISTRIBUTION_NAME = "signalfx-azure-function-wrapper"
UNDEFINED = "undefined"


def get_wrapper_version_string() -> Optional[str]:
    """'<distribution>-<version>' of the installed wrapper, or None"""
    try:
        return f"{DISTRIBUTION_NAME}-{metadata.version(DISTRIBUTION_NAME)}"
    except metadata.PackageNotFoundError:
        return None


def get_function_name(context) -> Optional[str]:
    return getattr(context, "function_name", None) if context is not None else None


def get_invocation_id(context) -> Optional[str]:
    return getattr(context, "invocation_id", None) if context is not None else None


def get_default_dimensions(context, config: Config,
                           logger: structlog.stdlib.BoundLogger) -> List[Label]:
    """Identifying labels attached to every measurement of one invocation

    Missing values are logged as warnings and reported as 'undefined'.
    """
    dimensions: List[Label] = []

    region = get_region_name(config.region_name)
    if region:
        dimensions.append(("azure_region", region))
    else:
        logger.warning("region undefined", region_name=config.region_name)
        dimensions.append(("azure_region", UNDEFINED))

    function_name = get_function_name(context)
    if function_name:
        dimensions.append(("azure_function_name", function_name))
    else:
        logger.warning("function name undefined")
        dimensions.append(("azure_function_name", UNDEFINED))

    resource_name = config.resource_name
    if resource_name:
        dimensions.append(("azure_resource_name", resource_name))
    else:
        logger.warning("azure resource name undefined")
        dimensions.append(("azure_resource_name", UNDEFINED))

    dimensions.append(("function_wrapper_version", get_wrapper_version_string() or UNDEFINED))
    dimensions.append(("is_Azure_Function", "true"))
    dimensions.append(("metric_source", "azure_function_wrapper"))
    return dimensions
