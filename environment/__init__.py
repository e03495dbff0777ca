"""Azure Functions environment: region table and default labels"""
from .regions import REGION_NAMES, get_region_name
from .azure import get_default_dimensions, get_wrapper_version_string

__all__ = [
    'REGION_NAMES',
    'get_region_name',
    'get_default_dimensions',
    'get_wrapper_version_string'
]
