"""Azure region display names and their canonical slugs"""
from typing import Dict, Optional

REGION_NAMES: Dict[str, str] = {
    "East US 2": "eastus2",
    "West US 2": "westus2",
    "South Central US": "southcentralus",
    "West Central US": "westcentralus",
    "East US": "eastus",
    "North Central US": "northcentralus",
    "North Europe": "northeurope",
    "Canada East": "canadaeast",
    "Central US": "centralus",
    "West US": "westus",
    "West Europe": "westeurope",
    "Central India": "centralindia",
    "Southeast Asia": "southeastasia",
    "Canada Central": "canadacentral",
    "Korea Central": "koreacentral",
    "France Central": "francecentral",
    "South India": "southindia",
    "Australia East": "australiaeast",
    "Australia Southeast": "australiasoutheast",
    "Japan West": "japanwest",
    "UK West": "ukwest",
    "UK South": "uksouth",
    "Japan East": "japaneast",
    "East Asia": "eastasia",
    "Brazil South": "brazilsouth",
}


def get_region_name(region: Optional[str]) -> Optional[str]:
    """Slug for a region display name, or None when the name is unknown"""
    if not region:
        return None
    return REGION_NAMES.get(region)
