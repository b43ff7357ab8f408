"""
Static resource catalog.

Read-only lookup table keyed by ``(provider, resource type)``. Built once
per process by ``get_taxonomy()`` and never mutated afterwards.
"""

from enum import Enum
from functools import lru_cache
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from ...shared import UnknownResourceType
from .models import (
    Provider, ResourceCategory, ResourceType,
    AwsEc2Template, AwsS3Template, AwsRdsTemplate,
    AwsVpcTemplate, AwsLambdaTemplate, AwsElbTemplate,
    AzureVmTemplate, AzureBlobTemplate, AzureSqlTemplate,
    AzureVnetTemplate, AzureFunctionsTemplate, AzureLbTemplate,
    GcpComputeTemplate, GcpStorageTemplate, GcpSqlTemplate,
    GcpVpcTemplate, GcpFunctionsTemplate, GcpLbTemplate,
    K8sPodTemplate, K8sServiceTemplate, K8sDeploymentTemplate,
    K8sConfigMapTemplate, K8sSecretTemplate, K8sIngressTemplate,
)

ProviderLike = Union[Provider, str]


def _entry(provider: Provider, name: str, category: ResourceCategory, template) -> ResourceType:
    return ResourceType(provider=provider, name=name, category=category, template=template)


# Catalog order is the order the host shows the items in
DEFAULT_CATALOG: Tuple[ResourceType, ...] = (
    _entry(Provider.AWS, "EC2", ResourceCategory.COMPUTE, AwsEc2Template()),
    _entry(Provider.AWS, "S3", ResourceCategory.STORAGE, AwsS3Template()),
    _entry(Provider.AWS, "RDS", ResourceCategory.DATABASE, AwsRdsTemplate()),
    _entry(Provider.AWS, "VPC", ResourceCategory.NETWORK, AwsVpcTemplate()),
    _entry(Provider.AWS, "Lambda", ResourceCategory.SERVERLESS, AwsLambdaTemplate()),
    _entry(Provider.AWS, "ELB", ResourceCategory.LOADBALANCER, AwsElbTemplate()),

    _entry(Provider.AZURE, "VM", ResourceCategory.COMPUTE, AzureVmTemplate()),
    _entry(Provider.AZURE, "Blob", ResourceCategory.STORAGE, AzureBlobTemplate()),
    _entry(Provider.AZURE, "SQL", ResourceCategory.DATABASE, AzureSqlTemplate()),
    _entry(Provider.AZURE, "VNet", ResourceCategory.NETWORK, AzureVnetTemplate()),
    _entry(Provider.AZURE, "Functions", ResourceCategory.SERVERLESS, AzureFunctionsTemplate()),
    _entry(Provider.AZURE, "LB", ResourceCategory.LOADBALANCER, AzureLbTemplate()),

    _entry(Provider.GCP, "Compute", ResourceCategory.COMPUTE, GcpComputeTemplate()),
    _entry(Provider.GCP, "Storage", ResourceCategory.STORAGE, GcpStorageTemplate()),
    _entry(Provider.GCP, "SQL", ResourceCategory.DATABASE, GcpSqlTemplate()),
    _entry(Provider.GCP, "VPC", ResourceCategory.NETWORK, GcpVpcTemplate()),
    _entry(Provider.GCP, "Functions", ResourceCategory.SERVERLESS, GcpFunctionsTemplate()),
    _entry(Provider.GCP, "LB", ResourceCategory.LOADBALANCER, GcpLbTemplate()),

    _entry(Provider.KUBERNETES, "Pod", ResourceCategory.POD, K8sPodTemplate()),
    _entry(Provider.KUBERNETES, "Service", ResourceCategory.SERVICE, K8sServiceTemplate()),
    _entry(Provider.KUBERNETES, "Deployment", ResourceCategory.DEPLOYMENT, K8sDeploymentTemplate()),
    _entry(Provider.KUBERNETES, "ConfigMap", ResourceCategory.CONFIGMAP, K8sConfigMapTemplate()),
    _entry(Provider.KUBERNETES, "Secret", ResourceCategory.SECRET, K8sSecretTemplate()),
    _entry(Provider.KUBERNETES, "Ingress", ResourceCategory.INGRESS, K8sIngressTemplate()),
)


def _provider_key(provider: ProviderLike) -> str:
    return provider.value if isinstance(provider, Enum) else str(provider)


class ResourceTaxonomy:
    """
    Lookup service over the resource catalog.

    Instances are immutable once built; ``defaults_for`` always hands out a
    fresh mapping so callers never share template state.
    """

    def __init__(self, entries: Iterable[ResourceType] = DEFAULT_CATALOG):
        index: Dict[Tuple[str, str], ResourceType] = {}
        for entry in entries:
            key = (entry.provider.value, entry.name)
            if key in index:
                raise ValueError(f"Duplicate catalog entry: {entry.key}")
            index[key] = entry
        self._index = index

    def __contains__(self, key: Tuple[ProviderLike, str]) -> bool:
        provider, resource_type = key
        return (_provider_key(provider), resource_type) in self._index

    def __len__(self) -> int:
        return len(self._index)

    def lookup(self, provider: ProviderLike, resource_type: str) -> ResourceType:
        """Return the catalog entry or raise ``UnknownResourceType``."""
        entry = self._index.get((_provider_key(provider), resource_type))
        if entry is None:
            raise UnknownResourceType(_provider_key(provider), resource_type)
        return entry

    def defaults_for(self, provider: ProviderLike, resource_type: str) -> Dict[str, str]:
        return self.lookup(provider, resource_type).default_properties()

    def category_of(self, provider: ProviderLike, resource_type: str) -> ResourceCategory:
        return self.lookup(provider, resource_type).category

    def icon_for(self, provider: ProviderLike, resource_type: str) -> str:
        """Icon hint for the canvas; 'default' for anything not in the catalog."""
        try:
            return self.lookup(provider, resource_type).category.icon
        except UnknownResourceType:
            return "default"

    def resource_types(self, provider: Optional[ProviderLike] = None) -> Iterator[ResourceType]:
        """Iterate catalog entries in catalog order, optionally for one provider."""
        wanted = _provider_key(provider) if provider is not None else None
        for entry in self._index.values():
            if wanted is None or entry.provider.value == wanted:
                yield entry

    def providers(self) -> List[Provider]:
        seen: List[Provider] = []
        for entry in self._index.values():
            if entry.provider not in seen:
                seen.append(entry.provider)
        return seen


@lru_cache()
def get_taxonomy() -> ResourceTaxonomy:
    """
    Get the process-wide taxonomy.

    Built once from ``DEFAULT_CATALOG``; safe to share because it is never mutated.
    """
    return ResourceTaxonomy()
