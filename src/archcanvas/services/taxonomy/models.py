"""
Taxonomy models: providers, categories and typed default templates.

Each ``(provider, resource type)`` pair owns a template model. The models
are joined in a discriminated union keyed by ``kind`` so lookups stay typed;
they are flattened to ``Dict[str, str]`` only when copied into a node.
"""

from enum import Enum
from typing import Annotated, Dict, Literal, Union

from pydantic import ConfigDict, Field

from ...shared.models.base import BaseModel


class Provider(str, Enum):
    """Cloud or platform namespaces offered by the catalog."""
    AWS = "AWS"
    AZURE = "Azure"
    GCP = "GCP"
    KUBERNETES = "Kubernetes"


class ResourceCategory(str, Enum):
    """Semantic category used by the connection policy."""
    COMPUTE = "compute"
    STORAGE = "storage"
    DATABASE = "database"
    NETWORK = "network"
    SERVERLESS = "serverless"
    LOADBALANCER = "loadbalancer"
    POD = "orchestration-pod"
    SERVICE = "orchestration-service"
    DEPLOYMENT = "orchestration-deployment"
    CONFIGMAP = "orchestration-configmap"
    SECRET = "orchestration-secret"
    INGRESS = "orchestration-ingress"

    @property
    def icon(self) -> str:
        """Short icon hint, e.g. 'pod' for orchestration-pod."""
        return self.value.split("-", 1)[-1]


class ResourceTemplate(BaseModel):
    """Base for default configuration templates."""

    model_config = ConfigDict(frozen=True)

    def as_properties(self) -> Dict[str, str]:
        """Fresh, independent ordered mapping of the template values."""
        return {key: value for key, value in self.model_dump().items() if key != "kind"}


# === AWS ===

class AwsEc2Template(ResourceTemplate):
    kind: Literal["AWS/EC2"] = "AWS/EC2"
    instance_type: str = "t2.micro"
    ami: str = "ami-0c55b159cbfafe1f0"
    region: str = "us-east-1"


class AwsS3Template(ResourceTemplate):
    kind: Literal["AWS/S3"] = "AWS/S3"
    bucket_name: str = ""
    region: str = "us-east-1"
    access: str = "private"


class AwsRdsTemplate(ResourceTemplate):
    kind: Literal["AWS/RDS"] = "AWS/RDS"
    engine: str = "postgres"
    instance_class: str = "db.t3.micro"
    storage: str = "20"


class AwsVpcTemplate(ResourceTemplate):
    kind: Literal["AWS/VPC"] = "AWS/VPC"
    cidr_block: str = "10.0.0.0/16"
    region: str = "us-east-1"


class AwsLambdaTemplate(ResourceTemplate):
    kind: Literal["AWS/Lambda"] = "AWS/Lambda"
    runtime: str = "python3.12"
    memory_mb: str = "128"
    timeout_seconds: str = "3"


class AwsElbTemplate(ResourceTemplate):
    kind: Literal["AWS/ELB"] = "AWS/ELB"
    type: str = "application"
    scheme: str = "internet-facing"
    listener_port: str = "80"


# === Azure ===

class AzureVmTemplate(ResourceTemplate):
    kind: Literal["Azure/VM"] = "Azure/VM"
    size: str = "Standard_B1s"
    image: str = "UbuntuLTS"
    region: str = "eastus"


class AzureBlobTemplate(ResourceTemplate):
    kind: Literal["Azure/Blob"] = "Azure/Blob"
    account_name: str = ""
    access_tier: str = "Hot"
    replication: str = "LRS"


class AzureSqlTemplate(ResourceTemplate):
    kind: Literal["Azure/SQL"] = "Azure/SQL"
    edition: str = "Standard"
    service_objective: str = "S0"
    region: str = "eastus"


class AzureVnetTemplate(ResourceTemplate):
    kind: Literal["Azure/VNet"] = "Azure/VNet"
    address_space: str = "10.1.0.0/16"
    region: str = "eastus"


class AzureFunctionsTemplate(ResourceTemplate):
    kind: Literal["Azure/Functions"] = "Azure/Functions"
    runtime: str = "python"
    plan: str = "Consumption"
    region: str = "eastus"


class AzureLbTemplate(ResourceTemplate):
    kind: Literal["Azure/LB"] = "Azure/LB"
    sku: str = "Standard"
    frontend_port: str = "80"


# === GCP ===

class GcpComputeTemplate(ResourceTemplate):
    kind: Literal["GCP/Compute"] = "GCP/Compute"
    machine_type: str = "e2-micro"
    image: str = "debian-cloud/debian-10"
    zone: str = "us-central1-a"


class GcpStorageTemplate(ResourceTemplate):
    kind: Literal["GCP/Storage"] = "GCP/Storage"
    bucket_name: str = ""
    location: str = "US"
    storage_class: str = "STANDARD"


class GcpSqlTemplate(ResourceTemplate):
    kind: Literal["GCP/SQL"] = "GCP/SQL"
    database_version: str = "POSTGRES_15"
    tier: str = "db-f1-micro"
    region: str = "us-central1"


class GcpVpcTemplate(ResourceTemplate):
    kind: Literal["GCP/VPC"] = "GCP/VPC"
    routing_mode: str = "REGIONAL"
    auto_create_subnetworks: str = "false"


class GcpFunctionsTemplate(ResourceTemplate):
    kind: Literal["GCP/Functions"] = "GCP/Functions"
    runtime: str = "python312"
    memory: str = "256MB"
    region: str = "us-central1"


class GcpLbTemplate(ResourceTemplate):
    kind: Literal["GCP/LB"] = "GCP/LB"
    scheme: str = "EXTERNAL"
    port: str = "80"


# === Kubernetes ===

class K8sPodTemplate(ResourceTemplate):
    kind: Literal["Kubernetes/Pod"] = "Kubernetes/Pod"
    image: str = "nginx:latest"
    replicas: str = "1"


class K8sServiceTemplate(ResourceTemplate):
    kind: Literal["Kubernetes/Service"] = "Kubernetes/Service"
    type: str = "ClusterIP"
    port: str = "80"


class K8sDeploymentTemplate(ResourceTemplate):
    kind: Literal["Kubernetes/Deployment"] = "Kubernetes/Deployment"
    image: str = "nginx:latest"
    replicas: str = "3"


class K8sConfigMapTemplate(ResourceTemplate):
    kind: Literal["Kubernetes/ConfigMap"] = "Kubernetes/ConfigMap"
    namespace: str = "default"
    data: str = ""


class K8sSecretTemplate(ResourceTemplate):
    kind: Literal["Kubernetes/Secret"] = "Kubernetes/Secret"
    namespace: str = "default"
    type: str = "Opaque"


class K8sIngressTemplate(ResourceTemplate):
    kind: Literal["Kubernetes/Ingress"] = "Kubernetes/Ingress"
    host: str = ""
    path: str = "/"
    ingress_class: str = "nginx"


ResourceDefaults = Annotated[
    Union[
        AwsEc2Template, AwsS3Template, AwsRdsTemplate,
        AwsVpcTemplate, AwsLambdaTemplate, AwsElbTemplate,
        AzureVmTemplate, AzureBlobTemplate, AzureSqlTemplate,
        AzureVnetTemplate, AzureFunctionsTemplate, AzureLbTemplate,
        GcpComputeTemplate, GcpStorageTemplate, GcpSqlTemplate,
        GcpVpcTemplate, GcpFunctionsTemplate, GcpLbTemplate,
        K8sPodTemplate, K8sServiceTemplate, K8sDeploymentTemplate,
        K8sConfigMapTemplate, K8sSecretTemplate, K8sIngressTemplate,
    ],
    Field(discriminator="kind"),
]


class ResourceType(BaseModel):
    """A catalog entry: what a dropped item *is*."""

    model_config = ConfigDict(frozen=True, use_enum_values=False)

    provider: Provider = Field(..., description="Provider namespace")
    name: str = Field(..., description="Resource type name, e.g. 'EC2'")
    category: ResourceCategory = Field(..., description="Category for connection rules")
    template: ResourceDefaults = Field(..., description="Default configuration template")

    @property
    def key(self) -> str:
        return f"{self.provider.value}/{self.name}"

    def default_properties(self) -> Dict[str, str]:
        return self.template.as_properties()
