"""Data models"""

from leasedocs.models.template import (
    TemplateType,
    Template,
    TemplateFilter,
    TemplateStats,
)
from leasedocs.models.document import (
    DocumentType,
    DocumentStatus,
    DownloadFormat,
    Credential,
    Document,
    DocumentFilter,
    DocumentStats,
    DownloadResult,
)
from leasedocs.models.contract import (
    ContractKind,
    FixedCompensation,
    PercentageCompensation,
    Compensation,
    Counterpart,
    PropertyInfo,
    ContractForm,
    GeneratedContract,
)

__all__ = [
    # Template
    "TemplateType",
    "Template",
    "TemplateFilter",
    "TemplateStats",
    # Document
    "DocumentType",
    "DocumentStatus",
    "DownloadFormat",
    "Credential",
    "Document",
    "DocumentFilter",
    "DocumentStats",
    "DownloadResult",
    # Contract
    "ContractKind",
    "FixedCompensation",
    "PercentageCompensation",
    "Compensation",
    "Counterpart",
    "PropertyInfo",
    "ContractForm",
    "GeneratedContract",
]
