"""Service layer — export and import operations returning ServiceResult."""

from ctdata.services.export import ExportService
from ctdata.services.importer import ImportAttempt, ImportService
from ctdata.services.merge import MergeEngine, MergeReport
from ctdata.services.result import ServiceError, ServiceResult

__all__ = [
    "ExportService",
    "ImportAttempt",
    "ImportService",
    "MergeEngine",
    "MergeReport",
    "ServiceError",
    "ServiceResult",
]
