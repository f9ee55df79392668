from dataclasses import dataclass

from src.profile_service.api.http.metrics import MetricsSink
from src.profile_service.core.services import DbSessionService, ProfileService


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    profile_service: ProfileService
    metrics: MetricsSink
