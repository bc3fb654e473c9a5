from .dashboard_service import DashboardService, DashboardSettings, FileError, LoadReport
from .store import CampaignStore

__all__ = [
    "CampaignStore",
    "DashboardService",
    "DashboardSettings",
    "FileError",
    "LoadReport",
]
