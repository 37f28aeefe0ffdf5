from typing import Optional

import httpx
from fastapi import Depends

from synesthesia.services.downloader import AudioDownloader
from synesthesia.services.file_manager import FileManager
from synesthesia.services.orchestrator import StemSeparationService


class Services:
    def __init__(self):
        self.http_client: Optional[httpx.AsyncClient] = None
        self.separation_service: Optional[StemSeparationService] = None
        self.downloader: Optional[AudioDownloader] = None
        self.file_manager: Optional[FileManager] = None

    async def close(self):
        """Close all services"""
        if self.http_client:
            await self.http_client.aclose()
            self.http_client = None


services = Services()


def get_separation_service() -> Optional[StemSeparationService]:
    return services.separation_service


def get_downloader() -> Optional[AudioDownloader]:
    return services.downloader


def get_file_manager() -> Optional[FileManager]:
    return services.file_manager


SeparationServiceDep = Depends(get_separation_service)
DownloaderDep = Depends(get_downloader)
FileManagerDep = Depends(get_file_manager)
