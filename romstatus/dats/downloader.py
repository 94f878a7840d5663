import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

import requests

from romstatus.common.exceptions import DownloadError
from romstatus.dats.models import DAT
from romstatus.dats.parser import parse_dat_file

logger = logging.getLogger(__name__)


def is_url(source: str) -> bool:
    return urlparse(source).scheme in ("http", "https")


class DatDownloader:
    """Fetch DATs given as http(s) URLs into a local cache directory."""

    def __init__(self, cache_dir: Path):
        self.cache_dir = cache_dir
        self.session = requests.Session()
        # Set up retry strategy
        adapter = requests.adapters.HTTPAdapter(max_retries=3)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    def cache_path_for(self, url: str) -> Path:
        filename = unquote(Path(urlparse(url).path).name) or "download.dat"
        return self.cache_dir / filename

    def fetch(self, url: str) -> Path:
        """
        Download a DAT and return its cached path.
        Raises DownloadError on any HTTP or connection failure.
        """
        dest_file = self.cache_path_for(url)

        try:
            logger.debug(f"Downloading {url}...")
            resp = self.session.get(url, timeout=30)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise DownloadError(url, str(e)) from e

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        dest_file.write_bytes(resp.content)
        logger.debug(f"Saved to {dest_file}")
        return dest_file


def load_dat(source: str, cache_dir: Path) -> DAT:
    """Parse a DAT from a local path or an http(s) URL."""
    if is_url(source):
        return parse_dat_file(DatDownloader(cache_dir).fetch(source))
    return parse_dat_file(Path(source))
