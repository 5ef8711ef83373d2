import asyncio
import os
import platform
import stat
import sys
import tarfile
import tempfile

import aiohttp

from devnet_sdk.constants import (
    DEFAULT_HTTP_TIMEOUT,
    DEVNET_ARCHIVE_NAME,
    DEVNET_DOWNLOAD_URL,
    DEVNET_EXECUTABLE_NAME,
    DEVNET_RELEASES_URL,
    DEVNET_VERSIONS_DIR_NAME,
)
from devnet_sdk.exceptions import DevnetError, GithubError
from devnet_sdk.logging import get_devnet_logger

logger = get_devnet_logger()

DOWNLOAD_CHUNK_SIZE = 64 * 1024


class VersionHandler:
    """
    Fetches precompiled Devnet executables from the GitHub releases and
    stores them locally, one directory per version.
    """

    timeout: float = DEFAULT_HTTP_TIMEOUT
    local_storage_path: str = os.path.join(
        tempfile.gettempdir(), DEVNET_VERSIONS_DIR_NAME
    )

    @classmethod
    def get_version_dir(cls, version: str) -> str:
        return os.path.join(cls.local_storage_path, version)

    @staticmethod
    def get_executable_path(version_dir: str) -> str:
        return os.path.join(version_dir, DEVNET_EXECUTABLE_NAME)

    @classmethod
    async def get_executable(cls, version: str) -> str:
        """
        Ensure that the executable corresponding to the provided `version` exists locally.

        :param version: semver string with a prepended "v" (e.g. "v1.2.3");
            should be available in https://github.com/0xSpaceShard/starknet-devnet/releases
        :return: the path to the executable corresponding to the version
        """
        version_dir = cls.get_version_dir(version)
        executable = cls.get_executable_path(version_dir)
        if os.path.exists(executable):
            logger.debug(f"Using cached Devnet {version} at {executable}")
            return executable

        executable_url = await cls.get_archived_executable_url(version)
        archive_path = await cls.fetch_archived_executable(executable_url, version_dir)
        await asyncio.to_thread(cls.extract, archive_path, version_dir)

        if not os.path.exists(executable):
            raise DevnetError(f"No {DEVNET_EXECUTABLE_NAME} found in {archive_path}")
        os.chmod(executable, os.stat(executable).st_mode | stat.S_IXUSR)
        return executable

    @staticmethod
    def get_compatible_arch() -> str:
        machine = platform.machine().lower()
        match machine:
            case "arm64" | "aarch64":
                return "aarch64"
            case "x86_64" | "amd64":
                return "x86_64"
            case _:
                raise DevnetError(f"Incompatible architecture: {machine}")

    @staticmethod
    def get_compatible_platform() -> str:
        match sys.platform:
            case str(name) if name.startswith("linux"):
                return "linux-gnu"
            case "darwin":
                return "darwin"
            case _:
                raise DevnetError(f"Incompatible platform: {sys.platform}")

    @classmethod
    async def get_archived_executable_url(cls, version: str) -> str:
        """
        Check that `version` is released and build the URL of its archived executable.
        """
        async with aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=cls.timeout)
        ) as session:
            async with session.get(DEVNET_RELEASES_URL) as response_raw:
                if response_raw.status != 200:
                    raise GithubError(response_raw.reason or str(response_raw.status))
                releases = await response_raw.json(content_type=None)

        if not isinstance(releases, list):
            raise GithubError(f"Invalid response: {releases}")

        if not any(release.get("name") == version for release in releases):
            raise GithubError(
                "Version not found. If specifying an exact version, make sure you "
                "prepended the 'v' and that the version really exists in "
                f"{DEVNET_RELEASES_URL}."
            )

        arch = cls.get_compatible_arch()
        compatible_platform = cls.get_compatible_platform()
        return (
            f"{DEVNET_DOWNLOAD_URL}/{version}/"
            f"starknet-devnet-{arch}-unknown-{compatible_platform}.tar.gz"
        )

    @classmethod
    async def fetch_archived_executable(cls, url: str, version_dir: str) -> str:
        """
        :param url: the url of the archived executable
        :param version_dir: the directory where the archive is written and extracted
        :return: the path where the archive was stored
        """
        async with aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=None, sock_read=cls.timeout)
        ) as session:
            async with session.get(url) as response_raw:
                if response_raw.status == 404:
                    raise GithubError(f"Not found: {url}")
                if response_raw.status != 200:
                    raise GithubError(response_raw.reason or str(response_raw.status))

                os.makedirs(version_dir, exist_ok=True)
                archive_path = os.path.join(version_dir, DEVNET_ARCHIVE_NAME)
                logger.info(f"Downloading {url} to {archive_path}")
                with open(archive_path, "wb") as archive:
                    async for chunk in response_raw.content.iter_chunked(
                        DOWNLOAD_CHUNK_SIZE
                    ):
                        archive.write(chunk)

        return archive_path

    @staticmethod
    def extract(archive_path: str, target_dir: str) -> None:
        """
        Extract the content of the archive.

        :param archive_path: the local path of the archive
        :param target_dir: where the content is extracted
        """
        with tarfile.open(archive_path, "r:gz") as archive:
            archive.extractall(target_dir, filter="data")
